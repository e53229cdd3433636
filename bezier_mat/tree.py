"""Assembly of the MAT circles into a tree and its traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from .model import NO_HANDLE, MatCircle
from .shape import Shape

logger = logging.getLogger(__name__)


@dataclass
class MatNode:
    index: int
    handle: int
    circle: MatCircle
    branches: List[int] = field(default_factory=list)


@dataclass
class MatTree:
    """Spanning tree over the live circles.

    ``branches`` hold node indices. Adjacencies that would close a cycle
    (around holes) are kept in ``cut_links`` as circle-handle pairs.
    """

    nodes: List[MatNode] = field(default_factory=list)
    start: Optional[int] = None
    cut_links: List[Tuple[int, int]] = field(default_factory=list)
    unreachable: List[int] = field(default_factory=list)

    def node_for_circle(self, handle: int) -> Optional[MatNode]:
        for node in self.nodes:
            if node.handle == handle:
                return node
        return None

    def edges(self) -> List[Tuple[int, int]]:
        out: List[Tuple[int, int]] = []
        for node in self.nodes:
            for branch in node.branches:
                if node.index < branch:
                    out.append((node.handle, self.nodes[branch].handle))
        return out


def circle_adjacency(shape: Shape) -> Dict[int, List[int]]:
    """Circles linked by a contact whose loop successor lies on the other circle."""

    ordering = shape.ordering
    live = ordering.live_circles()
    adjacency: Dict[int, List[int]] = {handle: [] for handle in live}
    for handle in live:
        for contact in ordering.circle(handle).contacts:
            other = ordering.circle_of(ordering.next(contact))
            if other == handle or other not in adjacency:
                continue
            if other not in adjacency[handle]:
                adjacency[handle].append(other)
            if handle not in adjacency[other]:
                adjacency[other].append(handle)
    return adjacency


def build_tree(shape: Shape) -> MatTree:
    """Depth-first spanning tree rooted at the circle of loop 0's head contact."""

    ordering = shape.ordering
    adjacency = circle_adjacency(shape)
    tree = MatTree()
    if not adjacency:
        logger.info("build_tree: no circles")
        return tree

    head = ordering.heads[0]
    root = ordering.circle_of(head) if head != NO_HANDLE else min(adjacency)

    node_of: Dict[int, int] = {}
    cut: Set[Tuple[int, int]] = set()
    stack: List[Tuple[int, Optional[int]]] = [(root, None)]
    while stack:
        handle, parent = stack.pop()
        if handle in node_of:
            if parent is not None:
                cut.add((min(handle, parent), max(handle, parent)))
            continue

        index = len(tree.nodes)
        node_of[handle] = index
        tree.nodes.append(MatNode(index=index, handle=handle, circle=ordering.circle(handle)))
        if parent is not None:
            parent_index = node_of[parent]
            tree.nodes[parent_index].branches.append(index)
            tree.nodes[index].branches.append(parent_index)

        for neighbour in reversed(adjacency[handle]):
            if neighbour == parent:
                continue
            if neighbour in node_of:
                cut.add((min(handle, neighbour), max(handle, neighbour)))
            else:
                stack.append((neighbour, handle))

    tree.start = 0
    tree.cut_links = sorted(cut)
    tree.unreachable = sorted(handle for handle in adjacency if handle not in node_of)
    if tree.unreachable:
        logger.warning("build_tree: %d circle(s) not connected to the root", len(tree.unreachable))
    logger.info(
        "build_tree: %d node(s), %d cut link(s)",
        len(tree.nodes),
        len(tree.cut_links),
    )
    return tree


def traverse(tree: MatTree, fn: Callable[[MatNode, Optional[MatNode]], None]) -> None:
    """Call ``fn(node, parent)`` on every node in pre-order, never walking back."""

    if tree.start is None:
        return
    stack: List[Tuple[int, Optional[int]]] = [(tree.start, None)]
    while stack:
        index, parent = stack.pop()
        node = tree.nodes[index]
        fn(node, None if parent is None else tree.nodes[parent])
        for branch in reversed(node.branches):
            if branch != parent:
                stack.append((branch, index))


__all__ = [
    "MatNode",
    "MatTree",
    "build_tree",
    "circle_adjacency",
    "traverse",
]
