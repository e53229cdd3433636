"""Loop-order and circle-order bookkeeping of contact points.

Contacts and circles live in flat arenas and refer to each other by integer
handle. Two independent circular views run over the same contact arena:

* loop order, one circular list per boundary loop, ascending along the
  boundary from the loop head (its smallest element);
* circle order, one cycle per :class:`MatCircle`, clockwise about the center.
"""

from __future__ import annotations

import logging
import math
from typing import Iterator, List, Optional, Sequence, Tuple

from .model import NO_HANDLE, ContactOrderError, ContactPoint, MatCircle, PointOnShape
from .vector import Point2D

logger = logging.getLogger(__name__)

Delta = Tuple[int, int]


def compare_points(a: PointOnShape, b: PointOnShape) -> int:
    """Loop-order comparison of two points on the same loop.

    Returns a negative number, zero or a positive number; zero means the
    points are coincident for ordering purposes.
    """

    for lhs, rhs in (
        (a.curve_index, b.curve_index),
        (a.t, b.t),
        (a.order, b.order),
        (a.order2, b.order2),
    ):
        if lhs < rhs:
            return -1
        if lhs > rhs:
            return 1
    return 0


def _same_position(a: PointOnShape, b: PointOnShape) -> bool:
    return a.curve_index == b.curve_index and a.t == b.t


def _clockwise_key(center: Point2D, p: Point2D) -> float:
    return -math.atan2(p[1] - center[1], p[0] - center[0])


class ContactOrdering:
    """Arena of contact points and circles with their two orderings."""

    def __init__(self, loop_count: int):
        self.contacts: List[ContactPoint] = []
        self.circles: List[MatCircle] = []
        self.heads: List[int] = [NO_HANDLE] * loop_count

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    def contact(self, handle: int) -> ContactPoint:
        try:
            return self.contacts[handle]
        except IndexError as exc:
            raise ContactOrderError(f"unknown contact handle {handle}") from exc

    def circle(self, handle: int) -> MatCircle:
        try:
            return self.circles[handle]
        except IndexError as exc:
            raise ContactOrderError(f"unknown circle handle {handle}") from exc

    def circle_of(self, handle: int) -> int:
        return self.contacts[handle].circle

    def next(self, handle: int) -> int:
        return self.contacts[handle].next

    def prev(self, handle: int) -> int:
        return self.contacts[handle].prev

    def next_on_circle(self, handle: int) -> int:
        return self.contacts[handle].next_on_circle

    def prev_on_circle(self, handle: int) -> int:
        return self.contacts[handle].prev_on_circle

    def iter_loop(self, loop_index: int) -> Iterator[int]:
        head = self.heads[loop_index]
        if head == NO_HANDLE:
            return
        handle = head
        guard = len(self.contacts)
        while True:
            yield handle
            handle = self.contacts[handle].next
            if handle == head:
                return
            guard -= 1
            if guard < 0:
                raise ContactOrderError(f"loop {loop_index} contact list does not close")

    def loop_contacts(self, loop_index: int) -> List[int]:
        return list(self.iter_loop(loop_index))

    def live_circles(self) -> List[int]:
        return [idx for idx, circle in enumerate(self.circles) if circle.contacts]

    # ------------------------------------------------------------------
    # loop order
    # ------------------------------------------------------------------
    def neighbours(self, point: PointOnShape) -> Tuple[Optional[int], Optional[int]]:
        """Contacts immediately before and after ``point`` in its loop."""

        head = self.heads[point.loop_index]
        if head == NO_HANDLE:
            return None, None

        prev: Optional[int] = None
        for handle in self.iter_loop(point.loop_index):
            if compare_points(self.contacts[handle].point, point) <= 0:
                prev = handle
            else:
                break
        if prev is None:
            prev = self.contacts[head].prev
        return prev, self.contacts[prev].next

    def insert_after(self, point: PointOnShape, after: Optional[int]) -> int:
        """Insert ``point`` right after ``after`` in loop order."""

        handle = len(self.contacts)
        contact = ContactPoint(point=point)
        self.contacts.append(contact)
        k = point.loop_index

        if after is None or after == NO_HANDLE:
            if self.heads[k] != NO_HANDLE:
                raise ContactOrderError(f"loop {k} is not empty; an anchor contact is required")
            contact.prev = handle
            contact.next = handle
            self.heads[k] = handle
            return handle

        anchor = self.contacts[after]
        if anchor.loop_index != k:
            raise ContactOrderError(
                f"cannot insert a loop {k} point after a loop {anchor.loop_index} contact"
            )
        following = anchor.next
        contact.prev = after
        contact.next = following
        anchor.next = handle
        self.contacts[following].prev = handle

        head = self.heads[k]
        order = compare_points(point, self.contacts[head].point)
        # A contact tied with the head and placed right before it leads the loop.
        if order < 0 or (order == 0 and following == head):
            self.heads[k] = handle
        return handle

    def insert_in_delta(self, point: PointOnShape, delta: Delta) -> int:
        """Insert ``point`` into the boundary piece between the contacts of ``delta``.

        A point at the same curve position as an end of the piece but ordered
        outside it (tie-break noise at a dull corner) takes that end's order.
        """

        start, end = delta
        start_point = self.contacts[start].point
        end_point = self.contacts[end].point
        if _same_position(point, start_point) and compare_points(point, start_point) < 0:
            point.order, point.order2 = start_point.order, start_point.order2
        elif _same_position(point, end_point) and compare_points(point, end_point) > 0:
            point.order, point.order2 = end_point.order, end_point.order2
        return self.insert_after(point, start)

    def insert_sorted(self, point: PointOnShape) -> Optional[int]:
        """Insert ``point`` at its boundary position.

        Returns ``None`` without inserting when a neighbour is coincident.
        """

        prev, nxt = self.neighbours(point)
        if prev is not None and nxt is not None:
            if compare_points(self.contacts[prev].point, point) == 0:
                return None
            if compare_points(point, self.contacts[nxt].point) == 0:
                return None
        return self.insert_after(point, prev)

    def unlink(self, handle: int) -> None:
        """Remove a contact from both orderings."""

        contact = self.contacts[handle]
        if not contact.alive:
            return
        k = contact.loop_index
        if contact.next == handle:
            self.heads[k] = NO_HANDLE
        else:
            self.contacts[contact.prev].next = contact.next
            self.contacts[contact.next].prev = contact.prev
            if self.heads[k] == handle:
                self.heads[k] = contact.next

        if contact.next_on_circle not in (NO_HANDLE, handle):
            self.contacts[contact.prev_on_circle].next_on_circle = contact.next_on_circle
            self.contacts[contact.next_on_circle].prev_on_circle = contact.prev_on_circle
        if contact.circle != NO_HANDLE:
            circle = self.circles[contact.circle]
            if handle in circle.contacts:
                circle.contacts.remove(handle)

        contact.prev = contact.next = NO_HANDLE
        contact.prev_on_circle = contact.next_on_circle = NO_HANDLE
        contact.alive = False

    # ------------------------------------------------------------------
    # circle order
    # ------------------------------------------------------------------
    def add_circle(
        self,
        center: Point2D,
        radius: float,
        contact_handles: Sequence[int],
        *,
        hole_closing: bool = False,
    ) -> int:
        handle = len(self.circles)
        self.circles.append(
            MatCircle(center=center, radius=radius, contacts=list(contact_handles), hole_closing=hole_closing)
        )
        for contact_handle in contact_handles:
            self.contacts[contact_handle].circle = handle
        self.link_circle(handle)
        return handle

    def link_circle(self, circle_handle: int) -> None:
        """Rank the circle's contacts clockwise and close the circle cycle."""

        circle = self.circles[circle_handle]
        ordered = sorted(
            circle.contacts,
            key=lambda h: _clockwise_key(circle.center, self.contacts[h].point.p),
        )
        n = len(ordered)
        for rank, handle in enumerate(ordered):
            contact = self.contacts[handle]
            contact.rank = rank
            contact.next_on_circle = ordered[(rank + 1) % n]
            contact.prev_on_circle = ordered[(rank - 1) % n]
        circle.contacts = ordered

    def remove_circle(self, circle_handle: int) -> None:
        for handle in list(self.circles[circle_handle].contacts):
            self.unlink(handle)
        self.circles[circle_handle].contacts = []

    # ------------------------------------------------------------------
    # regions
    # ------------------------------------------------------------------
    def walk_region(self, start: int) -> List[Delta]:
        """Boundary pieces (δs) of the region whose boundary leaves ``start``.

        From each contact the walk follows the boundary to the next contact
        in loop order, then crosses that contact's circle to its previous
        contact in circle order, until it is back at ``start``.
        """

        deltas: List[Delta] = []
        handle = start
        limit = len(self.contacts) + 1
        while True:
            following = self.contacts[handle].next
            deltas.append((handle, following))
            handle = self.contacts[following].prev_on_circle
            if handle == start:
                return deltas
            if handle == NO_HANDLE or len(deltas) > limit:
                raise ContactOrderError(f"region walk from contact {start} does not close")

    def regions(self) -> List[List[Delta]]:
        """All regions, each reported once, in ascending loop order."""

        seen = set()
        out: List[List[Delta]] = []
        for k in range(len(self.heads)):
            for handle in self.iter_loop(k):
                if handle in seen:
                    continue
                deltas = self.walk_region(handle)
                seen.update(delta[0] for delta in deltas)
                out.append(deltas)
        return out


__all__ = [
    "ContactOrdering",
    "Delta",
    "compare_points",
]
