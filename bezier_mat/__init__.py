from .config import MatOptions, get_default_options, set_default_options, CROSS_TANGENT_LIMIT
from .model import (
    BoundaryPiece,
    Circle,
    ContactOrderError,
    ContactPoint,
    Corner,
    JunctionKey,
    MatCircle,
    PointOnShape,
    ShapeError,
)
from .contacts import ContactOrdering, compare_points
from .shape import Shape
from .corners import CornerClassification, classify_junction, classify_shape
from .two_prong import TwoProngResult, add_1_prong, add_2_prong, find_2_prong
from .three_prong import ThreeProngResult, add_3_prong, find_3_prong
from .tree import MatNode, MatTree, build_tree, traverse
from .smoothen import SmoothedMat, smoothen
from .debug import DebugSink, RecordingDebugSink
from .find_mat import MatResult, find_mat
from .shape_io import dump_result, load_loops, result_to_dict

__all__ = [
    'MatOptions',
    'get_default_options',
    'set_default_options',
    'CROSS_TANGENT_LIMIT',
    'BoundaryPiece',
    'Circle',
    'ContactOrderError',
    'ContactPoint',
    'Corner',
    'JunctionKey',
    'MatCircle',
    'PointOnShape',
    'ShapeError',
    'ContactOrdering',
    'compare_points',
    'Shape',
    'CornerClassification',
    'classify_junction',
    'classify_shape',
    'TwoProngResult',
    'add_1_prong',
    'add_2_prong',
    'find_2_prong',
    'ThreeProngResult',
    'add_3_prong',
    'find_3_prong',
    'MatNode',
    'MatTree',
    'build_tree',
    'traverse',
    'SmoothedMat',
    'smoothen',
    'DebugSink',
    'RecordingDebugSink',
    'MatResult',
    'find_mat',
    'dump_result',
    'load_loops',
    'result_to_dict',
]
