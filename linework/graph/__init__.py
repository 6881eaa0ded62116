# Point snapping and adjacency graph module

from .tolerance import (
    Point3,
    TolerancePolicy,
    EuclideanTolerance,
    SquaredDistanceTolerance,
    GridSnapTolerance,
    ExactTolerance,
    TOLERANCE_POLICIES,
    make_tolerance,
    as_point3,
)

from .registry import (
    CanonicalPoint,
    PointRegistry,
)

from .builder import (
    Edge,
    Segment,
    AdjacencyGraph,
    edge_key,
    build_graph,
)

from .collinearity import (
    is_between,
    are_collinear,
    find_interior_points,
    resolve_collinear,
)

__all__ = [
    # Tolerance
    "Point3",
    "TolerancePolicy",
    "EuclideanTolerance",
    "SquaredDistanceTolerance",
    "GridSnapTolerance",
    "ExactTolerance",
    "TOLERANCE_POLICIES",
    "make_tolerance",
    "as_point3",
    # Registry
    "CanonicalPoint",
    "PointRegistry",
    # Builder
    "Edge",
    "Segment",
    "AdjacencyGraph",
    "edge_key",
    "build_graph",
    # Collinearity
    "is_between",
    "are_collinear",
    "find_interior_points",
    "resolve_collinear",
]
