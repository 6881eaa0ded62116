"""
Adjacency Graph Builder Module

Registers segment endpoints through the point registry and builds an
undirected graph of canonical point ids.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Any, Iterable, List, Optional, Set, Tuple

import numpy as np

from ..constants import EntityKind, WarningKind, DXF_LINE
from ..diagnostics import Diagnostics
from .registry import CanonicalPoint, PointRegistry
from .tolerance import Point3, TolerancePolicy, EuclideanTolerance, as_point3

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


def edge_key(a: int, b: int) -> Edge:
    """Normalize an unordered pair of point ids."""
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class Segment:
    """A straight drawing primitive with its source layer."""
    start: Point3
    end: Point3
    layer: str = ""
    kind: EntityKind = EntityKind.LINE
    source_type: str = DXF_LINE

    def __post_init__(self):
        object.__setattr__(self, "start", as_point3(self.start))
        object.__setattr__(self, "end", as_point3(self.end))

    @property
    def is_line(self) -> bool:
        return self.kind == EntityKind.LINE

    @property
    def length(self) -> float:
        """Calculate segment length."""
        return math.dist(self.start, self.end)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": list(self.start),
            "end": list(self.end),
            "layer": self.layer,
            "kind": self.kind.value,
            "type": self.source_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Segment":
        return cls(
            start=data["start"],
            end=data["end"],
            layer=data.get("layer", ""),
            kind=EntityKind(data.get("kind", EntityKind.LINE.value)),
            source_type=data.get("type", DXF_LINE),
        )


class AdjacencyGraph:
    """
    Undirected simple graph over canonical points.

    Adjacency lives in each CanonicalPoint's neighbor set; this class keeps
    the sets symmetric.
    """

    def __init__(self, registry: Optional[PointRegistry] = None):
        self.registry = registry or PointRegistry()

    @property
    def tolerance(self) -> TolerancePolicy:
        return self.registry.tolerance

    @property
    def points(self) -> List[CanonicalPoint]:
        return self.registry.points

    @property
    def coords_array(self) -> np.ndarray:
        return self.registry.coords_array

    @property
    def edge_count(self) -> int:
        return sum(p.degree for p in self.registry) // 2

    def coords(self, point_id: int) -> Point3:
        return self.registry.coords(point_id)

    def neighbors(self, point_id: int) -> Set[int]:
        return self.registry.point(point_id).neighbors

    def degree(self, point_id: int) -> int:
        return self.registry.point(point_id).degree

    def has_edge(self, a: int, b: int) -> bool:
        return b in self.registry.point(a).neighbors

    def add_edge(self, a: int, b: int) -> bool:
        """Connect two points. Returns False for self-loops and existing edges."""
        if a == b or self.has_edge(a, b):
            return False
        self.registry.point(a).neighbors.add(b)
        self.registry.point(b).neighbors.add(a)
        return True

    def remove_edge(self, a: int, b: int) -> bool:
        if not self.has_edge(a, b):
            return False
        self.registry.point(a).neighbors.discard(b)
        self.registry.point(b).neighbors.discard(a)
        return True

    def edges(self) -> List[Edge]:
        """All edges as sorted (low, high) id pairs."""
        return sorted(
            (p.id, n)
            for p in self.registry
            for n in p.neighbors
            if p.id < n
        )


def build_graph(
    segments: Iterable[Segment],
    tolerance: Optional[TolerancePolicy] = None,
    diagnostics: Optional[Diagnostics] = None
) -> AdjacencyGraph:
    """
    Build the adjacency graph for one layer.

    Non-LINE segments are skipped as unsupported entities. Segments whose
    endpoints snap to the same canonical point are dropped as degenerate.
    Duplicate segments collapse onto one edge.

    Args:
        segments: Input segments in drawing order
        tolerance: Snapping policy (Euclidean MIN_PRECISION by default)
        diagnostics: Optional record receiving warnings and counts

    Returns:
        AdjacencyGraph
    """
    tolerance = tolerance or EuclideanTolerance()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    graph = AdjacencyGraph(PointRegistry(tolerance))

    count = 0
    for index, seg in enumerate(segments):
        count += 1

        if not seg.is_line:
            diagnostics.record(
                WarningKind.UNSUPPORTED_ENTITY,
                f"Skipped {seg.source_type} entity (only straight lines are joined)",
                index,
            )
            continue

        # Checked before registering so no orphan point is left behind
        if tolerance.matches(seg.start, seg.end):
            diagnostics.record(
                WarningKind.DEGENERATE_SEGMENT,
                f"Segment endpoints coincide at {seg.start}",
                index,
            )
            continue

        a = graph.registry.register(seg.start)
        b = graph.registry.register(seg.end)

        if a == b:
            diagnostics.record(
                WarningKind.DEGENERATE_SEGMENT,
                f"Segment endpoints snap to the same point {graph.coords(a)}",
                index,
            )
            continue

        if not graph.add_edge(a, b):
            diagnostics.duplicate_segments += 1

    diagnostics.input_segments += count
    diagnostics.point_count = len(graph.registry)
    diagnostics.edge_count = graph.edge_count

    logger.debug(
        f"Graph: {count} segments -> {diagnostics.point_count} points, "
        f"{diagnostics.edge_count} edges ({diagnostics.duplicate_segments} duplicates)"
    )
    return graph
