"""
Path Walker Module

Walks the adjacency graph into ordered paths. Every edge is consumed by
exactly one path; a path ends when it returns to its first point (closed)
or when no legal next point exists (open).

Walk rules:
1. Start at the lowest-id point that still has an unprocessed edge
2. Candidates are neighbors over unprocessed edges, excluding points
   already visited in this path (the first point excepted)
3. Choose by (distance between the quantized output coordinates,
   collinear-with-incoming-edge when tie-breaking on alignment, point id)
4. Stop on loop closure or dead end
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..graph.builder import AdjacencyGraph, Edge, edge_key
from ..graph.collinearity import are_collinear
from ..graph.tolerance import Point3

logger = logging.getLogger(__name__)


@dataclass
class Path:
    """An ordered walk through canonical points."""
    point_ids: List[int] = field(default_factory=list)
    coords: List[Point3] = field(default_factory=list)
    closed: bool = False

    def __len__(self) -> int:
        return len(self.point_ids)

    @property
    def edge_count(self) -> int:
        return max(0, len(self.point_ids) - 1)

    @property
    def distinct_points(self) -> int:
        return len(set(self.point_ids))

    @property
    def edges(self) -> List[Edge]:
        return [edge_key(a, b) for a, b in zip(self.point_ids, self.point_ids[1:])]


class PathWalker:
    """
    Deterministic walker over one layer's graph.

    The set of unprocessed edges is the walker's worklist; it is drained one
    edge at a time and each consumed edge is removed before the next step.
    """

    def __init__(self, graph: AdjacencyGraph, alignment_tiebreak: bool = False):
        """
        Initialize the walker.

        Args:
            graph: Adjacency graph to walk (not modified)
            alignment_tiebreak: Deprioritize candidates collinear with the
                incoming edge when distances tie
        """
        self.graph = graph
        self.alignment_tiebreak = alignment_tiebreak
        self.tolerance = graph.tolerance
        self.precision = graph.tolerance.precision
        self._remaining: Set[Edge] = set(graph.edges())
        self._quantized: Dict[int, Point3] = {}

    @property
    def remaining_edges(self) -> int:
        return len(self._remaining)

    def walk(self) -> List[Path]:
        """
        Consume every edge of the graph into paths.

        Returns:
            Paths in the order they were walked
        """
        paths = []
        while self._remaining:
            start = min(a for a, _ in self._remaining)
            paths.append(self._walk_from(start))

        closed = sum(1 for p in paths if p.closed)
        logger.debug(f"Walker: {len(paths)} paths ({closed} closed, {len(paths) - closed} open)")
        return paths

    def _walk_from(self, start: int) -> Path:
        point_ids = [start]
        visited = {start}
        previous: Optional[int] = None
        current = start
        closed = False

        while True:
            candidates = self._candidates(current, point_ids, visited)
            if not candidates:
                break

            nxt = self._choose(previous, current, candidates)
            self._remaining.discard(edge_key(current, nxt))
            point_ids.append(nxt)

            if nxt == start and len(point_ids) > 3:
                closed = True
                break

            visited.add(nxt)
            previous, current = current, nxt

        return Path(
            point_ids=point_ids,
            coords=[self.graph.coords(i) for i in point_ids],
            closed=closed,
        )

    def _candidates(self, current: int, point_ids: List[int], visited: Set[int]) -> List[int]:
        # The previous point is excluded implicitly: its edge was just consumed
        start = point_ids[0]
        candidates = []
        for n in self.graph.neighbors(current):
            if edge_key(current, n) not in self._remaining:
                continue
            if n in visited and not (n == start and len(point_ids) >= 3):
                continue
            candidates.append(n)
        return candidates

    def _choose(self, previous: Optional[int], current: int, candidates: List[int]) -> int:
        if len(candidates) == 1:
            return candidates[0]
        return min(candidates, key=lambda c: self._sort_key(previous, current, c))

    def _output_coords(self, point_id: int) -> Point3:
        if point_id not in self._quantized:
            self._quantized[point_id] = self.tolerance.quantize(self.graph.coords(point_id))
        return self._quantized[point_id]

    def _sort_key(self, previous: Optional[int], current: int, candidate: int) -> Tuple[float, int, int]:
        # Measured on output coordinates so float noise below the grid cannot split a tie
        distance = math.dist(self._output_coords(current), self._output_coords(candidate))

        straight = 0
        if self.alignment_tiebreak and previous is not None:
            here = self.graph.coords(current)
            there = self.graph.coords(candidate)
            if are_collinear(self.graph.coords(previous), here, there, self.precision):
                straight = 1

        return (distance, straight, candidate)


def walk(graph: AdjacencyGraph, alignment_tiebreak: bool = False) -> List[Path]:
    """Walk a graph into paths with a fresh PathWalker."""
    return PathWalker(graph, alignment_tiebreak=alignment_tiebreak).walk()
