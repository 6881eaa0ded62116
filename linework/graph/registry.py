"""
Point Registry Module

Canonicalizes 3D coordinates into unique point identities under a snapping
tolerance. One registry lives for the duration of a single layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Set

import numpy as np

from .tolerance import Point3, TolerancePolicy, EuclideanTolerance, as_point3

logger = logging.getLogger(__name__)


@dataclass
class CanonicalPoint:
    """The single representative of a cluster of nearby input coordinates."""
    id: int
    coords: Point3
    neighbors: Set[int] = field(default_factory=set)

    @property
    def degree(self) -> int:
        return len(self.neighbors)


class PointRegistry:
    """
    Registry of canonical points.

    Every incoming coordinate is compared against all existing canonical
    points. No spatial index is kept; the comparison is a single vectorized
    numpy pass per lookup.
    """

    def __init__(self, tolerance: Optional[TolerancePolicy] = None):
        self.tolerance = tolerance or EuclideanTolerance()
        self._points: List[CanonicalPoint] = []
        self._coords = np.empty((0, 3), dtype=float)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[CanonicalPoint]:
        return iter(self._points)

    @property
    def points(self) -> List[CanonicalPoint]:
        return self._points

    @property
    def coords_array(self) -> np.ndarray:
        """Coordinates of all canonical points as an N x 3 array, indexed by id."""
        return self._coords

    def find(self, point: Sequence[float]) -> Optional[int]:
        """
        Look up the canonical point matching a coordinate.

        When several canonical points match, the nearest one wins and exact
        distance ties go to the lowest id.

        Args:
            point: 2D or 3D coordinate

        Returns:
            Canonical point id, or None if nothing is within tolerance
        """
        if not self._points:
            return None

        p = as_point3(point)
        mask = self.tolerance.match_mask(self._coords, p)
        candidates = np.flatnonzero(mask)
        if candidates.size == 0:
            return None
        if candidates.size == 1:
            return int(candidates[0])

        distances = self.tolerance.distances(self._coords[candidates], p)
        return int(candidates[int(np.argmin(distances))])

    def register(self, point: Sequence[float]) -> int:
        """
        Return the id of the canonical point for a coordinate, creating it if needed.

        Args:
            point: 2D or 3D coordinate

        Returns:
            Canonical point id
        """
        existing = self.find(point)
        if existing is not None:
            return existing

        p = as_point3(point)
        point_id = len(self._points)
        self._points.append(CanonicalPoint(id=point_id, coords=p))
        self._coords = np.vstack([self._coords, np.asarray(p, dtype=float)])
        return point_id

    def point(self, point_id: int) -> CanonicalPoint:
        return self._points[point_id]

    def coords(self, point_id: int) -> Point3:
        return self._points[point_id].coords
