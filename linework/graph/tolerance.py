"""
Tolerance Policy Module

Value-comparison policies deciding when two coordinates are the same point.
Coordinates are never compared with native equality; every comparison goes
through a policy so the rule can be swapped and tested on its own.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple, Type

import numpy as np

from ..constants import MIN_PRECISION, DEFAULT_TOLERANCE_POLICY
from ..diagnostics import ConfigError

logger = logging.getLogger(__name__)

Point3 = Tuple[float, float, float]


def as_point3(point: Sequence[float]) -> Point3:
    """
    Convert a 2D or 3D coordinate sequence to an (x, y, z) float tuple.

    Args:
        point: Sequence of 2 or 3 numbers

    Returns:
        (x, y, z) tuple, z defaults to 0.0
    """
    values = [float(v) for v in point]
    if len(values) == 2:
        values.append(0.0)
    if len(values) != 3:
        raise ValueError(f"Expected a 2D or 3D point, got {len(values)} components")
    return (values[0], values[1], values[2])


def precision_decimals(precision: float) -> int:
    """Number of decimal places needed to print multiples of precision."""
    text = f"{precision:.12f}".rstrip("0")
    return len(text.split(".")[1])


class TolerancePolicy:
    """
    Base policy: Euclidean 3D distance compared against a precision.

    Subclasses override `distances` and/or `match_mask`.
    """

    name = "euclidean"

    def __init__(self, precision: float = MIN_PRECISION):
        if precision is None or precision <= 0:
            raise ConfigError(f"Tolerance precision must be positive: {precision}")
        self.precision = float(precision)
        self.decimals = precision_decimals(self.precision)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(precision={self.precision})"

    def distances(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        """Distance from every row of coords (N x 3) to point."""
        return np.linalg.norm(coords - np.asarray(point, dtype=float), axis=1)

    def match_mask(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        """Boolean mask of the rows of coords considered equal to point."""
        return self.distances(coords, point) < self.precision

    def distance(self, p: Sequence[float], q: Sequence[float]) -> float:
        return float(self.distances(np.asarray([p], dtype=float), q)[0])

    def matches(self, p: Sequence[float], q: Sequence[float]) -> bool:
        return bool(self.match_mask(np.asarray([p], dtype=float), q)[0])

    def quantize_array(self, coords: np.ndarray) -> np.ndarray:
        """Snap coordinates to the precision grid."""
        snapped = np.round(np.asarray(coords, dtype=float) / self.precision) * self.precision
        # + 0.0 turns -0.0 into 0.0
        return np.round(snapped, self.decimals) + 0.0

    def quantize(self, point: Sequence[float]) -> Point3:
        return as_point3(self.quantize_array(np.asarray(point, dtype=float)).tolist())

    def quantize_many(self, points: Iterable[Sequence[float]]) -> List[Point3]:
        rows = [as_point3(p) for p in points]
        if not rows:
            return []
        return [tuple(row) for row in self.quantize_array(np.asarray(rows)).tolist()]


class EuclideanTolerance(TolerancePolicy):
    """Points are equal when their Euclidean distance is below precision."""
    name = "euclidean"


class SquaredDistanceTolerance(TolerancePolicy):
    """Same predicate as Euclidean, compared on squared distances."""

    name = "squared"

    def distances(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        delta = coords - np.asarray(point, dtype=float)
        return np.einsum("ij,ij->i", delta, delta)

    def match_mask(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        return self.distances(coords, point) < self.precision ** 2


class GridSnapTolerance(TolerancePolicy):
    """Points are equal when they snap to the same precision grid cell."""

    name = "grid"

    def match_mask(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        snapped = self.quantize_array(coords)
        target = self.quantize_array(np.asarray(point, dtype=float))
        return np.all(snapped == target, axis=1)


class ExactTolerance(TolerancePolicy):
    """Raw coordinate equality; precision only drives output quantization."""

    name = "exact"

    def match_mask(self, coords: np.ndarray, point: Sequence[float]) -> np.ndarray:
        return np.all(coords == np.asarray(point, dtype=float), axis=1)


TOLERANCE_POLICIES: Dict[str, Type[TolerancePolicy]] = {
    "euclidean": EuclideanTolerance,
    "squared": SquaredDistanceTolerance,
    "grid": GridSnapTolerance,
    "exact": ExactTolerance,
}


def make_tolerance(
    name: str = DEFAULT_TOLERANCE_POLICY,
    precision: float = MIN_PRECISION
) -> TolerancePolicy:
    """
    Build a tolerance policy by name.

    Args:
        name: One of TOLERANCE_POLICIES
        precision: Snapping tolerance in drawing units

    Returns:
        TolerancePolicy instance

    Raises:
        ConfigError: If the name is unknown or precision is not positive
    """
    key = (name or DEFAULT_TOLERANCE_POLICY).lower().strip()
    policy_class = TOLERANCE_POLICIES.get(key)
    if policy_class is None:
        raise ConfigError(
            f"Unknown tolerance policy: {name}. "
            f"Expected one of: {', '.join(sorted(TOLERANCE_POLICIES))}"
        )
    return policy_class(precision)
