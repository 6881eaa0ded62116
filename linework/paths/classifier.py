"""
Feature Classifier Module

Turns finished paths into Polygon or LineString features.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from shapely.geometry import LineString, Polygon, mapping

from ..constants import GeometryType
from ..diagnostics import DegenerateGeometryError
from ..graph.tolerance import Point3, TolerancePolicy, EuclideanTolerance
from .walker import Path

logger = logging.getLogger(__name__)

Geometry = Union[Polygon, LineString]


def _as_lists(value):
    """Convert nested coordinate tuples from shapely's mapping() to lists."""
    if isinstance(value, (tuple, list)):
        return [_as_lists(v) for v in value]
    return value


@dataclass(frozen=True)
class Feature:
    """A reconstructed geometry with its properties."""
    geometry: Geometry
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def geometry_type(self) -> str:
        return self.geometry.geom_type

    @property
    def is_polygon(self) -> bool:
        return self.geometry_type == GeometryType.POLYGON

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a GeoJSON Feature dictionary."""
        geom = mapping(self.geometry)
        return {
            "type": "Feature",
            "properties": dict(self.properties),
            "geometry": {
                "type": geom["type"],
                "coordinates": _as_lists(geom["coordinates"]),
            },
        }


def collapse_repeats(coords: List[Point3]) -> List[Point3]:
    """Drop coordinates equal to the one before them."""
    collapsed: List[Point3] = []
    for c in coords:
        if not collapsed or collapsed[-1] != c:
            collapsed.append(c)
    return collapsed


def classify(path: Path, tolerance: Optional[TolerancePolicy] = None) -> Geometry:
    """
    Classify a finished path as a polygon ring or a line string.

    Coordinates are quantized first; neighbouring canonical points that land
    on the same output coordinate are merged. A closed path with at least
    3 distinct output coordinates becomes a Polygon whose last coordinate is
    a copy of the first. Anything else becomes a LineString.

    Args:
        path: Path produced by the walker
        tolerance: Policy used to quantize output coordinates

    Returns:
        shapely Polygon or LineString (3D)

    Raises:
        DegenerateGeometryError: If fewer than 2 distinct output
            coordinates remain
    """
    tolerance = tolerance or EuclideanTolerance()
    coords = collapse_repeats(tolerance.quantize_many(path.coords))

    distinct = len(set(coords))
    if distinct < 2:
        raise DegenerateGeometryError(
            f"Path of {len(path.coords)} point(s) has {distinct} distinct "
            f"output coordinate(s) and cannot form a geometry"
        )

    if path.closed and distinct >= 3:
        ring = coords[:-1] + [coords[0]] if coords[-1] != coords[0] else coords
        return Polygon(ring)

    return LineString(coords)


def build_feature(
    path: Path,
    feature_id: int,
    layer: str,
    feature_type: Optional[str] = None,
    tolerance: Optional[TolerancePolicy] = None
) -> Feature:
    """
    Classify a path and attach its properties.

    Args:
        path: Path produced by the walker
        feature_id: Sequential id within the layer
        layer: Source layer name
        feature_type: Optional caller label (e.g. "BearingWall")
        tolerance: Policy used to quantize output coordinates

    Returns:
        Feature
    """
    geometry = classify(path, tolerance)

    properties: Dict[str, Any] = {"id": feature_id, "layer": layer}
    if feature_type:
        properties["type"] = feature_type

    return Feature(geometry=geometry, properties=properties)
