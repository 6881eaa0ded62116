"""
Pipeline Orchestration Module

Runs the reconstruction stages for each layer:
segments -> point registry/graph -> collinearity -> paths -> features.

No file I/O happens here; readers and writers live in linework.io.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .constants import FIRST_FEATURE_ID, GeometryType, WarningKind
from .config import ReconstructionConfig
from .diagnostics import Diagnostics, DegenerateGeometryError
from .graph.builder import AdjacencyGraph, Segment, build_graph
from .graph.collinearity import resolve_collinear
from .paths.classifier import Feature, build_feature
from .paths.walker import Path, PathWalker

logger = logging.getLogger(__name__)


@dataclass
class LayerResult:
    """Result from reconstructing a single layer."""
    layer: str
    features: List[Feature] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def polygons(self) -> List[Feature]:
        return [f for f in self.features if f.geometry_type == GeometryType.POLYGON]

    @property
    def line_strings(self) -> List[Feature]:
        return [f for f in self.features if f.geometry_type == GeometryType.LINE_STRING]


def group_segments_by_layer(
    segments: Iterable[Segment],
    layers: Optional[Sequence[str]] = None
) -> Dict[str, List[Segment]]:
    """
    Group segments by their layer name, keeping drawing order.

    Args:
        segments: Segments from any number of layers
        layers: Optional layer names to keep (in this order)

    Returns:
        Dictionary mapping layer name to its segments
    """
    grouped: Dict[str, List[Segment]] = {}
    if layers is not None:
        for name in layers:
            grouped[name] = []

    for seg in segments:
        if layers is not None and seg.layer not in grouped:
            continue
        grouped.setdefault(seg.layer, []).append(seg)

    return grouped


def is_unresolved_join(path: Path, graph: AdjacencyGraph, expect_closed: bool) -> bool:
    """
    Check if an open path stopped short of closing a ring.

    An open path counts as unresolved when its layer expects rings, or when
    either end sits on a junction (degree > 1) rather than a free end.
    """
    if path.closed:
        return False
    if expect_closed:
        return True
    return graph.degree(path.point_ids[0]) > 1 or graph.degree(path.point_ids[-1]) > 1


def reconstruct_layer(
    segments: Sequence[Segment],
    layer: str,
    config: Optional[ReconstructionConfig] = None,
    feature_type: Optional[str] = None,
    expect_closed: bool = False
) -> LayerResult:
    """
    Reconstruct polygons and line strings for one layer.

    Args:
        segments: The layer's segments in drawing order
        layer: Layer name (copied into feature properties)
        config: Reconstruction settings (defaults if None)
        feature_type: Optional label such as "BearingWall"
        expect_closed: Flag every open path as an unresolved join

    Returns:
        LayerResult with features, paths and diagnostics
    """
    config = config or ReconstructionConfig()
    tolerance = config.tolerance()
    diagnostics = Diagnostics(layer=layer)

    graph = build_graph(segments, tolerance, diagnostics)

    if not config.alignment_tiebreak:
        resolve_collinear(graph, diagnostics)

    paths = PathWalker(graph, alignment_tiebreak=config.alignment_tiebreak).walk()

    features: List[Feature] = []
    feature_id = FIRST_FEATURE_ID

    for index, path in enumerate(paths):
        try:
            feature = build_feature(path, feature_id, layer, feature_type, tolerance)
        except DegenerateGeometryError as e:
            diagnostics.record(WarningKind.DEGENERATE_GEOMETRY, str(e), index)
            continue

        if is_unresolved_join(path, graph, expect_closed):
            diagnostics.record(
                WarningKind.UNRESOLVED_JOIN,
                f"Open path of {len(path)} points from {path.coords[0]} "
                f"to {path.coords[-1]} (feature {feature_id})",
                index,
            )

        features.append(feature)
        feature_id += 1

    diagnostics.polygon_count = sum(1 for f in features if f.is_polygon)
    diagnostics.line_string_count = len(features) - diagnostics.polygon_count

    logger.info(diagnostics.summary())
    if diagnostics.unsupported_entities or diagnostics.unresolved_joins:
        logger.warning(
            f"Layer '{layer}': {diagnostics.unsupported_entities} unsupported entities, "
            f"{diagnostics.unresolved_joins} unresolved joins"
        )

    return LayerResult(layer=layer, features=features, paths=paths, diagnostics=diagnostics)


def reconstruct_layers(
    segments_by_layer: Mapping[str, Sequence[Segment]],
    config: Optional[ReconstructionConfig] = None
) -> Dict[str, LayerResult]:
    """
    Reconstruct every layer independently.

    Feature labels and the closed-ring expectation come from the config's
    layer specs when a layer is configured.

    Args:
        segments_by_layer: Layer name -> segments
        config: Reconstruction settings (defaults if None)

    Returns:
        Layer name -> LayerResult, in input order
    """
    config = config or ReconstructionConfig()
    results: Dict[str, LayerResult] = {}

    for layer, segments in segments_by_layer.items():
        spec = config.layer_spec(layer)
        results[layer] = reconstruct_layer(
            segments,
            layer,
            config=config,
            feature_type=spec.feature_type,
            expect_closed=spec.expect_closed,
        )

    total = sum(len(r.features) for r in results.values())
    logger.info(f"Reconstructed {total} features from {len(results)} layers")
    return results
