"""
GeoJSON Writer Module

Assembles reconstructed features into a FeatureCollection and writes it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from ..pipeline import LayerResult

logger = logging.getLogger(__name__)


def build_feature_collection(
    layer_results: Mapping[str, LayerResult],
    layers: Optional[Sequence[str]] = None
) -> Dict[str, Any]:
    """
    Build a GeoJSON FeatureCollection from per-layer results.

    Args:
        layer_results: Layer name -> LayerResult
        layers: Optional output order (defaults to the mapping order)

    Returns:
        FeatureCollection dictionary
    """
    order = list(layers) if layers is not None else list(layer_results)

    features = []
    for layer in order:
        result = layer_results.get(layer)
        if result is None:
            continue
        features.extend(f.to_dict() for f in result.features)

    return {
        "type": "FeatureCollection",
        "features": features,
    }


def build_diagnostics_report(layer_results: Mapping[str, LayerResult]) -> Dict[str, Any]:
    """Collect per-layer diagnostics into one JSON-serializable report."""
    return {
        "layers": [result.diagnostics.to_dict() for result in layer_results.values()],
        "total_features": sum(len(r.features) for r in layer_results.values()),
        "total_warnings": sum(len(r.diagnostics.warnings) for r in layer_results.values()),
    }


def write_json(data: Dict[str, Any], output_path, indent: Optional[int] = None) -> str:
    """
    Write a JSON document, creating parent directories.

    Returns:
        Path to the written file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)

    return str(path)


def write_geojson(
    collection: Dict[str, Any],
    output_path,
    indent: Optional[int] = None
) -> str:
    """
    Write a FeatureCollection to a .geojson file.

    Args:
        collection: FeatureCollection dictionary
        output_path: Destination file
        indent: Optional JSON indentation

    Returns:
        Path to the written file
    """
    result = write_json(collection, output_path, indent)
    logger.info(f"GeoJSON written: {result} ({len(collection.get('features', []))} features)")
    return result
