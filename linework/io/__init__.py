# Drawing input and feature output module

from .dxf_reader import (
    DXFReadError,
    entity_to_segment,
    entities_to_segments,
    read_dxf_segments,
    segments_to_cache,
    segments_from_cache,
    load_segments,
)

from .geojson_writer import (
    build_feature_collection,
    build_diagnostics_report,
    write_json,
    write_geojson,
)

__all__ = [
    # DXF Reader
    "DXFReadError",
    "entity_to_segment",
    "entities_to_segments",
    "read_dxf_segments",
    "segments_to_cache",
    "segments_from_cache",
    "load_segments",
    # GeoJSON Writer
    "build_feature_collection",
    "build_diagnostics_report",
    "write_json",
    "write_geojson",
]
