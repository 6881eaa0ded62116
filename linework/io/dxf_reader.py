"""
DXF Reader Module

Reads model-space entities from a DXF drawing into Segments, and caches
the parsed segments as JSON so repeated runs can skip parsing.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import ezdxf

from ..constants import (
    DXF_LINE,
    DXF_CURVE_TYPES,
    DXF_POLYLINE_TYPES,
    EntityKind,
)
from ..graph.builder import Segment

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


class DXFReadError(Exception):
    """Raised when a DXF file cannot be read."""
    pass


def _entity_endpoints(entity):
    """Best-effort start/end points of a linear or curved entity."""
    dxftype = entity.dxftype()

    if dxftype == DXF_LINE:
        return entity.dxf.start, entity.dxf.end

    if dxftype in ("ARC", "ELLIPSE"):
        return entity.start_point, entity.end_point

    if dxftype == "CIRCLE":
        center = entity.dxf.center
        return center, center

    if dxftype == "SPLINE":
        points = list(entity.control_points) or list(entity.fit_points)
        if points:
            return points[0], points[-1]

    origin = (0.0, 0.0, 0.0)
    return origin, origin


def entity_to_segment(entity, layer: Optional[str] = None) -> Segment:
    """
    Convert a LINE or curve entity to a Segment.

    Args:
        entity: ezdxf entity
        layer: Layer override (used for exploded polyline parts)

    Returns:
        Segment with kind LINE for lines, OTHER for everything else
    """
    dxftype = entity.dxftype()
    start, end = _entity_endpoints(entity)
    return Segment(
        start=tuple(start),
        end=tuple(end),
        layer=layer if layer is not None else entity.dxf.layer,
        kind=EntityKind.from_dxftype(dxftype),
        source_type=dxftype,
    )


def entities_to_segments(
    entities: Iterable,
    layers: Optional[Sequence[str]] = None,
    explode_polylines: bool = True
) -> List[Segment]:
    """
    Convert drawing entities to Segments.

    LINE entities become LINE segments. Polylines are exploded into their
    LINE/ARC parts. Curves become OTHER segments so the reconstruction can
    report them. Annotation entities (text, blocks, hatches, dimensions)
    are ignored.

    Args:
        entities: Iterable of ezdxf entities (e.g. the model space)
        layers: Optional layer names to keep
        explode_polylines: Explode LWPOLYLINE/POLYLINE entities

    Returns:
        List of Segment objects in drawing order
    """
    wanted = set(layers) if layers is not None else None
    segments: List[Segment] = []
    ignored = 0

    for entity in entities:
        layer = entity.dxf.layer
        if wanted is not None and layer not in wanted:
            continue

        dxftype = entity.dxftype()

        if dxftype == DXF_LINE or dxftype in DXF_CURVE_TYPES:
            segments.append(entity_to_segment(entity))
        elif dxftype in DXF_POLYLINE_TYPES and explode_polylines:
            for part in entity.virtual_entities():
                segments.append(entity_to_segment(part, layer=layer))
        elif dxftype in DXF_POLYLINE_TYPES:
            segments.append(entity_to_segment(entity))
        else:
            ignored += 1

    if ignored:
        logger.debug(f"Ignored {ignored} non-linework entities")
    return segments


def read_dxf_segments(
    filepath,
    layers: Optional[Sequence[str]] = None,
    explode_polylines: bool = True
) -> List[Segment]:
    """
    Read segments from the model space of a DXF file.

    Args:
        filepath: Path to the DXF file
        layers: Optional layer names to keep
        explode_polylines: Explode LWPOLYLINE/POLYLINE entities

    Returns:
        List of Segment objects

    Raises:
        DXFReadError: If the file is missing or not a valid DXF
    """
    path = Path(filepath)
    if not path.is_file():
        raise DXFReadError(f"File not found: {filepath}")

    try:
        doc = ezdxf.readfile(str(path))
    except IOError as e:
        raise DXFReadError(f"Not a DXF file or a generic I/O error: {filepath} ({e})")
    except ezdxf.DXFStructureError as e:
        raise DXFReadError(f"Invalid or corrupted DXF file: {filepath} ({e})")

    segments = entities_to_segments(doc.modelspace(), layers, explode_polylines)
    logger.info(f"Read {len(segments)} segments from {filepath}")
    return segments


def segments_to_cache(segments: Sequence[Segment], cache_path, source: str = "") -> None:
    """Write parsed segments to a JSON cache file."""
    data = {
        "version": CACHE_FORMAT_VERSION,
        "source": source,
        "segments": [seg.to_dict() for seg in segments],
    }
    with open(cache_path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    logger.debug(f"Cached {len(segments)} segments to {cache_path}")


def segments_from_cache(cache_path) -> List[Segment]:
    """
    Read segments from a JSON cache file.

    Raises:
        DXFReadError: If the cache is unreadable or from another format version
    """
    try:
        with open(cache_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DXFReadError(f"Cannot read segment cache {cache_path}: {e}")

    if data.get("version") != CACHE_FORMAT_VERSION:
        raise DXFReadError(f"Unsupported segment cache version in {cache_path}")

    return [Segment.from_dict(item) for item in data.get("segments", [])]


def load_segments(
    filepath,
    layers: Optional[Sequence[str]] = None,
    cache_path=None,
    explode_polylines: bool = True
) -> List[Segment]:
    """
    Load segments from a DXF file, going through a JSON cache when given.

    The cache holds every layer, so it stays valid when a later run selects
    different layers. A cache older than the DXF file is rebuilt.

    Args:
        filepath: Path to the DXF file
        layers: Optional layer names to keep
        cache_path: Optional JSON cache path
        explode_polylines: Explode LWPOLYLINE/POLYLINE entities

    Returns:
        List of Segment objects
    """
    if cache_path is None:
        return read_dxf_segments(filepath, layers, explode_polylines)

    cache = Path(cache_path)
    source = Path(filepath)

    fresh = cache.exists() and (
        not source.exists() or cache.stat().st_mtime >= source.stat().st_mtime
    )

    if fresh:
        segments = segments_from_cache(cache)
        logger.info(f"Loaded {len(segments)} segments from cache {cache}")
    else:
        segments = read_dxf_segments(source, None, explode_polylines)
        segments_to_cache(segments, cache, source=str(source))

    if layers is None:
        return segments
    wanted = set(layers)
    return [seg for seg in segments if seg.layer in wanted]
