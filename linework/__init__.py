# Segment-to-path reconstruction for CAD line work

__version__ = "0.1.0"

from .constants import (
    MIN_PRECISION,
    EntityKind,
    CollinearityStrategy,
    WarningKind,
    GeometryType,
)
from .diagnostics import (
    ReconstructionError,
    DegenerateGeometryError,
    ConfigError,
    ReconstructionWarning,
    Diagnostics,
)
from .config import LayerSpec, ReconstructionConfig, load_config
from .graph import Segment, PointRegistry, build_graph, resolve_collinear
from .paths import Path, PathWalker, Feature, classify
from .pipeline import (
    LayerResult,
    group_segments_by_layer,
    reconstruct_layer,
    reconstruct_layers,
)

__all__ = [
    "__version__",
    "MIN_PRECISION",
    "EntityKind",
    "CollinearityStrategy",
    "WarningKind",
    "GeometryType",
    "ReconstructionError",
    "DegenerateGeometryError",
    "ConfigError",
    "ReconstructionWarning",
    "Diagnostics",
    "LayerSpec",
    "ReconstructionConfig",
    "load_config",
    "Segment",
    "PointRegistry",
    "build_graph",
    "resolve_collinear",
    "Path",
    "PathWalker",
    "Feature",
    "classify",
    "LayerResult",
    "group_segments_by_layer",
    "reconstruct_layer",
    "reconstruct_layers",
]
