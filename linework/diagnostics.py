"""
Diagnostics Module

Warning records, per-layer diagnostics and the exception hierarchy.
Per-segment and per-path problems are recorded here instead of aborting
the run.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .constants import WarningKind

logger = logging.getLogger(__name__)


class ReconstructionError(Exception):
    """Base class for errors raised by the reconstruction engine."""
    pass


class DegenerateGeometryError(ReconstructionError):
    """Raised when a finished path has fewer than 2 points."""
    pass


class ConfigError(ReconstructionError):
    """Raised when configuration values are invalid."""
    pass


@dataclass
class ReconstructionWarning:
    """A single recoverable problem."""
    kind: WarningKind
    message: str
    index: Optional[int] = None  # Segment or path index within the layer

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "index": self.index,
        }


@dataclass
class Diagnostics:
    """Structured record of what happened while reconstructing one layer."""
    layer: str = ""
    input_segments: int = 0
    duplicate_segments: int = 0
    collinear_splits: int = 0
    point_count: int = 0
    edge_count: int = 0
    polygon_count: int = 0
    line_string_count: int = 0
    warnings: List[ReconstructionWarning] = field(default_factory=list)

    def record(
        self,
        kind: WarningKind,
        message: str,
        index: Optional[int] = None
    ) -> ReconstructionWarning:
        """Append a warning and return it."""
        warning = ReconstructionWarning(kind=kind, message=message, index=index)
        self.warnings.append(warning)
        logger.debug(f"[{self.layer}] {kind.value}: {message}")
        return warning

    def count(self, kind: WarningKind) -> int:
        return sum(1 for w in self.warnings if w.kind == kind)

    @property
    def unsupported_entities(self) -> int:
        return self.count(WarningKind.UNSUPPORTED_ENTITY)

    @property
    def degenerate_segments(self) -> int:
        return self.count(WarningKind.DEGENERATE_SEGMENT)

    @property
    def unresolved_joins(self) -> int:
        return self.count(WarningKind.UNRESOLVED_JOIN)

    @property
    def degenerate_paths(self) -> int:
        return self.count(WarningKind.DEGENERATE_GEOMETRY)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def summary(self) -> str:
        """Generate a one-line summary of the layer reconstruction."""
        return (
            f"Layer '{self.layer}': {self.input_segments} segments -> "
            f"{self.point_count} points, {self.edge_count} edges -> "
            f"{self.polygon_count} polygons, {self.line_string_count} line strings "
            f"(unsupported={self.unsupported_entities}, "
            f"degenerate={self.degenerate_segments}, "
            f"unresolved={self.unresolved_joins}, "
            f"dropped={self.degenerate_paths})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostics to dictionary for JSON serialization."""
        return {
            "layer": self.layer,
            "input_segments": self.input_segments,
            "duplicate_segments": self.duplicate_segments,
            "collinear_splits": self.collinear_splits,
            "point_count": self.point_count,
            "edge_count": self.edge_count,
            "polygon_count": self.polygon_count,
            "line_string_count": self.line_string_count,
            "unsupported_entities": self.unsupported_entities,
            "degenerate_segments": self.degenerate_segments,
            "unresolved_joins": self.unresolved_joins,
            "degenerate_paths": self.degenerate_paths,
            "warnings": [w.to_dict() for w in self.warnings],
        }
