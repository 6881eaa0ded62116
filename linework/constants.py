"""
Linework - Master Constants Reference

Default values for segment snapping, collinearity handling and layer
selection. Runtime overrides go through ReconstructionConfig.
"""

from enum import Enum

# =============================================================================
# SNAPPING CONSTANTS
# =============================================================================

# Two coordinates closer than this (drawing units) are the same point
MIN_PRECISION = 0.01

# Tolerance policy used by the point registry
DEFAULT_TOLERANCE_POLICY = "euclidean"

# =============================================================================
# COLLINEARITY CONSTANTS
# =============================================================================

# "normalize" rewrites the graph, "tiebreak" only affects walk order
DEFAULT_COLLINEARITY = "normalize"

# Upper bound on normalization passes, as a multiple of the point count
COLLINEARITY_MAX_PASS_FACTOR = 1

# =============================================================================
# LAYER CONSTANTS
# =============================================================================

# Layers processed when no configuration is given, with their feature labels
DEFAULT_LAYER_TYPES = {
    "MURS": "BearingWall",
    "CLOIS4": "DividingWall",
}

# Layers whose paths are expected to close into rings
DEFAULT_CLOSED_LAYERS = ("MURS", "CLOIS4")

# First feature id assigned within a layer
FIRST_FEATURE_ID = 1

# =============================================================================
# DXF ENTITY CONSTANTS
# =============================================================================

# Straight line primitive, the only entity that becomes a graph edge
DXF_LINE = "LINE"

# Curved entities reported as unsupported by the core
DXF_CURVE_TYPES = ("ARC", "CIRCLE", "ELLIPSE", "SPLINE")

# Polylines that can be exploded into LINE/ARC parts
DXF_POLYLINE_TYPES = ("LWPOLYLINE", "POLYLINE")


# =============================================================================
# ENUMS
# =============================================================================

class EntityKind(Enum):
    """Kind of a drawing primitive as seen by the graph builder."""
    LINE = "LINE"
    OTHER = "OTHER"

    @classmethod
    def from_dxftype(cls, dxftype: str) -> "EntityKind":
        """Map a DXF entity type name to an entity kind."""
        if dxftype and dxftype.upper().strip() == DXF_LINE:
            return cls.LINE
        return cls.OTHER


class CollinearityStrategy(Enum):
    """
    How collinear point triples are handled for a layer.

    Values:
        NORMALIZE: Rewrite the graph so the middle point mediates the run
        TIEBREAK: Leave the graph alone, deprioritize straight continuations
            while walking
    """
    NORMALIZE = "normalize"
    TIEBREAK = "tiebreak"

    @classmethod
    def from_string(cls, value) -> "CollinearityStrategy":
        """
        Parse a strategy name (case-insensitive).

        Raises:
            ValueError: If the name is not a known strategy
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls(DEFAULT_COLLINEARITY)

        normalized = str(value).lower().strip()
        if normalized in ("tie-break", "tie_break", "alignment"):
            normalized = "tiebreak"
        return cls(normalized)


class WarningKind(Enum):
    """Recoverable problems recorded while reconstructing a layer."""
    UNSUPPORTED_ENTITY = "UnsupportedEntity"
    DEGENERATE_SEGMENT = "DegenerateSegment"
    UNRESOLVED_JOIN = "UnresolvedJoin"
    DEGENERATE_GEOMETRY = "DegenerateGeometry"


class GeometryType:
    POLYGON = "Polygon"
    LINE_STRING = "LineString"
