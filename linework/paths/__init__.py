# Path walking and feature classification module

from .walker import (
    Path,
    PathWalker,
    walk,
)

from .classifier import (
    Feature,
    Geometry,
    classify,
    build_feature,
)

__all__ = [
    # Walker
    "Path",
    "PathWalker",
    "walk",
    # Classifier
    "Feature",
    "Geometry",
    "classify",
    "build_feature",
]
