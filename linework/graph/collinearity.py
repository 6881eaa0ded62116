"""
Collinearity Resolver Module

CAD drawings often encode one straight wall as several collinear segments
sharing intermediate points, sometimes together with a direct segment
spanning the whole run. Normalization removes the spanning edge so the
intermediate point always mediates the connection.

Alignment uses the degenerate-triangle criterion: p lies on a-b iff
dist(a, p) + dist(p, b) - dist(a, b) < tolerance ** 2.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from ..constants import COLLINEARITY_MAX_PASS_FACTOR
from ..diagnostics import Diagnostics
from .builder import AdjacencyGraph

logger = logging.getLogger(__name__)


def is_between(
    a: Sequence[float],
    middle: Sequence[float],
    b: Sequence[float],
    tolerance: float
) -> bool:
    """Check if middle lies on segment a-b within tolerance."""
    detour = math.dist(a, middle) + math.dist(middle, b) - math.dist(a, b)
    return detour < tolerance ** 2


def are_collinear(
    p: Sequence[float],
    q: Sequence[float],
    r: Sequence[float],
    tolerance: float
) -> bool:
    """Check if any of three points lies between the other two."""
    return (
        is_between(p, q, r, tolerance)
        or is_between(q, r, p, tolerance)
        or is_between(r, p, q, tolerance)
    )


def find_interior_points(graph: AdjacencyGraph, a: int, b: int) -> List[int]:
    """
    Find canonical points lying strictly inside edge a-b.

    Args:
        graph: Adjacency graph
        a: First outer point id
        b: Second outer point id

    Returns:
        Point ids ordered by distance from a (id breaks ties)
    """
    coords = graph.coords_array
    if len(coords) < 3:
        return []

    tolerance = graph.tolerance.precision
    pa = coords[a]
    pb = coords[b]

    dist_a = np.linalg.norm(coords - pa, axis=1)
    dist_b = np.linalg.norm(coords - pb, axis=1)
    detour = dist_a + dist_b - float(np.linalg.norm(pb - pa))

    mask = detour < tolerance ** 2
    mask[a] = False
    mask[b] = False

    interior = [int(i) for i in np.flatnonzero(mask)]
    return sorted(interior, key=lambda i: (float(dist_a[i]), i))


def resolve_collinear(
    graph: AdjacencyGraph,
    diagnostics: Optional[Diagnostics] = None
) -> int:
    """
    Normalize collinear runs in place until a fixed point is reached.

    For every edge with aligned interior points, the direct edge is removed
    and the chain outer -> interior... -> outer is connected instead.

    Args:
        graph: Adjacency graph to rewrite
        diagnostics: Optional record receiving the split count

    Returns:
        Number of edges split (0 when the graph is already normalized)
    """
    max_passes = max(1, len(graph.points) * COLLINEARITY_MAX_PASS_FACTOR) + 1
    splits = 0

    for _ in range(max_passes):
        changed = False

        for a, b in graph.edges():
            # An earlier split in this pass may already have removed it
            if not graph.has_edge(a, b):
                continue

            interior = find_interior_points(graph, a, b)
            if not interior:
                continue

            graph.remove_edge(a, b)
            chain = [a] + interior + [b]
            for u, v in zip(chain, chain[1:]):
                graph.add_edge(u, v)

            splits += 1
            changed = True
            logger.debug(f"Split edge ({a}, {b}) at {interior}")

        if not changed:
            break
    else:
        logger.warning(
            f"Collinearity normalization stopped after {max_passes} passes "
            f"without reaching a fixed point"
        )

    if diagnostics is not None:
        diagnostics.collinear_splits += splits
        diagnostics.edge_count = graph.edge_count

    if splits:
        logger.info(f"Collinearity: split {splits} edges")
    return splits
