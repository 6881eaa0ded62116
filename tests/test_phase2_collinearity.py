#!/usr/bin/env python
"""
Phase 2 Tests: Collinearity Resolver

Tests for:
- Degenerate-triangle alignment criterion
- Normalization of spanning edges and T-junctions
- Fixed point (second run changes nothing)
"""

import sys
import random
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from linework.diagnostics import Diagnostics
from linework.graph import (
    Segment,
    build_graph,
    is_between,
    are_collinear,
    find_interior_points,
    resolve_collinear,
)


def line(start, end):
    return Segment(start=start, end=end, layer="MURS")


class TestAlignment:
    """Tests for the alignment predicates."""

    def test_is_between(self):
        assert is_between((0, 0, 0), (1, 0, 0), (2, 0, 0), 0.01)
        assert not is_between((0, 0, 0), (2, 0, 0), (1, 0, 0), 0.01)
        assert not is_between((0, 0, 0), (1, 0.5, 0), (2, 0, 0), 0.01)
        print("  [PASS] Point between two others")

    def test_is_between_within_tolerance(self):
        # Detour of about 1e-6, below 0.01 ** 2
        assert is_between((0, 0, 0), (1, 0.001, 0), (2, 0, 0), 0.01)
        # Detour of about 2.5e-3
        assert not is_between((0, 0, 0), (1, 0.05, 0), (2, 0, 0), 0.01)
        print("  [PASS] Alignment tolerance")

    def test_are_collinear_any_order(self):
        a, b, c = (0, 0, 0), (1, 1, 1), (2, 2, 2)
        assert are_collinear(a, b, c, 0.01)
        assert are_collinear(b, a, c, 0.01)
        assert are_collinear(c, a, b, 0.01)
        assert not are_collinear((0, 0, 0), (1, 0, 0), (1, 1, 0), 0.01)
        print("  [PASS] Collinearity is order independent")


class TestResolveCollinear:
    """Tests for graph normalization."""

    def test_spanning_edge_removed(self):
        graph = build_graph([
            line((0, 0, 0), (2, 0, 0)),
            line((0, 0, 0), (1, 0, 0)),
            line((1, 0, 0), (2, 0, 0)),
        ])
        assert graph.edges() == [(0, 1), (0, 2), (1, 2)]
        assert find_interior_points(graph, 0, 1) == [2]

        splits = resolve_collinear(graph)

        assert splits == 1
        assert graph.edges() == [(0, 2), (1, 2)]
        assert not graph.has_edge(0, 1)
        print("  [PASS] Spanning edge removed")

    def test_t_junction_split(self):
        graph = build_graph([
            line((0, 0, 0), (2, 0, 0)),
            line((1, 0, 0), (1, 1, 0)),
        ])
        splits = resolve_collinear(graph)

        assert splits == 1
        assert graph.edges() == [(0, 2), (1, 2), (2, 3)]
        assert graph.degree(2) == 3
        print("  [PASS] T-junction split at the middle point")

    def test_several_interior_points_ordered(self):
        graph = build_graph([
            line((0, 0, 0), (3, 0, 0)),
            line((2, 0, 0), (2, 1, 0)),
            line((1, 0, 0), (1, 1, 0)),
        ])
        # ids: 0=(0,0) 1=(3,0) 2=(2,0) 3=(2,1) 4=(1,0) 5=(1,1)
        assert find_interior_points(graph, 0, 1) == [4, 2]

        resolve_collinear(graph)

        assert graph.edges() == [(0, 4), (1, 2), (2, 3), (2, 4), (4, 5)]
        print("  [PASS] Chain through several interior points")

    def test_nothing_to_do(self):
        graph = build_graph([
            line((0, 0, 0), (1, 0, 0)),
            line((1, 0, 0), (2, 0, 0)),
            line((2, 0, 0), (3, 0, 0)),
        ])
        before = graph.edges()
        assert resolve_collinear(graph) == 0
        assert graph.edges() == before
        print("  [PASS] Already normalized graph unchanged")

    def test_second_run_is_fixed_point(self):
        graph = build_graph([
            line((0, 0, 0), (4, 0, 0)),
            line((0, 0, 0), (1, 0, 0)),
            line((1, 0, 0), (3, 0, 0)),
            line((2, 0, 0), (2, 2, 0)),
            line((2, 2, 0), (2, 1, 0)),
            line((0, 0, 0), (0, 4, 0)),
            line((0, 2, 0), (2, 2, 0)),
        ])
        assert resolve_collinear(graph) > 0
        after_first = graph.edges()

        assert resolve_collinear(graph) == 0
        assert graph.edges() == after_first
        print("  [PASS] Normalization reaches a fixed point")

    def test_fixed_point_on_random_grid(self):
        rng = random.Random(7)
        segments = []
        for _ in range(40):
            x, y = rng.randint(0, 5), rng.randint(0, 5)
            if rng.random() < 0.5:
                segments.append(line((x, y, 0), (x + rng.randint(1, 3), y, 0)))
            else:
                segments.append(line((x, y, 0), (x, y + rng.randint(1, 3), 0)))

        graph = build_graph(segments)
        resolve_collinear(graph)
        after_first = graph.edges()

        assert resolve_collinear(graph) == 0
        assert graph.edges() == after_first
        for a, b in after_first:
            assert find_interior_points(graph, a, b) == []
        print("  [PASS] Fixed point on a random grid drawing")

    def test_diagnostics_updated(self):
        diagnostics = Diagnostics(layer="MURS")
        graph = build_graph([
            line((0, 0, 0), (2, 0, 0)),
            line((1, 0, 0), (1, 1, 0)),
        ], diagnostics=diagnostics)
        assert diagnostics.edge_count == 2

        resolve_collinear(graph, diagnostics)

        assert diagnostics.collinear_splits == 1
        assert diagnostics.edge_count == 3
        print("  [PASS] Diagnostics record splits")
