#!/usr/bin/env python
"""
Phase 1 Tests: Point Registry and Adjacency Graph

Tests for:
- Tolerance policies and coordinate quantization
- Canonical point registration
- Graph construction from segments
- Unsupported/degenerate/duplicate segment handling
"""

import sys
import math
import dataclasses
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from linework.constants import EntityKind, WarningKind, MIN_PRECISION
from linework.diagnostics import Diagnostics, ConfigError
from linework.graph import (
    Segment,
    PointRegistry,
    EuclideanTolerance,
    SquaredDistanceTolerance,
    GridSnapTolerance,
    ExactTolerance,
    make_tolerance,
    as_point3,
    build_graph,
    edge_key,
)


def line(start, end, layer="MURS"):
    return Segment(start=start, end=end, layer=layer)


class TestTolerancePolicies:
    """Tests for tolerance policies."""

    def test_default_precision(self):
        policy = EuclideanTolerance()
        assert policy.precision == MIN_PRECISION
        assert policy.decimals == 2
        print("  [PASS] Default precision")

    def test_euclidean_matches(self):
        policy = EuclideanTolerance(0.01)
        assert policy.matches((0, 0, 0), (0.005, 0, 0))
        assert policy.matches((0, 0, 0), (0.004, 0.004, 0.004))
        assert not policy.matches((0, 0, 0), (0.02, 0, 0))
        assert abs(policy.distance((0, 0, 0), (3, 4, 0)) - 5.0) < 1e-12
        print("  [PASS] Euclidean matching")

    def test_squared_agrees_with_euclidean(self):
        euclidean = EuclideanTolerance(0.01)
        squared = SquaredDistanceTolerance(0.01)
        pairs = [
            ((0, 0, 0), (0.005, 0, 0)),
            ((0, 0, 0), (0.009, 0.001, 0)),
            ((0, 0, 0), (0.011, 0, 0)),
            ((1, 1, 1), (1, 1, 1.5)),
        ]
        for p, q in pairs:
            assert euclidean.matches(p, q) == squared.matches(p, q)
        print("  [PASS] Squared distance agrees with Euclidean")

    def test_grid_snap(self):
        policy = GridSnapTolerance(0.01)
        assert policy.matches((0.001, 0, 0), (0.004, 0, 0))
        # Close but on different sides of a grid boundary
        assert not policy.matches((0.004, 0, 0), (0.006, 0, 0))
        print("  [PASS] Grid snapping")

    def test_exact(self):
        policy = ExactTolerance(0.01)
        assert policy.matches((1, 2, 3), (1.0, 2.0, 3.0))
        assert not policy.matches((0, 0, 0), (1e-9, 0, 0))
        print("  [PASS] Exact matching")

    def test_quantize(self):
        policy = EuclideanTolerance(0.01)
        q = policy.quantize((1.004, -0.004, 2.346))
        assert q == (1.0, 0.0, 2.35)
        # Negative zero is normalized
        assert math.copysign(1.0, q[1]) == 1.0
        assert policy.quantize((0.1 + 0.2, 0, 0))[0] == 0.3
        print("  [PASS] Quantization")

    def test_quantize_other_precision(self):
        policy = EuclideanTolerance(0.025)
        assert policy.decimals == 3
        assert policy.quantize((0.074, 0, 0)) == (0.075, 0.0, 0.0)
        print("  [PASS] Quantization with 0.025 precision")

    def test_make_tolerance(self):
        assert isinstance(make_tolerance("euclidean"), EuclideanTolerance)
        assert isinstance(make_tolerance("SQUARED", 0.1), SquaredDistanceTolerance)
        assert isinstance(make_tolerance("grid"), GridSnapTolerance)
        assert isinstance(make_tolerance("exact"), ExactTolerance)
        with pytest.raises(ConfigError):
            make_tolerance("manhattan")
        with pytest.raises(ConfigError):
            make_tolerance("euclidean", 0)
        print("  [PASS] Policy factory")

    def test_as_point3(self):
        assert as_point3((1, 2)) == (1.0, 2.0, 0.0)
        assert as_point3([1, 2, 3]) == (1.0, 2.0, 3.0)
        with pytest.raises(ValueError):
            as_point3((1,))
        print("  [PASS] Point conversion")


class TestPointRegistry:
    """Tests for canonical point registration."""

    def test_same_point_same_id(self):
        registry = PointRegistry()
        a = registry.register((1, 1, 0))
        b = registry.register((1, 1, 0))
        assert a == b
        assert len(registry) == 1
        print("  [PASS] Same point returns same id")

    def test_within_tolerance_same_id(self):
        registry = PointRegistry()
        a = registry.register((1, 1, 0))
        b = registry.register((1.005, 1, 0))
        assert a == b
        # Canonical coordinates are the first registered ones
        assert registry.coords(a) == (1.0, 1.0, 0.0)
        print("  [PASS] Within tolerance returns same id")

    def test_beyond_tolerance_new_id(self):
        registry = PointRegistry()
        a = registry.register((0, 0, 0))
        b = registry.register((0.02, 0, 0))
        c = registry.register((0, 0, 0.02))
        assert len({a, b, c}) == 3
        assert [p.id for p in registry] == [0, 1, 2]
        print("  [PASS] Beyond tolerance returns new ids")

    def test_nearest_match_wins(self):
        registry = PointRegistry()
        registry.register((0, 0, 0))
        registry.register((0.015, 0, 0))
        # Within tolerance of both; closer to the second
        assert registry.register((0.009, 0, 0)) == 1
        assert len(registry) == 2
        print("  [PASS] Nearest canonical point wins")

    def test_find(self):
        registry = PointRegistry()
        assert registry.find((0, 0, 0)) is None
        registry.register((5, 5))
        assert registry.find((5.001, 5, 0)) == 0
        assert registry.find((6, 5, 0)) is None
        assert len(registry) == 1
        print("  [PASS] Lookup without registration")

    def test_grid_policy_registry(self):
        registry = PointRegistry(GridSnapTolerance(0.01))
        a = registry.register((0.004, 0, 0))
        b = registry.register((0.006, 0, 0))
        assert a != b
        print("  [PASS] Registry with grid policy")


class TestSegment:
    """Tests for the Segment dataclass."""

    def test_padding_and_length(self):
        seg = Segment(start=(0, 0), end=(3, 4), layer="MURS")
        assert seg.start == (0.0, 0.0, 0.0)
        assert seg.end == (3.0, 4.0, 0.0)
        assert abs(seg.length - 5.0) < 1e-12
        assert seg.is_line
        print("  [PASS] Segment padding and length")

    def test_frozen(self):
        seg = line((0, 0, 0), (1, 0, 0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            seg.layer = "OTHER"
        print("  [PASS] Segment is immutable")

    def test_dict_conversion(self):
        seg = Segment(start=(0, 0, 0), end=(1, 2, 3), layer="L", kind=EntityKind.OTHER, source_type="ARC")
        restored = Segment.from_dict(seg.to_dict())
        assert restored == seg
        print("  [PASS] Segment dict conversion")


class TestGraphBuilder:
    """Tests for adjacency graph construction."""

    def test_square(self):
        segments = [
            line((0, 0, 0), (1, 0, 0)),
            line((1, 0, 0), (1, 1, 0)),
            line((1, 1, 0), (0, 1, 0)),
            line((0, 1, 0), (0, 0, 0)),
        ]
        graph = build_graph(segments)
        assert len(graph.points) == 4
        assert graph.edges() == [(0, 1), (0, 3), (1, 2), (2, 3)]
        assert graph.edge_count == 4
        assert all(graph.degree(p.id) == 2 for p in graph.points)
        print("  [PASS] Square graph")

    def test_shared_endpoint_snaps(self):
        """Endpoints 0.005 apart merge into one canonical point."""
        segments = [
            line((0, 0, 0), (1, 0, 0)),
            line((1.005, 0, 0), (2, 0, 0)),
        ]
        graph = build_graph(segments)
        assert len(graph.points) == 3
        assert graph.edges() == [(0, 1), (1, 2)]
        print("  [PASS] Shared endpoint snapping")

    def test_neighbors_symmetric(self):
        segments = [
            line((0, 0, 0), (1, 0, 0)),
            line((1, 0, 0), (1, 1, 0)),
            line((1, 0, 0), (2, 0, 0)),
        ]
        graph = build_graph(segments)
        for p in graph.points:
            for n in p.neighbors:
                assert p.id in graph.neighbors(n)
            assert p.id not in p.neighbors
        print("  [PASS] Symmetric neighbors")

    def test_duplicate_segments_one_edge(self):
        diagnostics = Diagnostics(layer="MURS")
        segments = [
            line((0, 0, 0), (1, 0, 0)),
            line((0, 0, 0), (1, 0, 0)),
            line((1.001, 0, 0), (0, 0.001, 0)),
        ]
        graph = build_graph(segments, diagnostics=diagnostics)
        assert graph.edges() == [(0, 1)]
        assert diagnostics.duplicate_segments == 2
        assert diagnostics.input_segments == 3
        assert not diagnostics.has_warnings
        print("  [PASS] Duplicate segments collapse")

    def test_degenerate_segment_dropped(self):
        diagnostics = Diagnostics(layer="MURS")
        segments = [
            line((0, 0, 0), (0.001, 0, 0)),
            line((5, 5, 0), (6, 5, 0)),
        ]
        graph = build_graph(segments, diagnostics=diagnostics)
        assert len(graph.points) == 2
        assert graph.edges() == [(0, 1)]
        assert diagnostics.degenerate_segments == 1
        assert diagnostics.warnings[0].index == 0
        print("  [PASS] Degenerate segment dropped without orphan point")

    def test_unsupported_entity_skipped(self):
        diagnostics = Diagnostics(layer="MURS")
        segments = [
            line((0, 0, 0), (1, 0, 0)),
            Segment(start=(1, 0, 0), end=(0, 1, 0), layer="MURS",
                    kind=EntityKind.OTHER, source_type="ARC"),
        ]
        graph = build_graph(segments, diagnostics=diagnostics)
        assert graph.edge_count == 1
        assert diagnostics.unsupported_entities == 1
        assert diagnostics.warnings[0].kind == WarningKind.UNSUPPORTED_ENTITY
        assert "ARC" in diagnostics.warnings[0].message
        print("  [PASS] Unsupported entity skipped")

    def test_edge_ops(self):
        graph = build_graph([line((0, 0, 0), (1, 0, 0))])
        c = graph.registry.register((2, 0, 0))
        assert not graph.add_edge(0, 0)
        assert not graph.add_edge(1, 0)
        assert graph.add_edge(1, c)
        assert graph.has_edge(c, 1)
        assert graph.remove_edge(0, 1)
        assert not graph.remove_edge(0, 1)
        assert graph.edges() == [(1, 2)]
        assert edge_key(5, 2) == (2, 5)
        print("  [PASS] Edge operations")
