"""Tests for pilluml/routing.py: orthogonal connector paths."""
from __future__ import annotations

import pytest

from pilluml.models import ClassEntity, RelationKind
from pilluml.routing import label_anchor, route_relationship


def box(x, y, width=120, height=50):
    return ClassEntity("box", x=x, y=y, width=width, height=height)


class TestVerticalRoutes:
    def test_aligned_boxes_get_straight_line(self):
        child, parent = box(30, 160), box(30, 30)
        points = route_relationship(child, parent, RelationKind.INHERITANCE)
        assert points == [(90, 160), (90, 80)]

    def test_offset_boxes_bend_at_mid_height(self):
        child, parent = box(210, 160), box(30, 30)
        points = route_relationship(child, parent, RelationKind.REALIZATION)
        assert points == [(270, 160), (270, 120), (90, 120), (90, 80)]

    def test_target_below_leaves_from_bottom(self):
        upper, lower = box(30, 30), box(30, 160)
        points = route_relationship(upper, lower, RelationKind.INHERITANCE)
        assert points == [(90, 80), (90, 160)]

    def test_fallback_when_vertical_gap_is_small(self):
        source = box(0, 10, width=100, height=80)
        target = box(5, 0, width=100, height=70)
        points = route_relationship(source, target, RelationKind.INHERITANCE)
        assert points == [(50, 10), (50, 40), (55, 40), (55, 70)]


class TestHorizontalRoutes:
    def test_wide_gap_rightwards(self):
        points = route_relationship(box(30, 30), box(210, 30), RelationKind.ASSOCIATION)
        assert points == [(150, 55), (180, 55), (180, 55), (210, 55)]

    def test_wide_gap_leftwards(self):
        points = route_relationship(box(210, 30), box(30, 30), RelationKind.DEPENDENCY)
        assert points == [(210, 55), (180, 55), (180, 55), (150, 55)]

    def test_non_hierarchy_stays_horizontal_for_stacked_boxes(self):
        points = route_relationship(box(30, 30), box(30, 160), RelationKind.COMPOSITION)
        assert len(points) == 6

    def test_hierarchy_with_small_dy_goes_sideways(self):
        source = box(0, 0, width=100)
        target = box(300, 10, width=100)
        points = route_relationship(source, target, RelationKind.INHERITANCE)
        assert points == [(100, 25), (200, 25), (200, 35), (300, 35)]

    def test_close_boxes_detour_below(self):
        source = box(0, 0, width=100)
        target = box(110, 100, width=100)
        points = route_relationship(source, target, RelationKind.ASSOCIATION)
        assert points == [
            (100, 25), (115, 25), (115, 165), (95, 165), (95, 125), (110, 125),
        ]

    def test_close_boxes_detour_above(self):
        source = box(110, 100, width=100)
        target = box(0, 0, width=100)
        points = route_relationship(source, target, RelationKind.ASSOCIATION)
        assert points == [
            (110, 125), (95, 125), (95, -15), (115, -15), (115, 25), (100, 25),
        ]


class TestRouteShape:
    @pytest.mark.parametrize("kind", list(RelationKind))
    def test_segments_are_axis_aligned(self, kind):
        points = route_relationship(box(210, 160), box(30, 30), kind)
        for (x1, y1), (x2, y2) in zip(points, points[1:]):
            assert x1 == x2 or y1 == y2

    def test_deterministic(self):
        a, b = box(0, 0), box(50, 200)
        assert route_relationship(a, b, RelationKind.AGGREGATION) == \
            route_relationship(a, b, RelationKind.AGGREGATION)


class TestLabelAnchor:
    def test_middle_point(self):
        assert label_anchor([(0, 0), (1, 1), (2, 2), (3, 3)]) == (2, 2)

    def test_empty(self):
        assert label_anchor([]) == (0, 0)
