"""Orthogonal connector routing between positioned entity boxes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .layout import LayoutConfig, get_connection_point

if TYPE_CHECKING:
    from .models import ClassEntity, RelationKind

Point = tuple[float, float]


def _vertical_route(source: ClassEntity, target: ClassEntity, straighten: bool,
                    config: LayoutConfig) -> list[Point]:
    # Leave through the side facing the target
    if target.center[1] > source.center[1]:
        sx, sy = get_connection_point(source, "bottom")
        ex, ey = get_connection_point(target, "top")
    else:
        sx, sy = get_connection_point(source, "top")
        ex, ey = get_connection_point(target, "bottom")

    if straighten and abs(sx - ex) < config.align_tolerance:
        return [(sx, sy), (ex, ey)]

    mid_y = (sy + ey) / 2
    return [(sx, sy), (sx, mid_y), (ex, mid_y), (ex, ey)]


def _horizontal_route(source: ClassEntity, target: ClassEntity,
                      config: LayoutConfig) -> list[Point]:
    margin = config.route_margin
    if target.center[0] - source.center[0] > 0:
        sx, sy = get_connection_point(source, "right")
        ex, ey = get_connection_point(target, "left")
        step = margin
    else:
        sx, sy = get_connection_point(source, "left")
        ex, ey = get_connection_point(target, "right")
        step = -margin

    gap = (ex - sx) if step > 0 else (sx - ex)
    if gap > margin * 2:
        mid_x = (sx + ex) / 2
        return [(sx, sy), (mid_x, sy), (mid_x, ey), (ex, ey)]

    # Boxes nearly overlap horizontally: detour around both
    if source.center[1] > target.center[1]:
        route_y = min(source.y, target.y) - margin
    else:
        route_y = max(source.y + source.height, target.y + target.height) + margin

    return [
        (sx, sy),
        (sx + step, sy),
        (sx + step, route_y),
        (ex - step, route_y),
        (ex - step, ey),
        (ex, ey),
    ]


def route_relationship(
    source: ClassEntity,
    target: ClassEntity,
    kind: RelationKind,
    config: LayoutConfig | None = None,
) -> list[Point]:
    """Compute the polyline for a relationship.

    Hierarchy kinds with a clear vertical gap run top to bottom, as a straight
    line when the boxes are aligned. Everything else runs between facing
    sides, detouring around the boxes when they are too close horizontally.
    """
    if config is None:
        config = LayoutConfig()

    (from_cx, from_cy), (to_cx, to_cy) = source.center, target.center
    dx = to_cx - from_cx
    dy = to_cy - from_cy
    prefer_vertical = kind.is_hierarchy

    if prefer_vertical and abs(dy) > config.vertical_threshold:
        return _vertical_route(source, target, straighten=True, config=config)

    if abs(dx) > abs(dy) or not prefer_vertical:
        return _horizontal_route(source, target, config)

    return _vertical_route(source, target, straighten=False, config=config)


def label_anchor(points: list[Point]) -> Point:
    """Point a relationship label is attached to."""
    if not points:
        return 0.0, 0.0
    return points[len(points) // 2]
