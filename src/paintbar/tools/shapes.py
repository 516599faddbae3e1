"""Rubber-band shape tools.

While the pointer is down the shape is redrawn on the overlay after every
move; releasing draws it once onto the drawing layer and records history.
"""
from __future__ import annotations

from typing import Optional

from paintbar.geometry import (
    Point,
    distance,
    line_points,
    quadratic_curve_points,
    rectangle_points,
    triangle_points,
)
from paintbar.layers import Layer
from paintbar.style import PREVIEW_FILL_ALPHA, StrokeStyle
from paintbar.tools.base import Tool, ToolContext, ToolState

SHAPE_KINDS = ("rectangle", "circle", "line", "triangle")


def draw_shape(
    layer: Layer,
    kind: str,
    start: Point,
    end: Point,
    style: StrokeStyle,
    *,
    fill_alpha: Optional[int],
    triangle_type: str = "equilateral",
) -> None:
    if kind == "rectangle":
        layer.draw_polygon(rectangle_points(start, end), style, fill_alpha=fill_alpha)
    elif kind == "circle":
        layer.draw_circle(start, distance(start, end), style, fill_alpha=fill_alpha)
    elif kind == "line":
        first, last = line_points(start, end)
        layer.draw_line(first, last, style)
    elif kind == "triangle":
        layer.draw_polygon(triangle_points(start, end, triangle_type), style, fill_alpha=fill_alpha)
    else:
        raise ValueError(f"unknown shape kind: {kind!r}")


class ShapeTool(Tool):
    uses_overlay = True

    def __init__(self, context: ToolContext, kind: str) -> None:
        if kind not in SHAPE_KINDS:
            raise ValueError(f"unknown shape kind: {kind!r}")
        super().__init__(context)
        self.kind = kind
        self.name = kind
        self.start_point: Optional[Point] = None
        self.end_point: Optional[Point] = None

    def on_pointer_down(self, point: Point) -> None:
        super().on_pointer_down(point)
        self.state = ToolState.PREVIEWING
        self.start_point = point
        self.end_point = point

    def on_pointer_move(self, point: Point) -> None:
        if not self.is_active_gesture or self.start_point is None:
            return
        self.end_point = point
        self.layers.clear_overlay()
        self._draw(self.layers.overlay, point, PREVIEW_FILL_ALPHA)

    def on_pointer_up(self, point: Point) -> None:
        if not self.is_active_gesture or self.start_point is None:
            return
        before = self.context.history.snapshot()
        self._draw(self.layers.drawing, point, 255)
        self.layers.clear_overlay()
        self.context.history.push(before)
        self._reset()

    def deactivate(self) -> None:
        self.layers.clear_overlay()
        self._reset()

    def _reset(self) -> None:
        self.is_active_gesture = False
        self.state = ToolState.IDLE
        self.start_point = None
        self.end_point = None

    def _draw(self, layer: Layer, point: Point, fill_alpha: int) -> None:
        settings = self.context.settings
        draw_shape(
            layer,
            self.kind,
            self.start_point,
            point,
            settings.stroke_style(),
            fill_alpha=fill_alpha if settings.fill_shape else None,
            triangle_type=settings.triangle_type,
        )


class ArcTool(Tool):
    """Two gestures: drag out the chord, then drag the curve's control point."""

    name = "arc"
    uses_overlay = True

    def __init__(self, context: ToolContext) -> None:
        super().__init__(context)
        self.phase = "line"
        self.start_point: Optional[Point] = None
        self.end_point: Optional[Point] = None

    def on_pointer_down(self, point: Point) -> None:
        super().on_pointer_down(point)
        self.state = ToolState.PREVIEWING
        if self.phase == "line":
            self.start_point = point
            self.end_point = None

    def on_pointer_move(self, point: Point) -> None:
        if not self.is_active_gesture or self.start_point is None:
            return
        self.layers.clear_overlay()
        self._draw(self.layers.overlay, point)

    def on_pointer_up(self, point: Point) -> None:
        if not self.is_active_gesture or self.start_point is None:
            return
        super().on_pointer_up(point)
        if self.phase == "line":
            self.end_point = point
            self.phase = "arc"
            self.layers.clear_overlay()
            self._draw(self.layers.overlay, point)
            return
        before = self.context.history.snapshot()
        self._draw(self.layers.drawing, point)
        self.layers.clear_overlay()
        self.context.history.push(before)
        self._reset()

    def deactivate(self) -> None:
        self.layers.clear_overlay()
        self._reset()

    def _reset(self) -> None:
        self.is_active_gesture = False
        self.state = ToolState.IDLE
        self.phase = "line"
        self.start_point = None
        self.end_point = None

    def _draw(self, layer: Layer, point: Point) -> None:
        style = self.context.settings.stroke_style()
        if self.phase == "line" or self.end_point is None:
            layer.draw_line(self.start_point, point, style)
        else:
            layer.stroke_path(quadratic_curve_points(self.start_point, point, self.end_point), style)
