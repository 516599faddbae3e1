"""Tools that paint while the pointer moves: pencil, eraser and spray."""
from __future__ import annotations

from typing import Optional

from paintbar.geometry import Point, spray_points
from paintbar.style import StrokeStyle
from paintbar.tools.base import Tool, ToolState

SPRAY_DENSITY = 30


class _FreehandTool(Tool):
    def __init__(self, context) -> None:
        super().__init__(context)
        self.last_point: Optional[Point] = None
        self.style: Optional[StrokeStyle] = None

    def on_pointer_down(self, point: Point) -> None:
        if self.is_active_gesture:
            # A press without a release still owns a history entry.
            self._end_stroke()
        super().on_pointer_down(point)
        self.state = ToolState.DRAWING
        self.last_point = point
        self.style = self.context.settings.stroke_style()
        self._begin_edit()

    def on_pointer_move(self, point: Point) -> None:
        if not self.is_active_gesture:
            return
        self.paint(self.last_point, point)
        self.last_point = point

    def on_pointer_up(self, point: Point) -> None:
        if not self.is_active_gesture:
            return
        self.paint(self.last_point, point)
        self._end_stroke()

    def deactivate(self) -> None:
        if self.is_active_gesture:
            self._end_stroke()

    def commit(self) -> bool:
        if not self.is_active_gesture:
            return False
        self._end_stroke()
        return True

    def _end_stroke(self) -> None:
        self.is_active_gesture = False
        self.state = ToolState.IDLE
        self.last_point = None
        self._finish_edit()

    def paint(self, start: Point, end: Point) -> None:
        raise NotImplementedError


class PencilTool(_FreehandTool):
    name = "pencil"

    def paint(self, start: Point, end: Point) -> None:
        self.layers.drawing.stroke_segment(start, end, self.style)


class EraserTool(_FreehandTool):
    name = "eraser"

    def paint(self, start: Point, end: Point) -> None:
        self.layers.drawing.erase_segment(start, end, self.style.radius)


class SprayTool(_FreehandTool):
    name = "spray"

    def on_pointer_down(self, point: Point) -> None:
        super().on_pointer_down(point)
        self.paint(point, point)

    def paint(self, start: Point, end: Point) -> None:
        dots = spray_points(end, self.style.line_width * 2, SPRAY_DENSITY, self.context.rng)
        self.layers.drawing.plot(dots, self.style.pixel)
