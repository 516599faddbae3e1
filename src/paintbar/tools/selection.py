"""Rectangular cut-and-move selection.

Releasing a drag lifts the pixels under the box off the drawing layer and
floats them on the overlay. The floating block can be dragged around inside
the canvas, then either committed at its new spot or cancelled, which puts
the lifted pixels back where they came from.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import pygame

from paintbar.geometry import Point, Rect, clamp_rect_position, normalize_rect, point_in_rect, to_pixel
from paintbar.tools.base import Tool, ToolContext, ToolState

logger = logging.getLogger(__name__)


@dataclass
class Selection:
    x: int
    y: int
    width: int
    height: int
    origin: Tuple[int, int]
    image: pygame.Surface
    background: pygame.Surface
    before: pygame.Surface

    @property
    def rect(self) -> Rect:
        return self.x, self.y, self.width, self.height


class SelectionTool(Tool):
    name = "select"
    uses_overlay = True

    def __init__(self, context: ToolContext) -> None:
        super().__init__(context)
        self.selection: Optional[Selection] = None
        self.selection_start: Optional[Point] = None
        self.selection_end: Optional[Point] = None
        self.selecting = False
        self.moving = False
        self._grab_point: Optional[Point] = None
        self._grab_origin: Tuple[int, int] = (0, 0)

    def on_pointer_down(self, point: Point) -> None:
        super().on_pointer_down(point)
        if self.selection is not None and point_in_rect(point, self.selection.rect):
            self.moving = True
            self._grab_point = point
            self._grab_origin = (self.selection.x, self.selection.y)
            self._sync_state()
            return
        if self.selection is not None:
            self.commit()
        self.selecting = True
        self.selection_start = point
        self.selection_end = point
        self._sync_state()

    def on_pointer_move(self, point: Point) -> None:
        if self.selecting:
            self.selection_end = point
            self.layers.clear_overlay()
            self.layers.overlay.draw_dashed_rect(normalize_rect(self.selection_start, point))
        elif self.moving:
            self._move_to(point)

    def on_pointer_up(self, point: Point) -> None:
        super().on_pointer_up(point)
        if self.selecting:
            self.selecting = False
            self.selection_end = point
            self._lift(normalize_rect(self.selection_start, point))
        elif self.moving:
            self._move_to(point)
            self.moving = False
            self._grab_point = None
        self._sync_state()

    def activate(self) -> None:
        super().activate()
        self.layers.clear_overlay()

    def deactivate(self) -> None:
        self.commit()
        self._clear_state()

    def commit(self) -> bool:
        """Drop the floating pixels at their current position.

        The area they were lifted from is not repainted. It stays cleared
        (transparent), which is the background a cut leaves behind, so only
        the opaque white layer shows through there. Undo restores the
        drawing as it was before the cut.
        """
        selection = self.selection
        if selection is None:
            return False
        self.layers.drawing.put_region(selection.image, (selection.x, selection.y))
        self.context.history.push(selection.before)
        logger.debug("Committed selection at %s", selection.rect)
        self._clear_state()
        return True

    def cancel(self) -> bool:
        selection = self.selection
        if selection is None:
            return False
        self.layers.drawing.put_region(selection.background, selection.origin)
        logger.debug("Cancelled selection, restored %s", selection.origin)
        self._clear_state()
        return True

    def _lift(self, rect: Rect) -> None:
        area = pygame.Rect(rect).clip(self.layers.drawing.rect)
        if area.width < 1 or area.height < 1:
            self._clear_state()
            return
        drawing = self.layers.drawing
        before = drawing.snapshot()
        box = (area.x, area.y, area.width, area.height)
        self.selection = Selection(
            x=area.x,
            y=area.y,
            width=area.width,
            height=area.height,
            origin=(area.x, area.y),
            image=drawing.copy_region(box),
            background=drawing.copy_region(box),
            before=before,
        )
        drawing.clear(box)
        self._render()

    def _move_to(self, point: Point) -> None:
        selection = self.selection
        if selection is None or self._grab_point is None:
            return
        dx, dy = to_pixel((point[0] - self._grab_point[0], point[1] - self._grab_point[1]))
        x, y = clamp_rect_position(
            self._grab_origin[0] + dx,
            self._grab_origin[1] + dy,
            selection.width,
            selection.height,
            self.layers.size,
        )
        if (x, y) == (selection.x, selection.y):
            return
        selection.x, selection.y = x, y
        self._render()

    def _render(self) -> None:
        selection = self.selection
        overlay = self.layers.overlay
        overlay.clear()
        overlay.put_region(selection.image, (selection.x, selection.y))
        overlay.draw_dashed_rect(selection.rect)

    def _clear_state(self) -> None:
        self.layers.clear_overlay()
        self.selection = None
        self.selection_start = None
        self.selection_end = None
        self.selecting = False
        self.moving = False
        self.is_active_gesture = False
        self._grab_point = None
        self._sync_state()

    def _sync_state(self) -> None:
        if self.selecting:
            self.state = ToolState.SELECTING
        elif self.selection is not None:
            self.state = ToolState.MOVING_SELECTION
        else:
            self.state = ToolState.IDLE
