from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pygame

from paintbar.geometry import Point
from paintbar.history import HistoryStore
from paintbar.layers import LayerStack
from paintbar.style import BrushSettings


class ToolState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    PREVIEWING = "previewing"
    SELECTING = "selecting"
    MOVING_SELECTION = "movingSelection"


@dataclass
class ToolContext:
    """What a tool may touch: the layers, history and the current brush."""

    layers: LayerStack
    history: HistoryStore
    settings: BrushSettings
    rng: random.Random = field(default_factory=random.Random)
    cursor: str = "crosshair"


class Tool:
    name = "tool"
    cursor = "crosshair"
    uses_overlay = False

    def __init__(self, context: ToolContext) -> None:
        self.context = context
        self.is_active_gesture = False
        self.state = ToolState.IDLE
        self._before: Optional[pygame.Surface] = None

    def on_pointer_down(self, point: Point) -> None:
        self.is_active_gesture = True

    def on_pointer_move(self, point: Point) -> None:
        pass

    def on_pointer_up(self, point: Point) -> None:
        self.is_active_gesture = False

    def activate(self) -> None:
        self.context.cursor = self.cursor

    def deactivate(self) -> None:
        pass

    def commit(self) -> bool:
        return False

    def cancel(self) -> bool:
        return False

    @property
    def layers(self) -> LayerStack:
        return self.context.layers

    def _begin_edit(self) -> None:
        self._before = self.context.history.snapshot()

    def _finish_edit(self) -> None:
        if self._before is not None:
            self.context.history.push(self._before)
            self._before = None
