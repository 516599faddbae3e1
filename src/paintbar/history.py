"""Bounded undo/redo over full copies of the drawing layer."""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List

import pygame

from paintbar.layers import Layer

logger = logging.getLogger(__name__)

UNDO_MAX_DEPTH = 50


class HistoryStore:
    def __init__(self, layer: Layer, max_steps: int = UNDO_MAX_DEPTH) -> None:
        self.layer = layer
        self.max_steps = max(1, max_steps)
        self.undo_stack: Deque[pygame.Surface] = deque(maxlen=self.max_steps)
        self.redo_stack: List[pygame.Surface] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def snapshot(self) -> pygame.Surface:
        return self.layer.snapshot()

    def push(self, snapshot: pygame.Surface) -> None:
        """Record a state taken before a committed edit; drops the redo branch."""
        if len(self.undo_stack) == self.max_steps:
            logger.debug("Undo history full, evicting oldest of %d", self.max_steps)
        self.undo_stack.append(snapshot)
        self.redo_stack.clear()

    def capture(self) -> None:
        self.push(self.snapshot())

    def undo(self) -> bool:
        if not self.undo_stack:
            return False
        self.redo_stack.append(self.layer.snapshot())
        self.layer.restore(self.undo_stack.pop())
        return True

    def redo(self) -> bool:
        if not self.redo_stack:
            return False
        self.undo_stack.append(self.layer.snapshot())
        self.layer.restore(self.redo_stack.pop())
        return True

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
