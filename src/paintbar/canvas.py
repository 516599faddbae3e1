"""Canvas dimensions, bounds, square lock and responsive resizing."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

from paintbar.errors import InvalidDimensions
from paintbar.layers import LayerStack
from paintbar.throttle import Clock, Debouncer

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


class CanvasManager:
    def __init__(
        self,
        layers: LayerStack,
        *,
        width: int = 800,
        height: int = 600,
        min_width: int = 300,
        min_height: int = 200,
        max_width: int = 4096,
        max_height: int = 4096,
        square: bool = False,
        responsive: bool = True,
        padding: int = 40,
        debounce: float = 0.1,
        clock: Clock = time.monotonic,
    ) -> None:
        if width <= 0 or height <= 0:
            raise InvalidDimensions(width, height, "canvas size must be positive")
        self.layers = layers
        self.square = square
        self.responsive = responsive
        self.padding = max(0, padding)
        self.min_width, self.min_height = min_width, min_height
        self.max_width, self.max_height = max_width, max_height
        if square:
            width = height = min(width, height)
            self._lock_bounds()
        self.width = width
        self.height = height
        self.aspect_ratio = width / height
        self.resize_started: List[Callable[[], object]] = []
        self.resized: List[Callable[[int, int], object]] = []
        self._debouncer: Debouncer[Size] = Debouncer(self._apply_container_size, debounce, clock)
        layers.setup(width, height)

    @property
    def size(self) -> Size:
        return self.width, self.height

    def _lock_bounds(self) -> None:
        low = max(self.min_width, self.min_height)
        high = min(self.max_width, self.max_height)
        self.min_width = self.min_height = low
        self.max_width = self.max_height = high

    def set_square(self, square: bool) -> bool:
        self.square = square
        if not square:
            return False
        self._lock_bounds()
        return self.resize(self.width, self.height)

    def constrain(self, width: int, height: int) -> Size:
        if self.square:
            width = height = min(width, height)
        width = max(self.min_width, min(self.max_width, int(width)))
        height = max(self.min_height, min(self.max_height, int(height)))
        if self.square:
            # Clamping must not reintroduce a non-square result.
            width = height = min(width, height)
        return width, height

    def resize(self, width: int, height: int) -> bool:
        if width <= 0 or height <= 0:
            raise InvalidDimensions(width, height, "canvas size must be positive")
        target = self.constrain(width, height)
        if target == self.size:
            return False
        for callback in list(self.resize_started):
            callback()
        if not self.layers.resize(*target):
            return False
        self.width, self.height = target
        logger.info("Canvas resized to %sx%s", *target)
        for callback in list(self.resized):
            callback(*target)
        return True

    def fit_container(self, client_width: int, client_height: int) -> Optional[Size]:
        available_w = client_width - self.padding
        available_h = client_height - self.padding
        if available_w <= 0 or available_h <= 0:
            return None
        if self.square:
            side = min(available_w, available_h)
            return side, side
        if available_w / available_h > self.aspect_ratio:
            return max(1, int(round(available_h * self.aspect_ratio))), available_h
        return available_w, max(1, int(round(available_w / self.aspect_ratio)))

    def container_resized(self, client_width: int, client_height: int) -> bool:
        if not self.responsive:
            return False
        self._debouncer.request((client_width, client_height))
        return True

    def poll(self) -> bool:
        return self._debouncer.poll()

    def _apply_container_size(self, size: Size) -> None:
        target = self.fit_container(*size)
        if target is None:
            logger.debug("Ignoring container size %sx%s", *size)
            return
        self.resize(*target)
