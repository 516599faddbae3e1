from __future__ import annotations

import logging

from paintbar.fill import flood_fill
from paintbar.geometry import Point
from paintbar.tools.base import Tool

logger = logging.getLogger(__name__)


class FillTool(Tool):
    """Single-shot paint bucket; the whole edit happens on pointer-down."""

    name = "fill"

    def on_pointer_down(self, point: Point) -> None:
        before = self.context.history.snapshot()
        if flood_fill(self.layers.drawing, point, self.context.settings.color):
            self.context.history.push(before)
        else:
            logger.debug("Fill at %s left the canvas unchanged", point)

    def on_pointer_up(self, point: Point) -> None:
        pass
