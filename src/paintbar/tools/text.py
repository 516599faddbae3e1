from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import pygame

from paintbar.colors import hex_to_pixel, normalize_hex
from paintbar.geometry import Point, to_pixel
from paintbar.layers import Layer
from paintbar.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)

_FONT_CACHE: Dict[Tuple[str, int, bool, bool], pygame.font.Font] = {}


@dataclass(frozen=True)
class TextRequest:
    text: str
    color: str = "#000000"
    font_family: str = "Arial"
    font_size: int = 20
    rotation: int = 0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False


def _font(family: str, size: int, bold: bool, italic: bool) -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    key = (family, size, bold, italic)
    font = _FONT_CACHE.get(key)
    if font is None:
        font = pygame.font.SysFont(family, size, bold=bold, italic=italic)
        _FONT_CACHE[key] = font
    return font


def render_text(layer: Layer, request: TextRequest, origin: Point) -> pygame.Rect:
    """Blit the glyph run with its top-left at ``origin``, rotated about its center."""
    font = _font(request.font_family, max(1, int(request.font_size)), request.bold, request.italic)
    font.set_underline(request.underline)
    font.set_strikethrough(request.strikethrough)
    image = font.render(request.text, True, hex_to_pixel(normalize_hex(request.color)))
    rect = image.get_rect(topleft=to_pixel(origin))
    if request.rotation % 360:
        # pygame turns counter-clockwise; the rotation value is clockwise.
        image = pygame.transform.rotate(image, -request.rotation)
        rect = image.get_rect(center=rect.center)
    layer.blit(image, rect.topleft)
    return rect


class TextTool(Tool):
    """Records where text goes; the string itself arrives from the UI later."""

    name = "text"
    cursor = "text"

    def __init__(self, context: ToolContext) -> None:
        super().__init__(context)
        self.anchor: Optional[Point] = None
        self.listeners: List[Callable[[Point], None]] = []

    def on_pointer_down(self, point: Point) -> None:
        super().on_pointer_down(point)
        self.anchor = point
        self.layers.clear_overlay()
        for listener in list(self.listeners):
            listener(point)

    def deactivate(self) -> None:
        self.layers.clear_overlay()
        self.anchor = None
        self.context.cursor = "default"

    def preview(self, request: TextRequest) -> bool:
        self.layers.clear_overlay()
        if self.anchor is None or not request.text:
            return False
        render_text(self.layers.overlay, request, self.anchor)
        return True

    def apply(self, request: TextRequest) -> bool:
        self.layers.clear_overlay()
        if self.anchor is None:
            logger.debug("Text applied without an anchor point, ignoring")
            return False
        text = request.text.strip()
        if not text:
            self.anchor = None
            return False
        before = self.context.history.snapshot()
        render_text(self.layers.drawing, replace(request, text=text), self.anchor)
        self.context.history.push(before)
        self.anchor = None
        return True

    def cancel(self) -> bool:
        had_anchor = self.anchor is not None
        self.layers.clear_overlay()
        self.anchor = None
        return had_anchor
