"""Raster layers backing the canvas.

Four same-sized pygame surfaces with per-pixel alpha are kept in a fixed
order: a checkerboard that signals transparency, an opaque white sheet, the
drawing layer that holds the artwork, and an overlay for previews and floating
selections. Only the drawing layer carries content worth keeping; both
backgrounds are regenerated on every resize and the overlay is scratch space.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple

import pygame

from paintbar.colors import TRANSPARENT, WHITE, Pixel
from paintbar.errors import NotInitialized
from paintbar.geometry import Point, Rect, fit_rect, points_between, to_pixel
from paintbar.style import StrokeStyle

logger = logging.getLogger(__name__)

CHECKER_LIGHT: Pixel = (255, 255, 255, 255)
CHECKER_DARK: Pixel = (224, 224, 224, 255)
SELECTION_OUTLINE: Pixel = (0, 0, 255, 255)

Size = Tuple[int, int]


def _new_surface(size: Size) -> pygame.Surface:
    return pygame.Surface(size, pygame.SRCALPHA)


def _put_exact(target: pygame.Surface, image: pygame.Surface, pos: Tuple[int, int]) -> None:
    # Additive blit onto a cleared rect copies every channel, alpha included,
    # without the source-over blending a plain blit would apply.
    rect = pygame.Rect(pos, image.get_size())
    target.fill(TRANSPARENT, rect)
    target.blit(image, pos, special_flags=pygame.BLEND_RGBA_ADD)


class Layer:
    def __init__(self, name: str, size: Optional[Size] = None) -> None:
        self.name = name
        self._surface: Optional[pygame.Surface] = None
        if size is not None:
            self.allocate(size)

    @property
    def initialized(self) -> bool:
        return self._surface is not None

    @property
    def surface(self) -> pygame.Surface:
        if self._surface is None:
            raise NotInitialized(f"{self.name} layer has not been set up")
        return self._surface

    @property
    def size(self) -> Size:
        return self.surface.get_size()

    @property
    def rect(self) -> pygame.Rect:
        return self.surface.get_rect()

    def allocate(self, size: Size) -> None:
        self._surface = _new_surface(size)

    def replace(self, surface: pygame.Surface) -> None:
        self._surface = surface

    # --- pixel access -------------------------------------------------

    def get_at(self, point: Point) -> Pixel:
        return tuple(self.surface.get_at(to_pixel(point)))

    def read_pixels(self) -> bytearray:
        return bytearray(pygame.image.tobytes(self.surface, "RGBA"))

    def write_pixels(self, buffer: bytes) -> None:
        size = self.size
        self._surface = pygame.image.frombytes(bytes(buffer), size, "RGBA")

    def snapshot(self) -> pygame.Surface:
        return self.surface.copy()

    def restore(self, snapshot: pygame.Surface) -> None:
        self._surface = snapshot.copy()

    def copy_region(self, rect: Rect) -> pygame.Surface:
        area = pygame.Rect(rect).clip(self.rect)
        return self.surface.subsurface(area).copy()

    def put_region(self, image: pygame.Surface, pos: Tuple[int, int]) -> None:
        _put_exact(self.surface, image, pos)

    def blit(self, image: pygame.Surface, pos: Tuple[int, int]) -> None:
        self.surface.blit(image, pos)

    def clear(self, rect: Optional[Rect] = None) -> None:
        self.fill(TRANSPARENT, rect)

    def fill(self, pixel: Sequence[int], rect: Optional[Rect] = None) -> None:
        if rect is None:
            self.surface.fill(pixel)
        else:
            self.surface.fill(pixel, pygame.Rect(rect))

    # --- drawing primitives -------------------------------------------

    def stroke_segment(self, start: Point, end: Point, style: StrokeStyle) -> None:
        color = style.pixel
        pygame.draw.line(self.surface, color, start, end, style.line_width)
        if style.cap == "round" and style.line_width > 2:
            pygame.draw.circle(self.surface, color, start, style.radius)
            pygame.draw.circle(self.surface, color, end, style.radius)

    def stroke_path(self, points: Sequence[Point], style: StrokeStyle, *, closed: bool = False) -> None:
        if len(points) < 2:
            return
        color = style.pixel
        pygame.draw.lines(self.surface, color, closed, points, style.line_width)
        if style.join == "round" and style.line_width > 2:
            # Round joins avoid notches where thick segments meet.
            for point in points:
                pygame.draw.circle(self.surface, color, point, style.radius)

    def erase_segment(self, start: Point, end: Point, radius: float) -> None:
        radius = max(1.0, radius)
        for point in points_between(start, end):
            pygame.draw.circle(self.surface, TRANSPARENT, point, radius)

    def plot(self, points: Iterable[Tuple[int, int]], pixel: Sequence[int]) -> None:
        width, height = self.size
        for x, y in points:
            if 0 <= x < width and 0 <= y < height:
                self.surface.set_at((x, y), pixel)

    def draw_polygon(
        self,
        points: Sequence[Point],
        style: StrokeStyle,
        *,
        fill_alpha: Optional[int] = None,
    ) -> None:
        if fill_alpha is not None and len(points) >= 3:
            pygame.draw.polygon(self.surface, style.fill_pixel(fill_alpha), points)
        self.stroke_path(points, style, closed=True)

    def draw_circle(
        self,
        center: Point,
        radius: float,
        style: StrokeStyle,
        *,
        fill_alpha: Optional[int] = None,
    ) -> None:
        if fill_alpha is not None:
            pygame.draw.circle(self.surface, style.fill_pixel(fill_alpha), center, radius)
        if radius <= style.line_width / 2:
            pygame.draw.circle(self.surface, style.pixel, center, max(radius, style.radius))
            return
        pygame.draw.circle(self.surface, style.pixel, center, radius + style.radius, style.line_width)

    def draw_line(self, start: Point, end: Point, style: StrokeStyle) -> None:
        pygame.draw.line(self.surface, style.pixel, start, end, style.line_width)

    def draw_dashed_rect(self, rect: Rect, pixel: Sequence[int] = SELECTION_OUTLINE, dash: int = 5) -> None:
        x, y, width, height = rect
        corners = [(x, y), (x + width, y), (x + width, y + height), (x, y + height)]
        for idx, start in enumerate(corners):
            end = corners[(idx + 1) % 4]
            for n, point in enumerate(points_between(start, end)):
                if (n // dash) % 2 == 0:
                    self.plot([point], pixel)


class LayerStack:
    """Owns the four canvas layers and keeps them the same size."""

    def __init__(self, checker_size: int = 10) -> None:
        self.checker_size = max(1, checker_size)
        self.transparent_bg = Layer("transparent background")
        self.opaque_bg = Layer("opaque background")
        self.drawing = Layer("drawing")
        self.overlay = Layer("overlay")

    @property
    def layers(self) -> Tuple[Layer, Layer, Layer, Layer]:
        return (self.transparent_bg, self.opaque_bg, self.drawing, self.overlay)

    @property
    def initialized(self) -> bool:
        return all(layer.initialized for layer in self.layers)

    @property
    def size(self) -> Size:
        if not self.initialized:
            raise NotInitialized("canvas layers have not been set up")
        return self.drawing.size

    def setup(self, width: int, height: int) -> bool:
        if width <= 0 or height <= 0:
            logger.warning("Rejected layer setup at %sx%s", width, height)
            return False
        size = (width, height)
        for layer in self.layers:
            layer.allocate(size)
        self.draw_checkerboard()
        self.draw_opaque_background()
        return True

    def resize(self, width: int, height: int) -> bool:
        """Resize every layer, letterboxing the drawing into the new size.

        Returns False when the request is rejected or changes nothing.
        """
        if width <= 0 or height <= 0:
            logger.warning("Rejected layer resize to %sx%s", width, height)
            return False
        if not self.initialized:
            return self.setup(width, height)
        old_size = self.size
        new_size = (width, height)
        if old_size == new_size:
            return False

        content = self.drawing.snapshot()
        x, y, fit_w, fit_h = fit_rect(old_size, new_size)
        if (fit_w, fit_h) != old_size:
            content = pygame.transform.smoothscale(content, (fit_w, fit_h))
        drawing = _new_surface(new_size)
        _put_exact(drawing, content, (x, y))

        surfaces = [_new_surface(new_size) for _ in range(3)]
        self.transparent_bg.replace(surfaces[0])
        self.opaque_bg.replace(surfaces[1])
        self.overlay.replace(surfaces[2])
        self.drawing.replace(drawing)
        self.draw_checkerboard()
        self.draw_opaque_background()
        logger.debug("Resized layers %sx%s -> %sx%s", old_size[0], old_size[1], width, height)
        return True

    def draw_checkerboard(self) -> None:
        layer = self.transparent_bg
        size = self.checker_size
        width, height = layer.size
        layer.fill(CHECKER_LIGHT)
        for left in range(0, width, size * 2):
            for top in range(0, height, size * 2):
                layer.fill(CHECKER_DARK, (left, top, size, size))
                layer.fill(CHECKER_DARK, (left + size, top + size, size, size))

    def draw_opaque_background(self) -> None:
        self.opaque_bg.fill(WHITE)

    def clear_overlay(self) -> None:
        self.overlay.clear()

    def composite(self, *, transparent: bool, include_overlay: bool = False, checkerboard: bool = False) -> pygame.Surface:
        """Flatten the layers into a new surface.

        ``transparent`` picks which background sits under the drawing: none
        (or the checkerboard when ``checkerboard`` is set) versus opaque white.
        """
        if transparent and not checkerboard and not include_overlay:
            return self.drawing.snapshot()
        result = _new_surface(self.size)
        if not transparent:
            result.blit(self.opaque_bg.surface, (0, 0))
        elif checkerboard:
            result.blit(self.transparent_bg.surface, (0, 0))
        result.blit(self.drawing.surface, (0, 0))
        if include_overlay:
            result.blit(self.overlay.surface, (0, 0))
        return result
