"""Paint-bucket flood fill over the drawing layer."""
from __future__ import annotations

import logging

from paintbar.colors import WHITE, Pixel, colors_match, hex_to_pixel
from paintbar.geometry import Point, to_pixel
from paintbar.layers import Layer

logger = logging.getLogger(__name__)

FILL_TOLERANCE = 1


def _effective(pixel: Pixel) -> Pixel:
    # Transparent pixels match as if a white sheet lay beneath them.
    if pixel[3] == 0:
        return WHITE
    return pixel


def flood_fill(layer: Layer, point: Point, color: str, *, tolerance: int = FILL_TOLERANCE) -> bool:
    """Fill the 4-connected region under ``point`` with ``color``.

    Returns True when pixels changed. The buffer is edited in memory and
    written back to the layer in one go.
    """
    width, height = layer.size
    x, y = to_pixel(point)
    if x < 0 or y < 0 or x >= width or y >= height:
        return False

    pixels = layer.read_pixels()
    start = (y * width + x) * 4
    target = _effective(tuple(pixels[start:start + 4]))
    replacement = hex_to_pixel(color)
    if colors_match(target, replacement, tolerance):
        return False

    filled = 0
    stack = [(x, y)]
    while stack:
        cx, cy = stack.pop()
        if cx < 0 or cy < 0 or cx >= width or cy >= height:
            continue
        pos = (cy * width + cx) * 4
        if not colors_match(_effective(tuple(pixels[pos:pos + 4])), target, tolerance):
            continue
        pixels[pos:pos + 4] = bytes(replacement)
        filled += 1
        stack.append((cx + 1, cy))
        stack.append((cx - 1, cy))
        stack.append((cx, cy + 1))
        stack.append((cx, cy - 1))

    layer.write_pixels(pixels)
    logger.debug("Flood fill at %s,%s covered %d pixels", x, y, filled)
    return True
