from __future__ import annotations

import re
from typing import NamedTuple, Sequence, Tuple

from paintbar.errors import InvalidColor

Pixel = Tuple[int, int, int, int]

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
TRANSPARENT: Pixel = (0, 0, 0, 0)
WHITE: Pixel = (255, 255, 255, 255)


class RGBA(NamedTuple):
    r: int
    g: int
    b: int
    a: float = 1.0

    def to_pixel(self) -> Pixel:
        return self.r, self.g, self.b, int(round(self.a * 255))


def normalize_hex(value: str) -> str:
    if not isinstance(value, str):
        raise InvalidColor(f"color must be a string, got {value!r}")
    candidate = value.strip()
    if not candidate.startswith("#"):
        candidate = "#" + candidate
    if not HEX_COLOR.match(candidate):
        raise InvalidColor(f"not a #rrggbb color: {value!r}")
    return candidate.lower()


def hex_to_rgba(value: str, alpha: float = 1.0) -> RGBA:
    color = normalize_hex(value)
    return RGBA(int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16), alpha)


def hex_to_pixel(value: str, alpha: int = 255) -> Pixel:
    r, g, b, _ = hex_to_rgba(value)
    return r, g, b, alpha


def pixel_to_hex(pixel: Sequence[int]) -> str:
    if len(pixel) > 3 and pixel[3] == 0:
        return "#ffffff"
    return "#{:02x}{:02x}{:02x}".format(pixel[0], pixel[1], pixel[2])


def colors_match(first: Sequence[int], second: Sequence[int], tolerance: int = 1) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(first[:4], second[:4]))
