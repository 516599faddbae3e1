from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from paintbar.colors import Pixel, hex_to_pixel, normalize_hex
from paintbar.geometry import TriangleType

MIN_LINE_WIDTH = 1
MAX_LINE_WIDTH = 100
PREVIEW_FILL_ALPHA = 128


def line_width_from_slider(value: float) -> int:
    # Logarithmic slider: fine control at thin widths, coarse at fat ones.
    value = max(0.0, min(100.0, float(value)))
    factor = math.log(MAX_LINE_WIDTH)
    return int(round(math.exp(factor * (value / 100)) * MIN_LINE_WIDTH))


@dataclass(frozen=True)
class StrokeStyle:
    color: str
    line_width: int
    cap: str = "round"
    join: str = "round"

    @property
    def pixel(self) -> Pixel:
        return hex_to_pixel(self.color)

    def fill_pixel(self, alpha: int = 255) -> Pixel:
        return hex_to_pixel(self.color, alpha)

    @property
    def radius(self) -> float:
        return self.line_width / 2


@dataclass
class BrushSettings:
    color: str = "#000000"
    line_width: int = 5
    fill_shape: bool = False
    triangle_type: TriangleType = TriangleType.EQUILATERAL
    max_recent_colors: int = 10
    recent_colors: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.color = normalize_hex(self.color)
        self.line_width = self._clamp_width(self.line_width)
        self.triangle_type = TriangleType(self.triangle_type)
        if not self.recent_colors:
            self.recent_colors = [self.color]

    @staticmethod
    def _clamp_width(value: float) -> int:
        return max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, int(round(value))))

    def set_color(self, value: str) -> str:
        self.color = normalize_hex(value)
        return self.color

    def set_line_width(self, value: float) -> int:
        self.line_width = self._clamp_width(value)
        return self.line_width

    def set_triangle_type(self, value: str) -> TriangleType:
        self.triangle_type = TriangleType(value)
        return self.triangle_type

    def add_recent_color(self, value: str) -> None:
        color = normalize_hex(value)
        if self.recent_colors and self.recent_colors[0] == color:
            return
        self.recent_colors = [c for c in self.recent_colors if c != color]
        self.recent_colors.insert(0, color)
        del self.recent_colors[self.max_recent_colors:]

    def stroke_style(self) -> StrokeStyle:
        return StrokeStyle(color=self.color, line_width=self.line_width)
