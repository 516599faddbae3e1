"""Point and vector helpers shared by the drawing tools.

Points are plain ``(x, y)`` tuples in canvas coordinates. Shape generators
return lists of points that the layer primitives stroke or fill.
"""
from __future__ import annotations

import math
import random
from enum import Enum
from typing import List, NamedTuple, Tuple

Point = Tuple[float, float]
Rect = Tuple[int, int, int, int]


class Vector(NamedTuple):
    dx: float
    dy: float
    distance: float
    angle: float


class TriangleType(str, Enum):
    EQUILATERAL = "equilateral"
    ISOSCELES = "isosceles"
    RIGHT = "right"


def vector(start: Point, end: Point) -> Vector:
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    return Vector(dx, dy, math.hypot(dx, dy), math.atan2(dy, dx))


def distance(start: Point, end: Point) -> float:
    return math.hypot(end[0] - start[0], end[1] - start[1])


def angle(start: Point, end: Point) -> float:
    return math.atan2(end[1] - start[1], end[0] - start[0])


def to_pixel(point: Point) -> Tuple[int, int]:
    return int(round(point[0])), int(round(point[1]))


def points_between(start: Point, end: Point) -> List[Tuple[int, int]]:
    """Bresenham walk from ``start`` to ``end``, both endpoints included."""
    x1, y1 = to_pixel(start)
    x2, y2 = to_pixel(end)
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    points = []
    while True:
        points.append((x1, y1))
        if x1 == x2 and y1 == y2:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x1 += sx
        if e2 < dx:
            err += dx
            y1 += sy
    return points


def normalize_rect(start: Point, end: Point) -> Rect:
    x1, y1 = to_pixel(start)
    x2, y2 = to_pixel(end)
    return min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1)


def point_in_rect(point: Point, rect: Rect) -> bool:
    x, y, width, height = rect
    return x <= point[0] < x + width and y <= point[1] < y + height


def clamp_rect_position(x: int, y: int, width: int, height: int, bounds: Tuple[int, int]) -> Tuple[int, int]:
    max_x = max(0, bounds[0] - width)
    max_y = max(0, bounds[1] - height)
    return max(0, min(max_x, x)), max(0, min(max_y, y))


def fit_rect(source: Tuple[int, int], target: Tuple[int, int]) -> Rect:
    """Centered placement of ``source`` inside ``target`` at a uniform scale."""
    src_w, src_h = source
    dst_w, dst_h = target
    scale = min(dst_w / src_w, dst_h / src_h)
    width = max(1, int(round(src_w * scale)))
    height = max(1, int(round(src_h * scale)))
    return (dst_w - width) // 2, (dst_h - height) // 2, width, height


def rectangle_points(start: Point, end: Point) -> List[Point]:
    return [
        (start[0], start[1]),
        (end[0], start[1]),
        (end[0], end[1]),
        (start[0], end[1]),
    ]


def line_points(start: Point, end: Point) -> List[Point]:
    return [start, end]


def triangle_points(start: Point, end: Point, kind: TriangleType = TriangleType.EQUILATERAL) -> List[Point]:
    kind = TriangleType(kind)
    metrics = vector(start, end)
    if kind is TriangleType.EQUILATERAL:
        third_angle = metrics.angle + math.pi / 3
        return [
            (start[0], start[1]),
            (end[0], end[1]),
            (
                start[0] + metrics.distance * math.cos(third_angle),
                start[1] + metrics.distance * math.sin(third_angle),
            ),
        ]
    if kind is TriangleType.ISOSCELES:
        # Base sits on the cursor row; its half width follows the horizontal drag.
        half_base = abs(metrics.dx)
        return [
            (start[0], start[1]),
            (end[0] - half_base, end[1]),
            (end[0] + half_base, end[1]),
        ]
    return [
        (start[0], start[1]),
        (start[0], end[1]),
        (end[0], end[1]),
    ]


def quadratic_curve_points(start: Point, control: Point, end: Point, steps: int = 0) -> List[Point]:
    if steps <= 0:
        span = distance(start, control) + distance(control, end)
        steps = max(8, int(span / 2))
    points = []
    for idx in range(steps + 1):
        t = idx / steps
        inv = 1.0 - t
        points.append((
            inv * inv * start[0] + 2 * inv * t * control[0] + t * t * end[0],
            inv * inv * start[1] + 2 * inv * t * control[1] + t * t * end[1],
        ))
    return points


def spray_points(center: Point, radius: float, density: int, rng: random.Random) -> List[Tuple[int, int]]:
    points = []
    for _ in range(density):
        theta = rng.random() * math.pi * 2
        reach = rng.random() * radius
        points.append(to_pixel((
            center[0] + math.cos(theta) * reach,
            center[1] + math.sin(theta) * reach,
        )))
    return points
