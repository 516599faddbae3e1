"""The PaintBar drawing engine.

``PaintBar`` wires the layer stack, canvas manager, history and tool manager
together and is the only object UI code talks to. Every call runs to
completion on the caller's thread; there is no background work.
"""
from __future__ import annotations

import io
import logging
import random
import time
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pygame

from paintbar.canvas import CanvasManager
from paintbar.colors import pixel_to_hex
from paintbar.config import coerce_int, section
from paintbar.errors import ImageLoadFailure
from paintbar.geometry import Point, TriangleType, to_pixel
from paintbar.history import UNDO_MAX_DEPTH, HistoryStore
from paintbar.layers import LayerStack
from paintbar.manager import ToolManager, build_tools
from paintbar.style import BrushSettings
from paintbar.throttle import Clock, MoveThrottle
from paintbar.tools.base import Tool, ToolContext
from paintbar.tools.text import TextRequest, TextTool

logger = logging.getLogger(__name__)

URL_TIMEOUT = 10
ICON_SIZE = 64


def _read_image(source: str) -> pygame.Surface:
    if source.startswith(("http://", "https://")):
        try:
            request = urllib.request.Request(source)
            with urllib.request.urlopen(request, timeout=URL_TIMEOUT) as response:
                data = response.read()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise ImageLoadFailure(source, str(exc)) from exc
        namehint = Path(urllib.parse.urlparse(source).path).name
        try:
            return pygame.image.load(io.BytesIO(data), namehint)
        except (pygame.error, ValueError) as exc:
            raise ImageLoadFailure(source, str(exc)) from exc
    try:
        return pygame.image.load(str(Path(source).expanduser()))
    except (pygame.error, OSError) as exc:
        raise ImageLoadFailure(source, str(exc)) from exc


class PaintBar:
    def __init__(
        self,
        width: int = 800,
        height: int = 600,
        *,
        min_width: int = 300,
        min_height: int = 200,
        max_width: int = 4096,
        max_height: int = 4096,
        square: bool = False,
        responsive: bool = True,
        transparent: bool = False,
        checker_size: int = 10,
        container_padding: int = 40,
        resize_debounce: float = 0.1,
        max_undo_steps: int = UNDO_MAX_DEPTH,
        color: str = "#000000",
        line_width: int = 5,
        max_recent_colors: int = 10,
        move_throttle: float = 0.016,
        default_tool: str = "pencil",
        clock: Clock = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.layers = LayerStack(checker_size)
        self.canvas = CanvasManager(
            self.layers,
            width=width,
            height=height,
            min_width=min_width,
            min_height=min_height,
            max_width=max_width,
            max_height=max_height,
            square=square,
            responsive=responsive,
            padding=container_padding,
            debounce=resize_debounce,
            clock=clock,
        )
        self.history = HistoryStore(self.layers.drawing, max_undo_steps)
        self.settings = BrushSettings(color=color, line_width=line_width, max_recent_colors=max_recent_colors)
        self.context = ToolContext(self.layers, self.history, self.settings, rng or random.Random())
        self.tools = ToolManager(build_tools(self.context), default=default_tool)
        self.transparent = transparent
        self._moves: MoveThrottle[Point] = MoveThrottle(self.tools.pointer_move, move_throttle, clock)
        self.canvas.resize_started.append(self.tools.commit_pending)
        self.canvas.resized.append(self._on_resized)

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides: Any) -> "PaintBar":
        canvas = section(config, "canvas")
        brush = section(config, "brush")
        options: Dict[str, Any] = {
            "width": coerce_int(canvas.get("width"), 800, minimum=1),
            "height": coerce_int(canvas.get("height"), 600, minimum=1),
            "min_width": coerce_int(canvas.get("min_width"), 300, minimum=1),
            "min_height": coerce_int(canvas.get("min_height"), 200, minimum=1),
            "max_width": coerce_int(canvas.get("max_width"), 4096, minimum=1),
            "max_height": coerce_int(canvas.get("max_height"), 4096, minimum=1),
            "square": bool(canvas.get("square", False)),
            "responsive": bool(canvas.get("responsive", True)),
            "transparent": bool(canvas.get("transparent", False)),
            "checker_size": coerce_int(canvas.get("checker_size"), 10, minimum=1),
            "container_padding": coerce_int(canvas.get("container_padding"), 40),
            "resize_debounce": coerce_int(canvas.get("resize_debounce_ms"), 100) / 1000,
            "max_undo_steps": coerce_int(
                section(config, "history").get("max_undo_steps"), UNDO_MAX_DEPTH, minimum=1
            ),
            "color": brush.get("color", "#000000"),
            "line_width": coerce_int(brush.get("line_width"), 5, minimum=1),
            "max_recent_colors": coerce_int(brush.get("max_recent_colors"), 10, minimum=1),
            "move_throttle": coerce_int(section(config, "input").get("move_throttle_ms"), 16) / 1000,
        }
        options.update(overrides)
        return cls(**options)

    # --- canvas ---------------------------------------------------------

    @property
    def size(self):
        return self.canvas.size

    def resize(self, width: int, height: int) -> bool:
        return self.canvas.resize(width, height)

    def container_resized(self, client_width: int, client_height: int) -> bool:
        return self.canvas.container_resized(client_width, client_height)

    def poll(self) -> bool:
        return self.canvas.poll()

    def _on_resized(self, width: int, height: int) -> None:
        # Snapshots keep the size they were taken at and cannot be replayed.
        self.history.clear()

    # --- tools ----------------------------------------------------------

    @property
    def active_tool(self) -> Optional[Tool]:
        return self.tools.active_tool

    @property
    def active_tool_name(self) -> Optional[str]:
        return self.tools.active_name

    @property
    def cursor(self) -> str:
        return self.context.cursor

    def set_active_tool(self, name: str) -> Tool:
        return self.tools.set_active_tool(name)

    def on_tool_change(self, listener: Callable[[str, Tool], None]) -> None:
        self.tools.listeners.append(listener)

    def on_text_requested(self, listener: Callable[[Point], None]) -> None:
        self._text_tool.listeners.append(listener)

    @property
    def _text_tool(self) -> TextTool:
        return self.tools.tools["text"]

    # --- pointer input --------------------------------------------------

    def pointer_down(self, point: Point) -> None:
        self._moves.reset()
        self.tools.pointer_down(point)

    def pointer_move(self, point: Point) -> None:
        self._moves.offer(point)

    def pointer_up(self, point: Point) -> None:
        self._moves.flush()
        self.tools.pointer_up(point)

    def pointer_leave(self, point: Point) -> None:
        if self.tools.gesture_active:
            self.pointer_up(point)

    def click(self, point: Point) -> None:
        self.pointer_down(point)
        self.pointer_up(point)

    def key_press(self, key: str) -> bool:
        key = key.lower()
        if key in ("enter", "return"):
            return self.commit_selection()
        if key in ("escape", "esc"):
            return self.cancel_selection()
        if key == "undo":
            return self.undo()
        if key == "redo":
            return self.redo()
        return False

    def commit_selection(self) -> bool:
        return self.tools.commit_pending()

    def cancel_selection(self) -> bool:
        return self.tools.cancel_pending()

    # --- history --------------------------------------------------------

    def undo(self) -> bool:
        self.tools.commit_pending()
        return self.history.undo()

    def redo(self) -> bool:
        self.tools.commit_pending()
        return self.history.redo()

    def save_state(self) -> None:
        self.history.capture()

    def clear_canvas(self) -> None:
        self.tools.commit_pending()
        before = self.history.snapshot()
        self.layers.drawing.clear()
        self.layers.clear_overlay()
        self.history.push(before)

    def load_image(self, source: str) -> None:
        """Replace the drawing with the image at ``source`` (path or http(s) URL).

        Raises ImageLoadFailure and leaves the drawing untouched when the image
        cannot be fetched or decoded.
        """
        image = _read_image(str(source))
        self.tools.commit_pending()
        drawing = self.layers.drawing
        before = self.history.snapshot()
        drawing.clear()
        if image.get_flags() & pygame.SRCALPHA:
            drawing.put_region(image, (0, 0))
        else:
            drawing.blit(image, (0, 0))
        self.history.push(before)
        logger.info("Loaded %sx%s image from %s", image.get_width(), image.get_height(), source)

    # --- brush settings -------------------------------------------------

    @property
    def color(self) -> str:
        return self.settings.color

    def set_color(self, value: str) -> str:
        color = self.settings.set_color(value)
        self.settings.add_recent_color(color)
        return color

    def set_line_width(self, value: float) -> int:
        return self.settings.set_line_width(value)

    def set_fill_shape(self, enabled: bool) -> None:
        self.settings.fill_shape = bool(enabled)

    def set_triangle_type(self, value: str) -> TriangleType:
        return self.settings.set_triangle_type(value)

    def pick_color(self, point: Point) -> Optional[str]:
        x, y = to_pixel(point)
        width, height = self.layers.size
        if not (0 <= x < width and 0 <= y < height):
            return None
        return self.set_color(pixel_to_hex(self.layers.drawing.get_at((x, y))))

    # --- text -----------------------------------------------------------

    def preview_text(self, request: TextRequest) -> bool:
        return self._text_tool.preview(request)

    def apply_text(self, request: TextRequest) -> bool:
        return self._text_tool.apply(request)

    # --- compositing ----------------------------------------------------

    def set_transparent(self, transparent: bool) -> None:
        self.transparent = bool(transparent)

    def toggle_transparency(self) -> bool:
        self.transparent = not self.transparent
        return self.transparent

    def flatten(self, transparent: Optional[bool] = None) -> pygame.Surface:
        if transparent is None:
            transparent = self.transparent
        return self.layers.composite(transparent=transparent)

    def icon_image(self, size: int = ICON_SIZE, transparent: Optional[bool] = None) -> pygame.Surface:
        flat = self.flatten(transparent)
        width, height = flat.get_size()
        side = min(width, height)
        crop = flat.subsurface(((width - side) // 2, (height - side) // 2, side, side)).copy()
        return pygame.transform.smoothscale(crop, (size, size))

    def render_view(self) -> pygame.Surface:
        return self.layers.composite(transparent=self.transparent, include_overlay=True, checkerboard=True)
