from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame

from paintbar.colors import hex_to_pixel
from paintbar.config import load_config
from paintbar.engine import PaintBar
from paintbar.errors import ImageLoadFailure
from paintbar.geometry import Point, TriangleType, fit_rect
from paintbar.paths import ensure_directories, get_data_root
from paintbar.tools.text import TextRequest
from paintbar.ui.common import (
    FINGERMOTION,
    Button,
    create_window,
    is_primary_pointer_event,
    pointer_event_pos,
    to_canvas_point,
)

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

TOOLBAR_HEIGHT = 40
TOOL_ORDER = [
    "pencil",
    "eraser",
    "spray",
    "fill",
    "text",
    "select",
    "rectangle",
    "circle",
    "line",
    "triangle",
    "arc",
]
TOOL_HOTKEYS: Dict[int, str] = {
    pygame.K_1: "pencil",
    pygame.K_2: "eraser",
    pygame.K_3: "spray",
    pygame.K_4: "fill",
    pygame.K_5: "text",
    pygame.K_6: "select",
    pygame.K_7: "rectangle",
    pygame.K_8: "circle",
    pygame.K_9: "line",
    pygame.K_0: "triangle",
    pygame.K_a: "arc",
}
TRIANGLE_CYCLE = [TriangleType.EQUILATERAL, TriangleType.ISOSCELES, TriangleType.RIGHT]
LINE_WIDTH_STEP = 2


def _save_surface_atomic(surface: pygame.Surface, path: Path) -> None:
    # Keep a .png suffix so pygame writes a PNG-encoded file.
    tmp_path = path.with_name(f".{path.stem}.tmp{path.suffix}")
    pygame.image.save(surface, str(tmp_path))
    os.replace(tmp_path, path)


def _export_path(exports_dir: Path, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
    path = exports_dir / f"paint-{stamp}.png"
    counter = 1
    while path.exists():
        path = exports_dir / f"paint-{stamp}_{counter}.png"
        counter += 1
    return path


def _next_triangle_type(current: TriangleType) -> TriangleType:
    idx = TRIANGLE_CYCLE.index(current)
    return TRIANGLE_CYCLE[(idx + 1) % len(TRIANGLE_CYCLE)]


def _has_ctrl(event: pygame.event.Event) -> bool:
    return bool(getattr(event, "mod", 0) & pygame.KMOD_CTRL)


class PaintBarApp:
    def __init__(
        self,
        *,
        screen: Optional[pygame.Surface] = None,
        screen_rect: Optional[pygame.Rect] = None,
        clock: Optional[pygame.time.Clock] = None,
    ) -> None:
        self.config = load_config()
        self.data_root = get_data_root(self.config)
        dirs = ensure_directories(self.data_root)
        self.exports_dir = dirs["exports"]

        self.engine = PaintBar.from_config(self.config)
        self.padding = self.engine.canvas.padding
        width, height = self.engine.size
        if screen is None:
            self.screen, self.screen_rect = create_window(
                (width + self.padding, height + self.padding + TOOLBAR_HEIGHT)
            )
        else:
            self.screen = screen
            self.screen_rect = screen_rect or screen.get_rect()
        self.clock = clock or pygame.time.Clock()

        self.font = pygame.font.SysFont("sans", 14)
        self.palette = [str(color) for color in self.config.get("palette", [])]
        self.tool_buttons: Dict[str, Button] = {}
        self.palette_buttons: List[Button] = []
        self._build_ui()

        self.pointer_down = False
        self.last_pos: Point = (0, 0)
        self.eyedropper_armed = False
        self.text_buffer: Optional[str] = None
        self.engine.on_text_requested(self._start_text)

    def _build_ui(self) -> None:
        self.tool_buttons.clear()
        self.palette_buttons.clear()
        x = 6
        for tool in TOOL_ORDER:
            rect = pygame.Rect(x, 6, 56, TOOLBAR_HEIGHT - 12)
            self.tool_buttons[tool] = Button(rect=rect, label=tool, fill=(235, 235, 235), border_width=1)
            x = rect.right + 4
        for color in self.palette:
            rect = pygame.Rect(x, 10, TOOLBAR_HEIGHT - 20, TOOLBAR_HEIGHT - 20)
            self.palette_buttons.append(Button(rect=rect, fill=hex_to_pixel(color)[:3], border_width=1))
            x = rect.right + 2

    @property
    def canvas_area(self) -> pygame.Rect:
        return pygame.Rect(
            0,
            TOOLBAR_HEIGHT,
            self.screen_rect.width,
            max(1, self.screen_rect.height - TOOLBAR_HEIGHT),
        )

    def _view_rect(self) -> pygame.Rect:
        area = self.canvas_area.inflate(-self.padding, -self.padding)
        if area.width <= 0 or area.height <= 0:
            area = self.canvas_area
        x, y, w, h = fit_rect(self.engine.size, area.size)
        if w >= self.engine.size[0] and h >= self.engine.size[1]:
            # Never upscale; center at native size.
            w, h = self.engine.size
            x, y = (area.width - w) // 2, (area.height - h) // 2
        return pygame.Rect(area.left + x, area.top + y, w, h)

    def _canvas_point(self, pos: Point) -> Point:
        return to_canvas_point(pos, self._view_rect(), self.engine.size)

    # --- text entry -------------------------------------------------------

    def _start_text(self, point: Point) -> None:
        self.text_buffer = ""
        pygame.key.start_text_input()

    def _end_text(self) -> None:
        self.text_buffer = None
        pygame.key.stop_text_input()

    def _text_request(self) -> TextRequest:
        return TextRequest(text=self.text_buffer or "", color=self.engine.color)

    def _handle_text_key(self, event: pygame.event.Event) -> None:
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self.engine.apply_text(self._text_request())
            self._end_text()
        elif event.key == pygame.K_ESCAPE:
            self.engine.cancel_selection()
            self._end_text()
        elif event.key == pygame.K_BACKSPACE:
            self.text_buffer = (self.text_buffer or "")[:-1]
            self.engine.preview_text(self._text_request())

    # --- commands -----------------------------------------------------------

    def _select_tool(self, name: str) -> None:
        if self.text_buffer is not None:
            self._end_text()
        self.engine.set_active_tool(name)

    def _export(self) -> Path:
        path = _export_path(self.exports_dir)
        _save_surface_atomic(self.engine.flatten(), path)
        logger.info("Exported drawing to %s", path)
        return path

    def _load_dropped(self, source: str) -> None:
        try:
            self.engine.load_image(source)
        except ImageLoadFailure as exc:
            logger.warning("Could not load dropped image: %s", exc)

    def _handle_key(self, event: pygame.event.Event) -> bool:
        """Apply a key press; returns False when the app should quit."""
        if self.text_buffer is not None:
            self._handle_text_key(event)
            return True
        key = event.key
        if _has_ctrl(event):
            if key == pygame.K_q:
                return False
            if key == pygame.K_z:
                self.engine.undo()
            elif key == pygame.K_y:
                self.engine.redo()
            elif key == pygame.K_s:
                self._export()
            elif key == pygame.K_n:
                self.engine.clear_canvas()
            return True
        if key in TOOL_HOTKEYS:
            self._select_tool(TOOL_HOTKEYS[key])
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self.engine.key_press("enter")
        elif key == pygame.K_ESCAPE:
            self.eyedropper_armed = False
            self.engine.key_press("escape")
        elif key == pygame.K_t:
            self.engine.toggle_transparency()
        elif key == pygame.K_i:
            self.eyedropper_armed = True
        elif key == pygame.K_f:
            self.engine.set_fill_shape(not self.engine.settings.fill_shape)
        elif key == pygame.K_TAB:
            self.engine.set_triangle_type(_next_triangle_type(self.engine.settings.triangle_type))
        elif key == pygame.K_LEFTBRACKET:
            self.engine.set_line_width(self.engine.settings.line_width - LINE_WIDTH_STEP)
        elif key == pygame.K_RIGHTBRACKET:
            self.engine.set_line_width(self.engine.settings.line_width + LINE_WIDTH_STEP)
        return True

    # --- pointer --------------------------------------------------------------

    def _handle_pointer_down(self, pos: Point) -> None:
        if pos[1] < TOOLBAR_HEIGHT:
            for tool, button in self.tool_buttons.items():
                if button.hit(pos):
                    self._select_tool(tool)
                    return
            for idx, button in enumerate(self.palette_buttons):
                if button.hit(pos):
                    self.engine.set_color(self.palette[idx])
                    return
            return
        point = self._canvas_point(pos)
        if self.eyedropper_armed:
            self.eyedropper_armed = False
            self.engine.pick_color(point)
            return
        if self.text_buffer is not None:
            self.engine.apply_text(self._text_request())
            self._end_text()
        self.pointer_down = True
        self.engine.pointer_down(point)

    def _handle_pointer_move(self, pos: Point) -> None:
        self.engine.pointer_move(self._canvas_point(pos))

    def _handle_pointer_up(self, pos: Point) -> None:
        self.pointer_down = False
        self.engine.pointer_up(self._canvas_point(pos))

    def _handle_window_resized(self) -> None:
        surface = pygame.display.get_surface()
        if surface is not None:
            self.screen = surface
            self.screen_rect = surface.get_rect()
        area = self.canvas_area
        self.engine.container_resized(area.width, area.height)

    # --- frame ------------------------------------------------------------------

    def _render(self) -> None:
        self.screen.fill((230, 230, 230))
        pygame.draw.rect(self.screen, (245, 245, 245), (0, 0, self.screen_rect.width, TOOLBAR_HEIGHT))
        for tool, button in self.tool_buttons.items():
            button.draw(self.screen, self.font)
            if tool == self.engine.active_tool_name:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=2, border_radius=6)
        current = hex_to_pixel(self.engine.color)[:3]
        for idx, button in enumerate(self.palette_buttons):
            button.draw(self.screen)
            if hex_to_pixel(self.palette[idx])[:3] == current:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=2)

        view_rect = self._view_rect()
        view = self.engine.render_view()
        if view_rect.size != view.get_size():
            view = pygame.transform.smoothscale(view, view_rect.size)
        self.screen.blit(view, view_rect.topleft)
        pygame.draw.rect(self.screen, (160, 160, 160), view_rect.inflate(2, 2), width=1)
        pygame.display.flip()

    def run(self, *, quit_on_exit: bool = True) -> None:
        running = True
        self._render()
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self._handle_key(event)
                elif event.type == pygame.TEXTINPUT and self.text_buffer is not None:
                    self.text_buffer += event.text
                    self.engine.preview_text(self._text_request())
                elif event.type in (pygame.VIDEORESIZE, pygame.WINDOWRESIZED):
                    self._handle_window_resized()
                elif event.type == pygame.WINDOWLEAVE:
                    if self.pointer_down:
                        self.pointer_down = False
                        self.engine.pointer_leave(self._canvas_point(self.last_pos))
                elif event.type == pygame.DROPFILE:
                    self._load_dropped(event.file)
                elif is_primary_pointer_event(event, is_down=True):
                    pos = pointer_event_pos(event, self.screen_rect)
                    if pos is None:
                        continue
                    self.last_pos = pos
                    self._handle_pointer_down(pos)
                elif event.type == pygame.MOUSEMOTION or (FINGERMOTION is not None and event.type == FINGERMOTION):
                    if not self.pointer_down:
                        continue
                    pos = pointer_event_pos(event, self.screen_rect)
                    if pos is None:
                        continue
                    self.last_pos = pos
                    self._handle_pointer_move(pos)
                elif is_primary_pointer_event(event, is_down=False):
                    if not self.pointer_down:
                        continue
                    pos = pointer_event_pos(event, self.screen_rect) or self.last_pos
                    self._handle_pointer_up(pos)

            self.engine.poll()
            self._render()
            self.clock.tick(60)

        if quit_on_exit:
            pygame.quit()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        PaintBarApp().run(quit_on_exit=True)
    except Exception:
        logger.exception("PaintBar crashed")
        pygame.quit()
        raise


if __name__ == "__main__":
    main()
