from datetime import datetime

import pygame

from paintbar.app import (
    TOOL_HOTKEYS,
    TOOL_ORDER,
    _export_path,
    _next_triangle_type,
    _save_surface_atomic,
)
from paintbar.geometry import TriangleType
from paintbar.ui.common import is_primary_pointer_event, pointer_event_pos, to_canvas_point


def test_export_path_uses_timestamp(tmp_path):
    path = _export_path(tmp_path, now=datetime(2026, 2, 6, 10, 11, 12))
    assert path == tmp_path / "paint-2026-02-06_101112.png"


def test_export_path_adds_counter_on_collision(tmp_path):
    (tmp_path / "paint-2026-02-06_101112.png").write_bytes(b"old")
    (tmp_path / "paint-2026-02-06_101112_1.png").write_bytes(b"old")

    class FixedNow:
        def strftime(self, _fmt: str) -> str:
            return "2026-02-06_101112"

    path = _export_path(tmp_path, now=FixedNow())
    assert path == tmp_path / "paint-2026-02-06_101112_2.png"


def test_save_surface_atomic_writes_png(tmp_path):
    surface = pygame.Surface((12, 8), pygame.SRCALPHA)
    surface.fill((10, 20, 30, 255))
    path = tmp_path / "paint-x.png"

    _save_surface_atomic(surface, path)

    assert path.exists()
    assert not list(tmp_path.glob(".*tmp*"))
    loaded = pygame.image.load(str(path))
    assert loaded.get_size() == (12, 8)
    assert tuple(loaded.get_at((3, 3)))[:3] == (10, 20, 30)


def test_hotkeys_cover_toolbar_tools():
    assert set(TOOL_HOTKEYS.values()) == set(TOOL_ORDER)
    assert TOOL_HOTKEYS[pygame.K_1] == "pencil"
    assert TOOL_HOTKEYS[pygame.K_0] == "triangle"


def test_triangle_type_cycles():
    assert _next_triangle_type(TriangleType.EQUILATERAL) is TriangleType.ISOSCELES
    assert _next_triangle_type(TriangleType.ISOSCELES) is TriangleType.RIGHT
    assert _next_triangle_type(TriangleType.RIGHT) is TriangleType.EQUILATERAL


def test_to_canvas_point_scales_through_view():
    view = pygame.Rect(20, 60, 200, 100)
    assert to_canvas_point((20, 60), view, (400, 200)) == (0, 0)
    assert to_canvas_point((120, 110), view, (400, 200)) == (200, 100)


def test_to_canvas_point_handles_empty_view():
    assert to_canvas_point((5, 5), pygame.Rect(0, 0, 0, 0), (10, 10)) == (0.0, 0.0)


def test_primary_pointer_event_accepts_left_mouse_button():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10))
    assert is_primary_pointer_event(event, is_down=True)


def test_primary_pointer_event_accepts_touch_emulated_mouse_button_zero():
    event = pygame.event.Event(pygame.MOUSEBUTTONUP, button=0, pos=(10, 10), touch=True)
    assert is_primary_pointer_event(event, is_down=False)


def test_primary_pointer_event_rejects_right_mouse_button():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 10))
    assert not is_primary_pointer_event(event, is_down=True)


def test_pointer_event_pos_scales_finger_events():
    event = pygame.event.Event(pygame.FINGERDOWN, x=0.5, y=0.25, finger_id=0, touch_id=0)
    assert pointer_event_pos(event, pygame.Rect(0, 0, 800, 400)) == (400, 100)
