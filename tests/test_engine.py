import io
import urllib.error

import pygame
import pytest

from paintbar.config import DEFAULT_CONFIG
from paintbar.engine import PaintBar
from paintbar.errors import ImageLoadFailure, InvalidColor, UnknownTool


def _engine(**kwargs):
    kwargs.setdefault("move_throttle", 0)
    return PaintBar(100, 100, **kwargs)


def _png(tmp_path, color=(0, 200, 0), size=(10, 10)):
    path = tmp_path / "image.png"
    image = pygame.Surface(size)
    image.fill(color)
    pygame.image.save(image, str(path))
    return path


class _FakeResponse:
    def __init__(self, data):
        self._data = data

    def read(self):
        return self._data

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_from_config_uses_defaults():
    engine = PaintBar.from_config(DEFAULT_CONFIG)
    assert engine.size == (800, 600)
    assert engine.color == "#000000"
    assert engine.settings.line_width == 5
    assert engine.history.max_steps == 50
    assert engine.active_tool_name == "pencil"


def test_from_config_tolerates_bad_values_and_overrides():
    config = {"canvas": {"width": "wide", "height": 240, "square": True}, "brush": {"line_width": -3}}
    engine = PaintBar.from_config(config, max_undo_steps=5)
    assert engine.size == (240, 240)
    assert engine.settings.line_width == 1
    assert engine.history.max_steps == 5


def test_unknown_tool_surfaces_error():
    engine = _engine()
    with pytest.raises(UnknownTool):
        engine.set_active_tool("smudge")
    assert engine.active_tool_name == "pencil"


def test_set_color_validates_and_records_recent():
    engine = _engine()
    assert engine.set_color("ABCDEF") == "#abcdef"
    assert engine.settings.recent_colors[0] == "#abcdef"
    with pytest.raises(InvalidColor):
        engine.set_color("purple")
    assert engine.color == "#abcdef"


def test_load_image_from_path(tmp_path):
    engine = _engine()
    engine.layers.drawing.fill((255, 0, 0, 255))
    before = engine.layers.drawing.read_pixels()

    engine.load_image(str(_png(tmp_path)))

    assert engine.layers.drawing.get_at((5, 5)) == (0, 200, 0, 255)
    assert engine.layers.drawing.get_at((50, 50))[3] == 0
    assert engine.undo()
    assert engine.layers.drawing.read_pixels() == before


def test_load_image_missing_file_leaves_drawing(tmp_path):
    engine = _engine()
    engine.layers.drawing.fill((255, 0, 0, 255))
    before = engine.layers.drawing.read_pixels()

    with pytest.raises(ImageLoadFailure) as excinfo:
        engine.load_image(str(tmp_path / "missing.png"))

    assert excinfo.value.source.endswith("missing.png")
    assert engine.layers.drawing.read_pixels() == before
    assert not engine.history.can_undo


def test_load_image_undecodable_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not-an-image")
    engine = _engine()
    with pytest.raises(ImageLoadFailure):
        engine.load_image(str(path))


def test_load_image_from_url(monkeypatch, tmp_path):
    data = _png(tmp_path, color=(0, 0, 200)).read_bytes()
    requested = []

    def _urlopen(request, timeout):
        requested.append((request.full_url, timeout))
        return _FakeResponse(data)

    monkeypatch.setattr("paintbar.engine.urllib.request.urlopen", _urlopen)
    engine = _engine()
    engine.load_image("https://example.com/pictures/cat.png")

    assert requested == [("https://example.com/pictures/cat.png", 10)]
    assert engine.layers.drawing.get_at((1, 1)) == (0, 0, 200, 255)


def test_load_image_url_failure(monkeypatch):
    def _urlopen(request, timeout):
        raise urllib.error.URLError("offline")

    monkeypatch.setattr("paintbar.engine.urllib.request.urlopen", _urlopen)
    engine = _engine()
    with pytest.raises(ImageLoadFailure) as excinfo:
        engine.load_image("http://example.com/cat.png")
    assert "offline" in excinfo.value.reason
    assert not engine.history.can_undo


def test_pointer_leave_ends_active_gesture():
    engine = _engine()
    engine.pointer_down((10, 10))
    engine.pointer_move((40, 10))
    engine.pointer_leave((60, 10))

    assert not engine.tools.gesture_active
    assert engine.layers.drawing.get_at((50, 10))[3] == 255
    assert len(engine.history.undo_stack) == 1

    engine.pointer_leave((70, 10))
    assert len(engine.history.undo_stack) == 1


def test_throttled_moves_flush_before_pointer_up(clock):
    engine = PaintBar(100, 100, clock=clock)
    engine.set_active_tool("line")
    engine.pointer_down((10, 50))
    engine.pointer_move((20, 50))
    engine.pointer_move((90, 20))
    # Still inside the window, so the preview shows the first move only.
    assert engine.active_tool.end_point == (20, 50)
    engine.pointer_up((90, 50))
    assert engine.layers.drawing.get_at((50, 50))[3] == 255


def test_key_press_routes_history_keys():
    engine = _engine()
    engine.click((10, 10))
    assert engine.key_press("undo")
    assert engine.key_press("REDO")
    assert not engine.key_press("space")


def test_undo_on_empty_history_is_noop():
    engine = _engine()
    assert not engine.undo()
    assert not engine.redo()


def test_clear_canvas_is_undoable():
    engine = _engine()
    engine.layers.drawing.fill((1, 2, 3, 255))
    engine.clear_canvas()
    assert engine.layers.drawing.get_at((5, 5))[3] == 0
    engine.undo()
    assert engine.layers.drawing.get_at((5, 5)) == (1, 2, 3, 255)


def test_pick_color_sets_brush():
    engine = _engine()
    engine.layers.drawing.fill((1, 2, 3, 255), (0, 0, 10, 10))
    assert engine.pick_color((5, 5)) == "#010203"
    assert engine.color == "#010203"
    assert engine.settings.recent_colors[0] == "#010203"
    assert engine.pick_color((50, 50)) == "#ffffff"
    assert engine.pick_color((150, 50)) is None
    assert engine.color == "#ffffff"


def test_transparency_controls_flatten():
    engine = _engine()
    assert tuple(engine.flatten().get_at((50, 50))) == (255, 255, 255, 255)
    assert engine.toggle_transparency()
    assert engine.flatten().get_at((50, 50))[3] == 0
    assert tuple(engine.flatten(transparent=False).get_at((50, 50))) == (255, 255, 255, 255)
    engine.set_transparent(False)
    assert not engine.transparent


def test_render_view_includes_overlay():
    engine = _engine(transparent=True)
    engine.layers.overlay.fill((0, 0, 255, 255), (0, 0, 5, 5))
    view = engine.render_view()
    assert tuple(view.get_at((2, 2))) == (0, 0, 255, 255)
    assert view.get_at((50, 50))[3] == 255
    assert engine.flatten().get_at((2, 2))[3] == 0


def test_icon_image_crops_center_square():
    engine = PaintBar(200, 100)
    engine.layers.drawing.fill((255, 0, 0, 255), (50, 0, 100, 100))
    icon = engine.icon_image()
    assert icon.get_size() == (64, 64)
    assert tuple(icon.get_at((32, 32)))[:3] == (255, 0, 0)
    assert tuple(icon.get_at((0, 0)))[:3] == (255, 0, 0)


def test_resize_clears_history():
    engine = PaintBar(400, 300, move_throttle=0)
    engine.click((10, 10))
    assert engine.history.can_undo
    assert engine.resize(500, 400)
    assert engine.size == (500, 400)
    assert not engine.history.can_undo


def test_resize_commits_floating_selection_first():
    engine = PaintBar(400, 300, move_throttle=0)
    engine.layers.drawing.fill((255, 0, 0, 255), (10, 10, 20, 20))
    engine.set_active_tool("select")
    engine.pointer_down((10, 10))
    engine.pointer_up((30, 30))
    assert engine.active_tool.selection is not None

    engine.resize(400, 400)

    assert engine.active_tool.selection is None
    assert engine.layers.drawing.get_at((20, 70))[3] == 255


def test_resize_during_stroke_keeps_layers_same_size():
    engine = PaintBar(400, 300, move_throttle=0)
    engine.pointer_down((10, 10))
    engine.pointer_move((50, 50))

    assert engine.resize(500, 400)

    assert not engine.tools.gesture_active
    assert not engine.history.can_undo
    engine.pointer_up((60, 60))
    assert not engine.history.can_undo
    assert not engine.undo()
    assert [layer.size for layer in engine.layers.layers] == [(500, 400)] * 4


def test_undo_during_stroke_records_then_undoes_it():
    engine = _engine()
    engine.pointer_down((10, 10))
    engine.pointer_move((40, 10))
    assert engine.layers.drawing.get_at((25, 10))[3] == 255

    assert engine.undo()

    assert engine.layers.drawing.get_at((25, 10))[3] == 0
    assert not engine.tools.gesture_active
    engine.pointer_up((60, 10))
    assert engine.layers.drawing.get_at((50, 10))[3] == 0
    assert engine.history.can_redo
    assert engine.redo()
    assert engine.layers.drawing.get_at((25, 10))[3] == 255


def test_container_resize_through_engine(clock):
    engine = PaintBar(400, 300, clock=clock, resize_debounce=0.1)
    engine.container_resized(840, 640)
    assert not engine.poll()
    clock.advance(0.2)
    assert engine.poll()
    assert engine.size == (800, 600)


def test_save_state_sequence_undoes_to_start():
    engine = _engine()
    initial = engine.layers.drawing.read_pixels()
    for idx in range(5):
        engine.save_state()
        engine.layers.drawing.fill((idx, 10, 10, 255))

    for _ in range(5):
        assert engine.undo()
    assert engine.layers.drawing.read_pixels() == initial
    assert not engine.undo()


def test_on_tool_change_reports_new_tool():
    engine = _engine()
    seen = []
    engine.on_tool_change(lambda name, tool: seen.append(name))
    engine.set_active_tool("eraser")
    assert seen == ["eraser"]
    assert engine.cursor == "crosshair"
