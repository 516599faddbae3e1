import pygame

from paintbar.engine import PaintBar
from paintbar.tools.base import ToolState


def _engine_with_pattern():
    engine = PaintBar(100, 100, move_throttle=0)
    drawing = engine.layers.drawing
    drawing.fill((255, 0, 0, 255), (10, 10, 20, 20))
    drawing.fill((0, 0, 255, 128), (12, 12, 4, 4))
    engine.set_active_tool("select")
    return engine


def _region_bytes(layer, rect):
    return pygame.image.tobytes(layer.copy_region(rect), "RGBA")


def _drag(engine, start, end):
    engine.pointer_down(start)
    engine.pointer_move(end)
    engine.pointer_up(end)


def test_selection_move_and_commit_round_trip():
    engine = _engine_with_pattern()
    drawing = engine.layers.drawing
    original = _region_bytes(drawing, (10, 10, 20, 20))

    _drag(engine, (10, 10), (30, 30))
    tool = engine.active_tool
    assert tool.selection.rect == (10, 10, 20, 20)
    assert tool.state is ToolState.MOVING_SELECTION
    assert drawing.get_at((12, 12))[3] == 0

    _drag(engine, (15, 15), (35, 25))
    assert tool.selection.rect == (30, 20, 20, 20)

    assert engine.key_press("enter")

    assert _region_bytes(drawing, (30, 20, 20, 20)) == original
    assert drawing.get_at((12, 12)) == (0, 0, 0, 0)
    assert tool.selection is None
    assert tool.state is ToolState.IDLE
    assert len(engine.history.undo_stack) == 1


def test_commit_leaves_source_area_transparent_over_white():
    engine = _engine_with_pattern()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (55, 55))
    engine.commit_selection()

    assert engine.layers.drawing.get_at((20, 20)) == (0, 0, 0, 0)
    flat = engine.flatten(transparent=False)
    assert tuple(flat.get_at((20, 20))) == (255, 255, 255, 255)
    assert tuple(flat.get_at((65, 65))) == (255, 0, 0, 255)


def test_undo_after_commit_restores_pre_selection_drawing():
    engine = _engine_with_pattern()
    before = engine.layers.drawing.read_pixels()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (55, 55))
    engine.commit_selection()

    assert engine.undo()
    assert engine.layers.drawing.read_pixels() == before


def test_selection_cancel_restores_drawing_exactly():
    engine = _engine_with_pattern()
    before = engine.layers.drawing.read_pixels()

    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (60, 70))
    assert engine.key_press("escape")

    assert engine.layers.drawing.read_pixels() == before
    assert not engine.history.can_undo
    assert engine.active_tool.selection is None


def test_tiny_selection_is_discarded():
    engine = _engine_with_pattern()
    before = engine.layers.drawing.read_pixels()

    engine.click((20, 20))

    tool = engine.active_tool
    assert tool.selection is None
    assert tool.state is ToolState.IDLE
    assert engine.layers.drawing.read_pixels() == before


def test_selection_move_is_clamped_to_canvas():
    engine = _engine_with_pattern()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (500, -40))
    assert engine.active_tool.selection.rect == (80, 0, 20, 20)


def test_selection_outside_canvas_is_clipped():
    engine = _engine_with_pattern()
    _drag(engine, (90, 90), (130, 120))
    assert engine.active_tool.selection.rect == (90, 90, 10, 10)


def test_floating_selection_renders_on_overlay():
    engine = _engine_with_pattern()
    _drag(engine, (10, 10), (30, 30))
    assert engine.layers.overlay.get_at((20, 20)) == (255, 0, 0, 255)
    assert engine.layers.drawing.get_at((20, 20))[3] == 0


def test_undo_commits_floating_selection_first():
    engine = _engine_with_pattern()
    before = engine.layers.drawing.read_pixels()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (45, 45))

    assert engine.undo()

    assert engine.active_tool.selection is None
    assert engine.layers.drawing.read_pixels() == before
    assert engine.redo()
    assert engine.layers.drawing.get_at((55, 55)) == (255, 0, 0, 255)


def test_click_outside_commits_and_starts_new_drag():
    engine = _engine_with_pattern()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (45, 45))

    engine.pointer_down((5, 90))

    tool = engine.active_tool
    assert tool.selection is None
    assert tool.state is ToolState.SELECTING
    assert engine.layers.drawing.get_at((55, 55)) == (255, 0, 0, 255)
    assert len(engine.history.undo_stack) == 1


def test_switching_tools_commits_selection():
    engine = _engine_with_pattern()
    _drag(engine, (10, 10), (30, 30))
    _drag(engine, (15, 15), (45, 45))
    engine.set_active_tool("pencil")
    assert engine.layers.drawing.get_at((55, 55)) == (255, 0, 0, 255)
    assert len(engine.history.undo_stack) == 1
