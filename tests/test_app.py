"""
Viewer state handling that does not need a display.
"""

from types import SimpleNamespace

from fractald.app import FractalApp


def _app(tmp_path):
    return FractalApp(40, 30, 2, str(tmp_path / "settings.json"), str(tmp_path / "bookmarks.json"))


def test_pan_after_back_is_recorded(tmp_path):
    app = _app(tmp_path)
    first = app.engine.snapshot(app.palette)
    app.history.add(first)
    app.engine.pan(0.5, 0.0)
    app.history.add(app.engine.snapshot(app.palette))

    app._navigate(app.history.back(), 0)
    assert app.engine.snapshot(app.palette) == first

    # Drag before the navigated view was rendered
    app.dragging = True
    app.drag_origin = (0, 0)
    app._handle_mouse_motion(SimpleNamespace(pos=(10, 0), rel=(10, 0)), 10)
    panned = app.engine.snapshot(app.palette)
    assert panned != first

    assert app.history.add(panned)
    assert app.history.current == panned
    assert not app.history.can_go_forward


def test_render_of_navigated_view_keeps_forward_entries(tmp_path):
    app = _app(tmp_path)
    app.history.add(app.engine.snapshot(app.palette))
    app.engine.pan(0.5, 0.0)
    second = app.engine.snapshot(app.palette)
    app.history.add(second)

    app._navigate(app.history.back(), 0)
    assert not app.history.add(app.engine.snapshot(app.palette))
    assert app.history.forward() == second
