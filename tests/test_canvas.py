from types import SimpleNamespace

import pytest
from PySide6.QtCore import QMimeData, QPoint, QPointF, Qt, QUrl
from PySide6.QtGui import QDropEvent, QImage, QWheelEvent

from core.image_loader import ImageHandle
from core.trim_rect import TrimRect
from ui.canvas import Canvas


@pytest.fixture
def canvas(qtbot):
    c = Canvas()
    qtbot.addWidget(c)
    c.resize(400, 400)
    c.show()
    qtbot.waitExposed(c)
    return c


def assert_rect(actual, expected, tol=1e-6):
    for a, e in zip((actual.x(), actual.y(), actual.width(), actual.height()), expected):
        assert a == pytest.approx(e, abs=tol)


def _wheel(angle, modifiers=Qt.KeyboardModifier.NoModifier, pos=QPointF(100, 100)):
    return QWheelEvent(pos, pos, QPoint(0, 0), angle, Qt.MouseButton.NoButton, modifiers,
                       Qt.ScrollPhase.NoScrollPhase, False)


def test_set_image_fits_and_emits(qtbot, canvas, landscape_handle):
    with qtbot.waitSignal(canvas.image_loaded) as blocker:
        canvas.set_image(landscape_handle)

    assert blocker.args == ["landscape.png"]
    assert canvas.fit.scale == pytest.approx(0.5)
    assert canvas.fit.origin.y() == pytest.approx(50)


def test_new_image_resets_pan_and_zoom(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.zoom(1.0, QPointF(10, 10))
    canvas.pan(5, 5)
    assert not canvas.transform_state.is_identity()

    canvas.set_image(landscape_handle)
    assert canvas.transform_state.is_identity()


def test_overlay_tracks_trim_rect(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))

    assert canvas.overlay.visible
    assert_rect(canvas.overlay.rect, (5, 55, 50, 25))


def test_trim_rect_set_before_image_is_drawn_on_load(canvas, landscape_handle):
    canvas.set_trim_rect((10, 10, 100, 50))
    assert not canvas.overlay.visible

    canvas.set_image(landscape_handle)
    assert canvas.overlay.visible
    assert_rect(canvas.overlay.rect, (5, 55, 50, 25))


def test_empty_trim_rect_hides_overlay(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))
    canvas.set_trim_rect((10, 10, 0, 50))
    assert not canvas.overlay.visible


def test_zoom_and_pan_move_overlay(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))

    canvas.zoom(1.0, QPointF(0, 0))
    assert_rect(canvas.overlay.rect, (10, 110, 100, 50))
    assert canvas.overlay.border_width == pytest.approx(0.3)

    canvas.pan(-10, 5)
    assert_rect(canvas.overlay.rect, (0, 115, 100, 50))
    assert canvas.trim_rect == TrimRect(10, 10, 100, 50)


def test_reset_view(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))
    canvas.zoom(2.0, QPointF(30, 30))
    canvas.reset_view()
    assert_rect(canvas.overlay.rect, (5, 55, 50, 25))


def test_resize_replays_trim_rect(qtbot, canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))

    canvas.resize(800, 800)

    def check():
        # 800x600 into 800x800: scale 1, origin (0, 100)
        assert_rect(canvas.overlay.rect, (10, 110, 100, 50))

    qtbot.waitUntil(check)


def test_select_point_emits_pixel(qtbot, canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    with qtbot.waitSignal(canvas.pixel_clicked) as blocker:
        canvas.select_point(QPointF(5, 55))
    assert blocker.args == [10, 10]


def test_select_point_without_image(qtbot, canvas):
    with qtbot.assertNotEmitted(canvas.pixel_clicked):
        assert canvas.select_point(QPointF(5, 55)) is None


def test_mouse_press_starts_selection(qtbot, canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    pixels = []
    canvas.pixel_clicked.connect(lambda x, y: pixels.append((x, y)))

    with qtbot.waitSignal(canvas.selection_started):
        qtbot.mousePress(canvas, Qt.MouseButton.LeftButton, pos=QPoint(100, 100))
    assert pixels == [(200, 100)]


def test_wheel_pans(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.wheelEvent(_wheel(QPoint(0, 120)))
    assert canvas.transform_state.transform.map(QPointF(0, 0)) == QPointF(0, canvas.settings.wheel_pan_step)


def test_ctrl_wheel_zooms_about_cursor(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.wheelEvent(_wheel(QPoint(0, 120), Qt.KeyboardModifier.ControlModifier))

    assert canvas.transform_state.scale == pytest.approx(1 + canvas.settings.wheel_zoom_step)
    pivot = canvas.transform_state.transform.map(QPointF(100, 100))
    assert pivot.x() == pytest.approx(100)
    assert pivot.y() == pytest.approx(100)


def _drop(mime):
    return QDropEvent(QPointF(10, 10), Qt.DropAction.CopyAction, mime,
                      Qt.MouseButton.NoButton, Qt.KeyboardModifier.NoModifier)


def test_drop_without_file_is_declined(canvas):
    mime = QMimeData()  # keep alive: QDropEvent does not own the mime data
    event = _drop(mime)
    canvas.dropEvent(event)
    assert not event.isAccepted()
    assert canvas.active_workers == {}


def test_drop_file_loads_image(qtbot, canvas, sample_png):
    mime = QMimeData()
    mime.setUrls([QUrl.fromLocalFile(sample_png)])

    with qtbot.waitSignal(canvas.image_loaded, timeout=5000) as blocker:
        canvas.dropEvent(_drop(mime))

    assert blocker.args == [sample_png]
    assert canvas.image_handle.size == (800, 600)


def test_invalid_file_keeps_previous_image(qtbot, canvas, landscape_handle, tmp_path):
    canvas.set_image(landscape_handle)
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not an image")

    with qtbot.waitSignal(canvas.load_failed, timeout=5000) as blocker:
        canvas.request_load(str(bad))

    assert blocker.args[0] == str(bad)
    assert canvas.image_handle is landscape_handle


def test_stale_load_is_ignored(canvas):
    canvas._pending_path = "new.png"
    canvas._on_load_finished("old.png", QImage(10, 10, QImage.Format.Format_RGB32))
    assert canvas.image_handle is None


def test_paint_does_not_fail(canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    canvas.set_trim_rect((10, 10, 100, 50))
    canvas.zoom(0.5, QPointF(200, 200))
    canvas.repaint()


def test_tall_image_is_pillarboxed(canvas):
    image = QImage(100, 400, QImage.Format.Format_RGB32)
    canvas.set_image(ImageHandle.from_image("tall.png", image))
    # 100x400 into 400x400: scale 1, origin (150, 0)
    assert canvas.fit.scale == pytest.approx(1.0)
    assert canvas.fit.origin.x() == pytest.approx(150)


def test_select_after_zooming_out_to_nothing_is_ignored(qtbot, canvas, landscape_handle):
    canvas.set_image(landscape_handle)
    # Each step halves the scale; the user transform ends up singular
    for _ in range(41):
        canvas.zoom(-1.0, QPointF(10, 10))

    with qtbot.assertNotEmitted(canvas.pixel_clicked):
        assert canvas.select_point(QPointF(200, 200), begins=True) is None


def test_repeated_load_of_same_path_keeps_every_worker(canvas):
    started = []
    canvas.thread_pool = SimpleNamespace(start=started.append)

    canvas.request_load("same.png")
    canvas.request_load("same.png")
    assert len(canvas.active_workers) == 2

    first, second = started
    first.signals.error.emit("same.png", "invalid image file")
    assert list(canvas.active_workers.values()) == [second]

    second.signals.finished.emit("same.png", QImage(10, 10, QImage.Format.Format_RGB32))
    assert canvas.active_workers == {}
