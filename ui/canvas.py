from PySide6.QtCore import Qt, QEvent, QPointF, QSize, QThreadPool, Signal
from PySide6.QtGui import QPainter, QColor, QPen
from PySide6.QtWidgets import QWidget, QSizePolicy

from core.geometry import DegenerateGeometryError, combined_transform, fit_transform
from core.image_loader import ImageHandle, local_file_from_mime
from core.log import get_logger
from core.overlay import HIDDEN, compute_overlay
from core.pipeline import RedrawPipeline
from core.selection import SelectionTracker
from core.settings import CanvasSettings
from core.transform_state import TransformState
from ui.image_loader_worker import ImageLoaderWorker

logger = get_logger(__name__)


class Canvas(QWidget):
    """Drop target that shows one image, letterboxed, under a user pan/zoom.

    Gesture capability set used by the host and by the Qt event handlers:
    zoom(magnification, pivot), pan(dx, dy) and select_point(point, begins).
    Screen coordinates are widget-local, origin top-left, y down.
    """
    image_loaded = Signal(str)           # source path
    pixel_clicked = Signal(int, int)     # image pixel
    selection_started = Signal()
    load_failed = Signal(str, str)       # path, reason
    trim_rect_changed = Signal(object)   # TrimRect

    def __init__(self, settings=None):
        super().__init__()
        self.setAcceptDrops(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self.settings = settings or CanvasSettings()
        self.background_color = QColor(Qt.GlobalColor.white)
        self.overlay_color = QColor(255, 0, 0)

        self.image_handle = None
        self.fit = None  # FitTransform, None while image or view is degenerate
        self.transform_state = TransformState()
        self.overlay = HIDDEN

        self.tracker = SelectionTracker(self)
        self.tracker.selection_started.connect(self.selection_started)
        self.tracker.pixel_selected.connect(self.pixel_clicked)

        self.pipeline = RedrawPipeline(reset_transform=self.transform_state.reset, parent=self)
        self.pipeline.trim_rect_changed.connect(self.trim_rect_changed)
        self.pipeline.subscribe(self.redraw)

        self.thread_pool = QThreadPool.globalInstance()
        self.active_workers = {}   # worker.signals -> worker
        self._pending_path = None  # most recent drop; older results are stale

    def sizeHint(self):
        return QSize(800, 600)

    def view_size(self):
        return (self.width(), self.height())

    # ---- Trim rect (externally settable/observable) ----
    @property
    def trim_rect(self):
        return self.pipeline.trim_rect

    def set_trim_rect(self, rect):
        self.pipeline.set_trim_rect(rect)

    # ---- Loading ----
    def request_load(self, path):
        """Decode path on the thread pool; set_image runs back on this thread."""
        self._pending_path = path
        worker = ImageLoaderWorker(path)

        # Keep reference to prevent GC in PySide6
        self.active_workers[worker.signals] = worker
        worker.signals.finished.connect(self._on_load_finished)
        worker.signals.error.connect(self._on_load_error)

        logger.info(f"Loading {path}")
        self.thread_pool.start(worker)

    def _on_load_finished(self, path, image):
        self.active_workers.pop(self.sender(), None)
        if path != self._pending_path:
            logger.debug(f"Ignoring stale load of {path}")
            return
        self._pending_path = None
        self.set_image(ImageHandle.from_image(path, image))

    def _on_load_error(self, path, error_msg):
        self.active_workers.pop(self.sender(), None)
        if path != self._pending_path:
            return
        self._pending_path = None
        # Previous image (if any) stays on screen
        logger.warning(f"Error loading {path}: {error_msg}")
        self.load_failed.emit(path, error_msg)

    def set_image(self, handle):
        self.image_handle = handle
        self._update_fit()
        logger.info(f"Image ready: {handle.path} ({handle.width}x{handle.height})")

        self.pipeline.image_loaded()
        self.image_loaded.emit(handle.path)
        self.update()

    def _update_fit(self):
        if self.image_handle is None:
            self.fit = None
            return
        try:
            self.fit = fit_transform(self.image_handle.size, self.view_size())
        except DegenerateGeometryError as e:
            logger.debug(f"Skipping fit: {e}")
            self.fit = None

    # ---- Gestures ----
    def zoom(self, magnification, pivot):
        self.transform_state.zoom(magnification, QPointF(pivot))
        self.pipeline.transform_changed()
        self.update()

    def pan(self, dx, dy):
        self.transform_state.pan(dx, dy)
        self.pipeline.transform_changed()
        self.update()

    def reset_view(self):
        self.transform_state.reset()
        self.pipeline.transform_changed()
        self.update()

    def select_point(self, point, begins=False):
        if self.image_handle is None:
            return None
        return self.tracker.select(QPointF(point), self.fit, self.transform_state.transform, begins)

    # ---- Redraw ----
    def redraw(self, trim_rect):
        """Recompute the overlay immediately; painting just reads self.overlay."""
        self.overlay = compute_overlay(
            trim_rect,
            self.fit,
            self.transform_state.transform,
            self.view_size(),
            self.settings.border_ratio,
        )
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.background_color)

        if self.image_handle is not None and self.fit is not None:
            painter.save()
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.setTransform(combined_transform(self.fit, self.transform_state.transform))
            painter.drawImage(QPointF(0, 0), self.image_handle.image)
            painter.restore()

        if self.overlay.visible:
            bw = self.overlay.border_width
            pen = QPen(self.overlay_color, bw)
            pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            # Keep the stroke inside the rect
            painter.drawRect(self.overlay.rect.adjusted(bw / 2, bw / 2, -bw / 2, -bw / 2))

        painter.end()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_fit()
        self.pipeline.view_resized()

    # ---- Drag & drop ----
    def dragEnterEvent(self, event):
        if local_file_from_mime(event.mimeData()):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if local_file_from_mime(event.mimeData()):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event):
        path = local_file_from_mime(event.mimeData())
        if not path:
            event.ignore()
            return
        event.acceptProposedAction()
        self.request_load(path)

    # ---- Input ----
    def event(self, event):
        if event.type() == QEvent.Type.NativeGesture:
            if event.gestureType() == Qt.NativeGestureType.ZoomNativeGesture:
                self.zoom(event.value(), event.position())
                return True
        return super().event(event)

    def wheelEvent(self, event):
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            notches = event.angleDelta().y() / 120.0
            if notches:
                self.zoom(notches * self.settings.wheel_zoom_step, event.position())
        else:
            delta = event.pixelDelta()
            if not delta.isNull():
                dx, dy = delta.x(), delta.y()
            else:
                step = self.settings.wheel_pan_step
                dx = event.angleDelta().x() / 120.0 * step
                dy = event.angleDelta().y() / 120.0 * step
            if dx or dy:
                self.pan(dx, dy)
        event.accept()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self.image_handle is not None:
            self.select_point(event.position(), begins=True)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if event.buttons() & Qt.MouseButton.LeftButton and self.image_handle is not None:
            self.select_point(event.position())
            event.accept()
        else:
            super().mouseMoveEvent(event)
