import os

from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
                               QFileDialog, QFrame, QLabel, QSpinBox, QMessageBox)
from PySide6.QtCore import Qt

from core.image_loader import file_dialog_filter
from core.log import get_logger
from core.processor import trim_image
from core.settings import CanvasSettings, open_settings
from core.trim_rect import NO_SELECTION, TrimRect, TrimRectAssembler
from ui.canvas import Canvas

logger = get_logger(__name__)

MAX_PIXELS = 1_000_000


class MainWindow(QMainWindow):
    def __init__(self, settings=None):
        super().__init__()
        self.setWindowTitle("ImageTrimmer")
        self.resize(1200, 800)

        # Settings
        self.settings = settings if settings is not None else open_settings()
        self.output_dir = self.settings.value("output_dir", "")
        self.last_open_dir = self.settings.value("last_open_dir", "")

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)

        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(20, 20, 20, 0)
        self.main_layout.setSpacing(15)

        self.create_toolbar()

        # Center - Canvas
        self.canvas = Canvas(CanvasSettings.load(self.settings))
        self.main_layout.addWidget(self.canvas, stretch=1)

        self.status_label = QLabel("Drop an image to start")
        self.statusBar().addWidget(self.status_label, 1)
        self.pixel_label = QLabel("")
        self.statusBar().addPermanentWidget(self.pixel_label)

        # Builds the trim rect from the canvas's pixel samples
        self.assembler = TrimRectAssembler()

        # Connect signals
        self.canvas.image_loaded.connect(self._on_image_loaded)
        self.canvas.load_failed.connect(self._on_load_failed)
        self.canvas.selection_started.connect(self.assembler.reset)
        self.canvas.pixel_clicked.connect(self._on_pixel_clicked)
        self.canvas.trim_rect_changed.connect(self._on_trim_rect_changed)

        self.canvas.set_trim_rect(NO_SELECTION)
        self._update_actions()

    def create_toolbar(self):
        container = QWidget()
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)

        self.open_btn = QPushButton("Open Image")
        self.open_btn.setFixedSize(110, 30)
        self.open_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.open_btn.clicked.connect(self.open_image_dialog)
        layout.addWidget(self.open_btn)

        self.reset_view_btn = QPushButton("Reset View")
        self.reset_view_btn.setFixedSize(110, 30)
        self.reset_view_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.reset_view_btn.clicked.connect(lambda: self.canvas.reset_view())
        layout.addWidget(self.reset_view_btn)

        line = QFrame()
        line.setFrameShape(QFrame.Shape.VLine)
        line.setFrameShadow(QFrame.Shadow.Sunken)
        layout.addWidget(line)

        # Trim rect editors: x, y, w, h
        self.rect_spins = []
        for label in ("X", "Y", "W", "H"):
            layout.addWidget(QLabel(label))
            spin = QSpinBox()
            spin.setRange(0, MAX_PIXELS)
            spin.setFixedWidth(80)
            spin.valueChanged.connect(self._on_spin_changed)
            layout.addWidget(spin)
            self.rect_spins.append(spin)

        layout.addStretch()

        self.export_btn = QPushButton("Export Trim")
        self.export_btn.setFixedSize(110, 30)
        self.export_btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.export_btn.setStyleSheet("""
            QPushButton:enabled {
                background-color: #0078d7;
                color: white;
            }
        """)
        self.export_btn.clicked.connect(self.export_trim)
        layout.addWidget(self.export_btn)

        self.main_layout.addWidget(container)

    # ---- Loading ----
    def open_image_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Image", self.last_open_dir, file_dialog_filter())
        if path:
            self.last_open_dir = os.path.dirname(path)
            self.settings.setValue("last_open_dir", self.last_open_dir)
            self.open_image(path)

    def open_image(self, path):
        self.status_label.setText(f"Loading {os.path.basename(path)}...")
        self.canvas.request_load(path)

    def _on_image_loaded(self, path):
        handle = self.canvas.image_handle
        self.assembler.bounds = handle.size
        self.assembler.reset()
        # The live trim rect is left as is; only the editors' ranges follow the image
        limits = (handle.width, handle.height, handle.width, handle.height)
        old_blocked = [spin.blockSignals(True) for spin in self.rect_spins]
        try:
            for spin, limit in zip(self.rect_spins, limits):
                spin.setMaximum(limit)
        finally:
            for spin, blocked in zip(self.rect_spins, old_blocked):
                spin.blockSignals(blocked)
        self.setWindowTitle(f"ImageTrimmer - {os.path.basename(path)}")
        self.status_label.setText(f"{os.path.basename(path)}  {handle.width} x {handle.height}")
        self._update_actions()

    def _on_load_failed(self, path, reason):
        self.status_label.setText(f"Could not open {os.path.basename(path)}")
        QMessageBox.warning(self, "ImageTrimmer", f"{reason}\n\n{path}")

    # ---- Trim rect ----
    def _on_pixel_clicked(self, x, y):
        self.pixel_label.setText(f"({x}, {y})")
        self.canvas.set_trim_rect(self.assembler.extend(x, y))

    def _on_trim_rect_changed(self, rect):
        old_blocked = [spin.blockSignals(True) for spin in self.rect_spins]
        try:
            for spin, value in zip(self.rect_spins, rect):
                spin.setValue(max(0, value))
        finally:
            for spin, blocked in zip(self.rect_spins, old_blocked):
                spin.blockSignals(blocked)
        self._update_actions()

    def _on_spin_changed(self, _value):
        rect = TrimRect(*(spin.value() for spin in self.rect_spins))
        if rect != self.canvas.trim_rect:
            self.canvas.set_trim_rect(rect)

    def _update_actions(self):
        rect = self.canvas.trim_rect
        has_selection = rect is not None and not rect.is_empty
        self.export_btn.setEnabled(self.canvas.image_handle is not None and has_selection)

    # ---- Export ----
    def export_trim(self):
        handle = self.canvas.image_handle
        rect = self.canvas.trim_rect
        if handle is None or rect is None or rect.is_empty:
            return

        base, ext = os.path.splitext(handle.name)
        start_dir = self.output_dir or os.path.dirname(handle.path)
        suggested = os.path.join(start_dir, f"{base}_trim{ext}")
        output_path, _ = QFileDialog.getSaveFileName(self, "Export Trim", suggested, file_dialog_filter())
        if not output_path:
            return

        self.output_dir = os.path.dirname(output_path)
        self.settings.setValue("output_dir", self.output_dir)

        if trim_image(handle.path, rect, output_path):
            self.status_label.setText(f"Saved {os.path.basename(output_path)}")
        else:
            QMessageBox.warning(self, "ImageTrimmer", f"Failed to export trim to\n{output_path}")
