"""
Main application window.

Orchestrates adding images, the shared output size and thumbnail scale, and
the grid of crop cards.  Removing a card drops its entry from the session.
"""

from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QFileDialog, QMessageBox, QStatusBar,
    QToolBar, QSpinBox, QSlider, QComboBox, QApplication, QScrollArea,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence, QShortcut

from image_crop_control.config import (
    GRID_COLUMNS, OUTPUT_SIZE_MAX, THUMBNAIL_SCALE_MIN, THUMBNAIL_SCALE_MAX,
)
from image_crop_control.editor_widget import ImageEditorWidget
from image_crop_control.image_io import file_dialog_filter, is_supported
from image_crop_control.item_widget import ImageItemWidget
from image_crop_control.models import AspectRatio, Size
from image_crop_control.session import CropEntry, CropSession
from image_crop_control.settings import (
    load_settings, save_settings, output_size_of, default_ratio_of,
)

# Thumbnail slider works in hundredths
_THUMB_STEPS = 100


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Image Crop Control")
        self.setMinimumSize(700, 500)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 1280, 900
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._settings = load_settings()
        self._session = CropSession(output_size_of(self._settings), default_ratio_of(self._settings))
        self._cards: list[ImageItemWidget] = []

        self._build_ui()
        self._update_button_states()

    @property
    def session(self) -> CropSession:
        return self._session

    @property
    def cards(self) -> list[ImageItemWidget]:
        return list(self._cards)

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)

        main_layout.addLayout(self._build_settings_row())

        # Card grid inside a scroll area
        self._grid_host = QWidget()
        self._grid = QGridLayout(self._grid_host)
        self._grid.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self._grid.setSpacing(8)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._grid_host)
        scroll.setFrameShape(scroll.Shape.NoFrame)
        main_layout.addWidget(scroll, stretch=1)

        # Status bar
        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Add images to begin.")

        # --- Keyboard Shortcuts ---
        QShortcut(QKeySequence(QKeySequence.StandardKey.Open), self, self._add_images)

    def _build_toolbar(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_add = QAction("📂 Add Images…", self)
        act_add.triggered.connect(self._add_images)
        toolbar.addAction(act_add)

        toolbar.addSeparator()

        act_clear = QAction("🗑 Clear All", self)
        act_clear.triggered.connect(self._clear_all)
        toolbar.addAction(act_clear)
        self._act_clear = act_clear

    def _build_settings_row(self) -> QHBoxLayout:
        row = QHBoxLayout()

        row.addWidget(QLabel("Output:"))
        self._output_w = QSpinBox()
        self._output_w.setRange(16, OUTPUT_SIZE_MAX)
        self._output_w.setSuffix(" px")
        self._output_w.setValue(self._settings["output_width"])
        row.addWidget(self._output_w)
        row.addWidget(QLabel("×"))
        self._output_h = QSpinBox()
        self._output_h.setRange(16, OUTPUT_SIZE_MAX)
        self._output_h.setSuffix(" px")
        self._output_h.setValue(self._settings["output_height"])
        row.addWidget(self._output_h)
        self._output_w.valueChanged.connect(self._on_output_size_changed)
        self._output_h.valueChanged.connect(self._on_output_size_changed)

        row.addSpacing(16)
        row.addWidget(QLabel("New images:"))
        self._default_ratio = QComboBox()
        for ratio in AspectRatio:
            self._default_ratio.addItem(ratio.label, ratio)
        self._default_ratio.setCurrentIndex(list(AspectRatio).index(self._session.default_ratio))
        self._default_ratio.currentIndexChanged.connect(self._on_default_ratio_changed)
        row.addWidget(self._default_ratio)

        row.addSpacing(16)
        row.addWidget(QLabel("Preview:"))
        self._thumb_slider = QSlider(Qt.Orientation.Horizontal)
        self._thumb_slider.setRange(
            round(THUMBNAIL_SCALE_MIN * _THUMB_STEPS), round(THUMBNAIL_SCALE_MAX * _THUMB_STEPS)
        )
        self._thumb_slider.setValue(round(self._settings["thumbnail_scale"] * _THUMB_STEPS))
        self._thumb_slider.setFixedWidth(160)
        row.addWidget(self._thumb_slider)
        self._thumb_label = QLabel()
        self._thumb_label.setFixedWidth(40)
        row.addWidget(self._thumb_label)
        self._thumb_slider.valueChanged.connect(self._on_thumbnail_scale_changed)
        self._update_thumb_label()

        row.addStretch()
        return row

    # =========================================================================
    # Settings
    # =========================================================================

    def _thumbnail_scale(self) -> float:
        return self._thumb_slider.value() / _THUMB_STEPS

    def _update_thumb_label(self):
        self._thumb_label.setText(f"{self._thumbnail_scale():.2f}×")

    def _on_output_size_changed(self, *args):
        size = Size(self._output_w.value(), self._output_h.value())
        self._session.set_output_size(size)
        for card in self._cards:
            card.refresh_frame()
        self._settings["output_width"] = self._output_w.value()
        self._settings["output_height"] = self._output_h.value()
        self._save_settings()

    def _on_default_ratio_changed(self, index: int):
        ratio: AspectRatio = self._default_ratio.itemData(index)
        self._session.set_default_ratio(ratio)
        self._settings["default_ratio"] = ratio.value
        self._save_settings()

    def _on_thumbnail_scale_changed(self, *args):
        scale = self._thumbnail_scale()
        self._update_thumb_label()
        for card in self._cards:
            card.set_thumbnail_scale(scale)
        self._settings["thumbnail_scale"] = scale
        self._save_settings()

    def _save_settings(self):
        try:
            save_settings(self._settings)
        except (ValueError, OSError) as exc:
            self._status.showMessage(f"Could not save settings: {exc}")

    # =========================================================================
    # Working set
    # =========================================================================

    def _add_images(self):
        files, _ = QFileDialog.getOpenFileNames(self, "Add Images", "", file_dialog_filter())
        if files:
            self.add_paths([Path(f) for f in files])

    def add_paths(self, paths: list[Path]) -> list[CropEntry]:
        """Create a card for each supported path and start loading it."""
        added: list[CropEntry] = []
        scale = self._thumbnail_scale()
        skipped = 0
        for path in paths:
            if not is_supported(path):
                skipped += 1
                continue
            entry = self._session.add(path, lambda frame: ImageEditorWidget(frame, scale))
            card = ImageItemWidget(entry, scale)
            card.delete_requested.connect(lambda c=card: self._remove_card(c))
            card.status_message.connect(self._status.showMessage)
            self._cards.append(card)
            entry.start()
            added.append(entry)

        self._relayout()
        msg = f"{len(self._session)} image(s)"
        if skipped:
            msg += f"  |  skipped {skipped} unsupported file(s)"
        self._status.showMessage(msg)
        self._update_button_states()
        return added

    def _remove_card(self, card: ImageItemWidget):
        self._session.remove(card.entry)
        self._cards.remove(card)
        self._grid.removeWidget(card)
        card.deleteLater()
        self._relayout()
        self._status.showMessage(f"Removed {card.entry.name}  |  {len(self._session)} image(s)")
        self._update_button_states()

    def _clear_all(self):
        if not self._cards:
            return
        answer = QMessageBox.question(
            self, "Clear All", f"Remove all {len(self._cards)} image(s)?",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        for card in self._cards:
            card.entry.editor.cancel_load()
            self._grid.removeWidget(card)
            card.deleteLater()
        self._cards.clear()
        self._session.clear()
        self._status.showMessage("Cleared all images.")
        self._update_button_states()

    def _relayout(self):
        """Re-flow the cards into the grid in session order."""
        for card in self._cards:
            self._grid.removeWidget(card)
        for i, card in enumerate(self._cards):
            self._grid.addWidget(card, i // GRID_COLUMNS, i % GRID_COLUMNS)

    def _update_button_states(self):
        self._act_clear.setEnabled(bool(self._cards))
