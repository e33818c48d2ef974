"""
Card widget for one image in the working set.

Shows the editor, the file name with a delete button, the three ratio
buttons, and the zoom slider with its percent field.  All zoom math goes
through the card's ``CropEntry``; the widget only mirrors its state.
"""

import logging
import math

from PyQt6.QtWidgets import (
    QFrame, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QSlider, QLineEdit,
)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QFontMetrics

from image_crop_control.aspect import display_size
from image_crop_control.config import CARD_MIN_WIDTH, PERCENT_MIN, PERCENT_MAX
from image_crop_control.editor_widget import ImageEditorWidget
from image_crop_control.models import AspectRatio, Size
from image_crop_control.session import CropEntry

logger = logging.getLogger(__name__)


class ImageItemWidget(QFrame):
    """One crop card.  ``delete_requested`` asks the container to drop it."""

    delete_requested = pyqtSignal()
    status_message = pyqtSignal(str)

    def __init__(self, entry: CropEntry, thumbnail_scale: float, parent=None):
        super().__init__(parent)
        self.setObjectName("imageCard")
        self.setFrameShape(QFrame.Shape.StyledPanel)

        self._entry = entry
        self._editor: ImageEditorWidget = entry.editor
        self._thumbnail_scale = thumbnail_scale

        self._build_ui()
        self._editor.load_succeeded.connect(self._on_load_succeeded)
        self._editor.load_failed.connect(self._on_load_failed)
        self._editor.wheel_zoomed.connect(self._on_wheel_zoomed)
        self._sync_controls()

    @property
    def entry(self) -> CropEntry:
        return self._entry

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)

        layout.addWidget(self._editor, alignment=Qt.AlignmentFlag.AlignHCenter)

        # File name + delete
        name_row = QHBoxLayout()
        self._name_label = QLabel()
        self._name_label.setToolTip(str(self._entry.path))
        name_row.addWidget(self._name_label, stretch=1)
        btn_delete = QPushButton("✕")
        btn_delete.setFixedWidth(24)
        btn_delete.setToolTip("Remove this image")
        btn_delete.clicked.connect(self._on_delete_clicked)
        name_row.addWidget(btn_delete)
        self._btn_delete = btn_delete
        layout.addLayout(name_row)

        # Ratio buttons
        ratio_row = QHBoxLayout()
        ratio_row.addStretch()
        self._ratio_buttons: dict[AspectRatio, QPushButton] = {}
        for ratio in AspectRatio:
            btn = QPushButton(ratio.label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, r=ratio: self._on_ratio_selected(r))
            ratio_row.addWidget(btn)
            self._ratio_buttons[ratio] = btn
        ratio_row.addStretch()
        layout.addLayout(ratio_row)

        # Zoom slider + percent field
        zoom_row = QHBoxLayout()
        zoom_row.addWidget(QLabel("🔍"))
        self._slider = QSlider(Qt.Orientation.Horizontal)
        self._slider.setRange(PERCENT_MIN, PERCENT_MAX)
        self._slider.valueChanged.connect(self._on_slider_changed)
        zoom_row.addWidget(self._slider, stretch=1)
        self._percent_edit = QLineEdit()
        self._percent_edit.setFixedWidth(48)
        self._percent_edit.setAlignment(Qt.AlignmentFlag.AlignRight)
        self._percent_edit.editingFinished.connect(self._on_percent_edited)
        zoom_row.addWidget(self._percent_edit)
        layout.addLayout(zoom_row)

        self._update_card_width()

    def _update_card_width(self):
        width = display_size(self._entry.frame, self._thumbnail_scale).to_int()[0]
        self.setFixedWidth(max(width, CARD_MIN_WIDTH) + 12)
        metrics = QFontMetrics(self._name_label.font())
        self._name_label.setText(
            metrics.elidedText(self._entry.name, Qt.TextElideMode.ElideMiddle, max(width, CARD_MIN_WIDTH) - 40)
        )

    # =========================================================================
    # State → controls
    # =========================================================================

    def _sync_controls(self):
        """Mirror the entry's ratio and zoom into the controls without feedback."""
        for ratio, btn in self._ratio_buttons.items():
            btn.setChecked(ratio is self._entry.ratio)

        loaded = self._entry.is_loaded
        self._slider.setEnabled(loaded)
        self._percent_edit.setEnabled(loaded)

        self._slider.blockSignals(True)
        step = self._slider_step()
        self._slider.setSingleStep(step)
        self._slider.setPageStep(max(step, 10))
        self._slider.setValue(self._entry.display_percent())
        self._slider.blockSignals(False)
        self._percent_edit.setText(self._entry.display_text() if loaded else "")

    def _slider_step(self) -> int:
        # One step must move the raw scale by at least 0.01, or rounding eats it
        bounds = self._entry.bounds
        if bounds is None or bounds.span == 0:
            return 1
        return max(1, math.ceil(PERCENT_MAX / bounds.span))

    def set_thumbnail_scale(self, thumbnail_scale: float):
        self._thumbnail_scale = thumbnail_scale
        self._editor.set_thumbnail_scale(thumbnail_scale)
        self._update_card_width()

    def refresh_frame(self):
        """Re-read the entry's frame after an output-size change."""
        self._update_card_width()
        self._sync_controls()

    # =========================================================================
    # Editor callbacks
    # =========================================================================

    def _on_load_succeeded(self, natural: Size, resource: Size):
        self._entry.on_load_success(natural, resource)
        self._sync_controls()

    def _on_load_failed(self, error: str):
        logger.warning("Failed to load %s: %s", self._entry.path, error)
        self._name_label.setStyleSheet("color: #e06c6c;")
        self.status_message.emit(f"Failed to load {self._entry.name}: {error}")

    def _on_wheel_zoomed(self, raw_scale: float):
        self._entry.set_raw_scale(raw_scale)
        self._sync_controls()

    # =========================================================================
    # User input
    # =========================================================================

    def _on_ratio_selected(self, ratio: AspectRatio):
        self._entry.select_ratio(ratio)
        self._update_card_width()
        self._sync_controls()

    def _on_slider_changed(self, value: int):
        self._entry.set_percent(value)
        self._sync_controls()

    def _on_percent_edited(self):
        self._entry.set_percent(self._percent_edit.text())
        self._sync_controls()

    def _on_delete_clicked(self):
        self._editor.cancel_load()
        self.delete_requested.emit()
