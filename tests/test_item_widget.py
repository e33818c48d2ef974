"""Tests for the crop card wiring between controls and its CropEntry."""

from pathlib import Path
from unittest.mock import Mock

import pytest
from PyQt6.QtWidgets import QSlider

from image_crop_control.editor_widget import ImageEditorWidget
from image_crop_control.item_widget import ImageItemWidget
from image_crop_control.models import AspectRatio, Size, ZoomBounds
from image_crop_control.session import CropSession

IMAGE = Size(2000, 1000)


@pytest.fixture()
def card(qapp) -> ImageItemWidget:
    session = CropSession(Size(500, 500))
    entry = session.add(Path("/photos/beach.jpg"), lambda frame: ImageEditorWidget(frame, 0.5))
    return ImageItemWidget(entry, 0.5)


def _load(card: ImageItemWidget):
    card.entry.editor.load_succeeded.emit(IMAGE, IMAGE)


def test_zoom_controls_disabled_until_loaded(card):
    assert not card._slider.isEnabled()
    assert not card._percent_edit.isEnabled()
    assert card._ratio_buttons[AspectRatio.SQUARE].isChecked()


def test_load_syncs_slider_and_text(card):
    _load(card)

    assert card.entry.bounds == ZoomBounds(50, 200)
    assert card._slider.isEnabled()
    assert card._slider.value() == 33
    assert card._percent_edit.text() == "33%"


def test_slider_sets_normalized_percent(card):
    _load(card)
    card._slider.setValue(50)
    assert card.entry.raw_scale == 1.25
    assert card._percent_edit.text() == "50%"


def test_typed_percent_is_applied(card):
    _load(card)
    card._percent_edit.setText("100%")
    card._percent_edit.editingFinished.emit()

    assert card.entry.raw_scale == 2.0
    assert card._slider.value() == 100


def test_bad_text_resets_to_unit_scale(card):
    _load(card)
    card._slider.setValue(80)
    card._percent_edit.setText("abc")
    card._percent_edit.editingFinished.emit()

    assert card.entry.raw_scale == 1.0
    assert card._percent_edit.text() == "33%"


def test_ratio_button_switches_frame(card):
    _load(card)
    card._ratio_buttons[AspectRatio.PORTRAIT_3X4].click()

    assert card.entry.ratio is AspectRatio.PORTRAIT_3X4
    assert card._ratio_buttons[AspectRatio.PORTRAIT_3X4].isChecked()
    assert not card._ratio_buttons[AspectRatio.SQUARE].isChecked()
    editor = card.entry.editor
    assert (editor.width(), editor.height()) == (188, 250)


def test_clicking_active_ratio_keeps_it_checked(card):
    card._ratio_buttons[AspectRatio.SQUARE].click()
    assert card._ratio_buttons[AspectRatio.SQUARE].isChecked()


def test_wheel_zoom_goes_through_clamping(card):
    _load(card)
    card.entry.editor.wheel_zoomed.emit(9.0)
    assert card.entry.raw_scale == 2.0
    assert card._slider.value() == 100


def test_delete_button_emits_removal_signal(card):
    handler = Mock()
    card.delete_requested.connect(handler)
    card._btn_delete.click()
    handler.assert_called_once_with()


def test_load_failure_is_forwarded(card):
    messages = []
    card.status_message.connect(messages.append)
    card.entry.editor.load_failed.emit("bad header")
    assert messages == ["Failed to load beach.jpg: bad header"]
    assert not card.entry.is_loaded


def test_slider_steps_move_zoom_in_a_narrow_range(qapp):
    session = CropSession(Size(512, 512))
    entry = session.add(Path("/photos/near-frame.png"), lambda frame: ImageEditorWidget(frame, 0.5))
    card = ImageItemWidget(entry, 0.5)
    image = Size(600, 500)
    entry.editor.load_succeeded.emit(image, image)
    assert entry.bounds == ZoomBounds(84, 97)
    assert card._slider.value() == 100

    card._slider.triggerAction(QSlider.SliderAction.SliderSingleStepSub)

    assert entry.raw_scale == 0.96
    assert card._slider.value() == 92
    assert card._percent_edit.text() == "92%"


def test_slider_is_left_at_zero_before_load(card):
    assert card._slider.value() == 0
    assert card._percent_edit.text() == ""
