"""Integration tests for MainWindow's working-set handling."""

import json
from pathlib import Path

import pytest
from PyQt6.QtTest import QSignalSpy

from image_crop_control.main_window import MainWindow
from image_crop_control.models import AspectRatio, Size


@pytest.fixture()
def window(qapp, config_home) -> MainWindow:
    w = MainWindow()
    yield w
    w.close()


def _add_and_wait(window: MainWindow, paths: list[Path]):
    entries = []
    for path in paths:
        added = window.add_paths([path])
        for entry in added:
            spy = QSignalSpy(entry.editor.load_succeeded)
            if not entry.is_loaded:
                assert spy.wait(5000)
        entries.extend(added)
    return entries


def test_starts_empty_with_default_settings(window):
    assert len(window.session) == 0
    assert window.session.output_size == Size(512, 512)
    assert window.session.default_ratio is AspectRatio.SQUARE


def test_added_image_loads_and_derives_bounds(window, png_file):
    (entry,) = _add_and_wait(window, [png_file])

    assert entry.is_loaded
    assert entry.image_dimensions == Size(40, 20)
    # 20/40 -> 50; the image is smaller than the 512 frame, so the range collapses
    assert entry.bounds.min_percent == 50
    assert entry.bounds.max_percent == 50
    assert len(window.cards) == 1


def test_unsupported_files_are_skipped(window, tmp_path):
    text = tmp_path / "notes.txt"
    text.write_text("hello", encoding="utf-8")
    assert window.add_paths([text]) == []
    assert len(window.session) == 0


def test_delete_request_drops_entry(window, png_file, tmp_path):
    second = tmp_path / "second.png"
    second.write_bytes(png_file.read_bytes())
    first_entry, second_entry = _add_and_wait(window, [png_file, second])

    window.cards[0].delete_requested.emit()

    assert window.session.entries == [second_entry]
    assert first_entry.discarded
    assert [card.entry for card in window.cards] == [second_entry]


def test_output_size_change_reaches_entries_and_is_saved(window, png_file, config_home):
    (entry,) = _add_and_wait(window, [png_file])

    window._output_w.setValue(300)

    assert entry.output_size == Size(300, 512)
    assert entry.frame == Size(300, 300)
    stored = json.loads((config_home / "settings.json").read_text(encoding="utf-8"))
    assert stored["settings"]["output_width"] == 300


def test_default_ratio_choice_applies_to_new_images(window, png_file):
    window._default_ratio.setCurrentIndex(list(AspectRatio).index(AspectRatio.LANDSCAPE_4X3))
    (entry,) = _add_and_wait(window, [png_file])
    assert entry.ratio is AspectRatio.LANDSCAPE_4X3
