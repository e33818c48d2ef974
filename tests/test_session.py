"""Tests for CropEntry and CropSession, with a mock editor."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

from image_crop_control.models import AspectRatio, Size, ZoomBounds
from image_crop_control.session import CropEntry, CropSession

IMAGE = Size(2000, 1000)


@pytest.fixture()
def editor() -> Mock:
    return Mock(spec=["load", "natural_dimensions", "set_frame", "set_zoom", "render_sync"])


@pytest.fixture()
def entry(editor) -> CropEntry:
    return CropEntry(Path("/photos/beach.jpg"), Size(500, 500), editor)


# =============================================================================
# CropEntry
# =============================================================================

def test_start_pushes_frame_zoom_and_loads(entry, editor):
    entry.start()
    editor.set_frame.assert_called_once_with(Size(500, 500))
    editor.set_zoom.assert_called_once_with(1.0)
    editor.load.assert_called_once_with(Path("/photos/beach.jpg"))


def test_entry_is_unloaded_until_callback(entry):
    assert entry.name == "beach.jpg"
    assert not entry.is_loaded
    assert entry.bounds is None
    assert entry.image_dimensions is None


def test_load_success_derives_bounds_and_pushes_zoom(entry, editor):
    entry.on_load_success(IMAGE, IMAGE)

    assert entry.is_loaded
    assert entry.image_dimensions == IMAGE
    assert entry.bounds == ZoomBounds(50, 200)
    assert entry.display_percent() == 33
    assert entry.display_text() == "33%"
    editor.set_zoom.assert_called_with(1.0)


def test_repeated_load_callback_is_ignored(entry):
    entry.on_load_success(IMAGE, IMAGE)
    entry.on_load_success(Size(10, 10), Size(10, 10))
    assert entry.image_dimensions == IMAGE


def test_select_ratio_recomputes_frame_and_bounds(editor):
    entry = CropEntry(Path("a.png"), Size(400, 400), editor)
    entry.on_load_success(IMAGE, IMAGE)

    entry.select_ratio(AspectRatio.PORTRAIT_3X4)

    assert entry.ratio is AspectRatio.PORTRAIT_3X4
    assert entry.frame == Size(300, 400)
    editor.set_frame.assert_called_with(Size(300, 400))
    # min(2000/300, 1000/400) = 2.5
    assert entry.bounds == ZoomBounds(50, 250)


def test_select_same_ratio_does_nothing(entry, editor):
    entry.select_ratio(AspectRatio.SQUARE)
    editor.set_frame.assert_not_called()


def test_select_ratio_before_load_only_moves_frame(entry, editor):
    entry.select_ratio(AspectRatio.LANDSCAPE_4X3)
    editor.set_frame.assert_called_once_with(Size(500, 375))
    editor.set_zoom.assert_not_called()
    assert entry.bounds is None


def test_output_size_change_recomputes_frame(entry, editor):
    entry.on_load_success(IMAGE, IMAGE)
    entry.set_output_size(Size(1000, 800))
    assert entry.frame == Size(800, 800)
    editor.set_frame.assert_called_with(Size(800, 800))
    assert entry.bounds == ZoomBounds(50, 125)


def test_set_percent_pushes_clamped_scale(entry, editor):
    entry.on_load_success(IMAGE, IMAGE)
    assert entry.set_percent("50%") == 1.25
    editor.set_zoom.assert_called_with(1.25)
    assert entry.set_percent(400) == 2.0


def test_invalid_percent_resets_and_pushes_unit_scale(entry, editor):
    entry.on_load_success(IMAGE, IMAGE)
    entry.set_percent("90%")
    assert entry.set_percent("abc") == 1.0
    editor.set_zoom.assert_called_with(1.0)


def test_set_raw_scale_from_wheel(entry, editor):
    entry.on_load_success(IMAGE, IMAGE)
    assert entry.set_raw_scale(1.057) == 1.06
    editor.set_zoom.assert_called_with(1.06)


def test_discarded_entry_ignores_events(entry, editor):
    entry.discard()
    entry.on_load_success(IMAGE, IMAGE)
    entry.select_ratio(AspectRatio.PORTRAIT_3X4)
    entry.set_percent("80%")

    assert entry.discarded
    assert not entry.is_loaded
    assert entry.ratio is AspectRatio.SQUARE
    editor.set_frame.assert_not_called()
    editor.set_zoom.assert_not_called()


# =============================================================================
# CropSession
# =============================================================================

def test_add_builds_editor_for_default_frame(editor):
    session = CropSession(Size(400, 400), AspectRatio.LANDSCAPE_4X3)
    factory = Mock(return_value=editor)

    entry = session.add(Path("x.png"), factory)

    factory.assert_called_once_with(Size(400, 300))
    assert entry.editor is editor
    assert entry.ratio is AspectRatio.LANDSCAPE_4X3
    assert session.entries == [entry]
    assert len(session) == 1


def test_remove_drops_and_discards_entry(editor):
    session = CropSession(Size(400, 400))
    first = session.add(Path("a.png"), lambda frame: editor)
    second = session.add(Path("b.png"), lambda frame: editor)

    assert session.remove(first)
    assert first.discarded
    assert session.entries == [second]
    assert not session.remove(first)


def test_output_size_applies_to_every_entry():
    session = CropSession(Size(400, 400))
    editors = [Mock(), Mock()]
    entries = [session.add(Path(f"{i}.png"), lambda frame, e=e: e) for i, e in enumerate(editors)]

    session.set_output_size(Size(200, 300))

    assert session.output_size == Size(200, 300)
    for entry, ed in zip(entries, editors):
        assert entry.frame == Size(200, 200)
        ed.set_frame.assert_called_with(Size(200, 200))


def test_default_ratio_only_affects_new_entries(editor):
    session = CropSession(Size(400, 400))
    old = session.add(Path("a.png"), lambda frame: editor)
    session.set_default_ratio(AspectRatio.PORTRAIT_3X4)
    new = session.add(Path("b.png"), lambda frame: editor)

    assert old.ratio is AspectRatio.SQUARE
    assert new.ratio is AspectRatio.PORTRAIT_3X4


def test_clear_discards_everything(editor):
    session = CropSession(Size(400, 400))
    entry = session.add(Path("a.png"), lambda frame: editor)
    session.clear()
    assert len(session) == 0
    assert entry.discarded


def test_session_import_does_not_pull_in_qt():
    code = "import sys, image_crop_control.session; print('PyQt6' in sys.modules)"
    result = subprocess.run(
        [sys.executable, "-c", code],
        cwd=Path(__file__).resolve().parents[1],
        capture_output=True, text=True, check=True,
    )
    assert result.stdout.strip() == "False"
