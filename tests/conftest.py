import os
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture()
def qapp():
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture()
def config_home(tmp_path, monkeypatch) -> Path:
    """Point every persistence module at a throwaway config directory."""
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.setattr("image_crop_control.settings.config_dir", lambda: directory)
    return directory


@pytest.fixture()
def png_file(tmp_path) -> Path:
    """A 40x20 RGB PNG on disk."""
    from PIL import Image

    path = tmp_path / "wide.png"
    Image.new("RGB", (40, 20), (200, 40, 40)).save(path)
    return path
