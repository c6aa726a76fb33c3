import os
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def backing_dir(tmp_path, monkeypatch):
    """Keep every temp revision inside the test's own directory"""
    path = tmp_path / "backing"
    path.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(path))
    return path


@pytest.fixture
def make_file(tmp_path):
    def _make(data, name="sample.bin"):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _make


@pytest.fixture
def ini_settings(tmp_path):
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
