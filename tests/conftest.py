"""
Pytest configuration and fixtures for ILProj Runtime tests.
"""

import os
import zipfile
from pathlib import Path
from typing import Dict, Union

import pytest


@pytest.fixture(autouse=True)
def isolate_settings_env(monkeypatch, tmp_path):
    """
    Keep ILPROJ_* variables and any .env file of the developer out of tests.

    Tests that need settings from the environment set them with monkeypatch.
    """
    for key in list(os.environ):
        if key.upper().startswith("ILPROJ_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_zip(tmp_path: Path):
    """Return a factory writing a zip archive with the given entries."""

    def _make(name: str, files: Dict[str, Union[str, bytes]]) -> Path:
        z = tmp_path / name
        with zipfile.ZipFile(z, "w") as zf:
            for entry, data in files.items():
                zf.writestr(entry, data)
        return z

    return _make


@pytest.fixture
def make_package(make_zip):
    """Return a factory writing a project system package of a given version."""

    def _make(version: str, extra: Dict[str, Union[str, bytes]] = None, name: str = None) -> Path:
        files = {"version.txt": version}
        files.update(extra or {})
        return make_zip(name or f"package-{version}.zip", files)

    return _make


@pytest.fixture
def local_dir(tmp_path: Path) -> Path:
    """Path of the local install folder (not created)."""
    return tmp_path / "CustomProjectSystems" / "ILProj"
