"""Tests for runtime settings."""

import sys
from pathlib import Path

import pytest

from ilproj_runtime.core.config import (
    PACKAGE_ARCHIVE_NAME,
    Settings,
    default_install_root,
    default_package_archive,
    load_settings,
)
from ilproj_runtime.core.exceptions import ConfigurationError


def test_defaults(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    settings = Settings()
    assert settings.project_system_name == "ILProj"
    assert settings.install_root == tmp_path / "xdg" / "CustomProjectSystems"
    assert settings.local_install_path == tmp_path / "xdg" / "CustomProjectSystems" / "ILProj"
    assert settings.package_archive.name == PACKAGE_ARCHIVE_NAME
    assert settings.log_level == "INFO"
    assert settings.log_format == "console"


def test_default_install_root_windows(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
    assert default_install_root() == tmp_path / "Local" / "CustomProjectSystems"


def test_default_install_root_home(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_install_root() == tmp_path / ".local" / "share" / "CustomProjectSystems"


def test_default_package_archive_next_to_package():
    archive = default_package_archive()
    assert archive.parent.name == "ilproj_runtime"
    assert archive.name == "CustomBuildSystem.zip"


def test_environment_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("ILPROJ_INSTALL_ROOT", str(tmp_path / "root"))
    monkeypatch.setenv("ILPROJ_PACKAGE_ARCHIVE", str(tmp_path / "pkg.zip"))
    monkeypatch.setenv("ILPROJ_PROJECT_SYSTEM_NAME", "MyProj")
    monkeypatch.setenv("ILPROJ_LOG_LEVEL", "debug")
    monkeypatch.setenv("ILPROJ_LOG_FORMAT", "json")
    settings = Settings()
    assert settings.local_install_path == tmp_path / "root" / "MyProj"
    assert settings.package_archive == tmp_path / "pkg.zip"
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"


def test_env_file(tmp_path: Path):
    # conftest chdirs into tmp_path
    (tmp_path / ".env").write_text(f"ILPROJ_INSTALL_ROOT={tmp_path / 'from-env-file'}\n")
    assert Settings().install_root == tmp_path / "from-env-file"


@pytest.mark.parametrize("overrides", [
    {"log_level": "LOUD"},
    {"log_format": "xml"},
    {"project_system_name": ".."},
    {"project_system_name": "a/b"},
    {"project_system_name": "  "},
])
def test_invalid_settings(overrides):
    with pytest.raises(ConfigurationError):
        load_settings(**overrides)
