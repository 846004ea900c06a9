"""Configuration management for ILProj Runtime."""

import logging
import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ilproj_runtime.core.exceptions import ConfigurationError

PACKAGE_ARCHIVE_NAME = "CustomBuildSystem.zip"
INSTALL_FOLDER_NAME = "CustomProjectSystems"


def default_install_root() -> Path:
    """Per-user local application data folder holding custom project systems."""
    if sys.platform == "win32":
        base = os.getenv("LOCALAPPDATA")
        if base:
            return Path(base) / INSTALL_FOLDER_NAME
    xdg = os.getenv("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / INSTALL_FOLDER_NAME
    return Path.home() / ".local" / "share" / INSTALL_FOLDER_NAME


def default_package_archive() -> Path:
    """Packed project system shipped next to the runtime package."""
    return Path(__file__).resolve().parent.parent / PACKAGE_ARCHIVE_NAME


class Settings(BaseSettings):
    """Runtime configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ILPROJ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Deployment
    project_system_name: str = Field("ILProj", description="Name of the custom project system folder")
    install_root: Path = Field(default_factory=default_install_root, description="Folder holding local project systems")
    package_archive: Path = Field(default_factory=default_package_archive, description="Zip file to deploy from")

    # Observability
    log_level: str = Field("INFO", description="Log level name")
    log_format: str = Field("console", pattern="^(json|console)$")

    @field_validator("project_system_name")
    @classmethod
    def validate_project_system_name(cls, v: str) -> str:
        """Reject names that would escape the install root."""
        v = v.strip()
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"Invalid project system name: {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def local_install_path(self) -> Path:
        """Folder the project system is deployed into."""
        return self.install_root / self.project_system_name


def load_settings(**overrides) -> Settings:
    """Build settings, converting validation failures to ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
