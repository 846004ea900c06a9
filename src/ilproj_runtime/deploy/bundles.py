"""Versioned bundles: the deployed project system folder and its packed zip."""

from __future__ import annotations

import codecs
import os
import re
import shutil
import zipfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, Union

import structlog

from ilproj_runtime.core.exceptions import (
    ArchiveCorruptError,
    ArgumentInvalidError,
    BundleError,
    BundleIOError,
    NotFoundOnDiskError,
    ResourceReleasedError,
    UnsafeArchiveEntryError,
    VersionFormatError,
    VersionMarkerMissingError,
)
from ilproj_runtime.core.version import Version
from ilproj_runtime.deploy.models import VersionRead

logger = structlog.get_logger()

VERSION_MARKER = "version.txt"

PathLike = Union[str, os.PathLike]

# Errors zipfile raises for damaged or unsupported member data
_ARCHIVE_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, EOFError)

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def require_path(value: Optional[PathLike], name: str) -> Path:
    if value is None:
        raise ArgumentInvalidError(f"{name} must not be None")
    if str(value) == "":
        raise ArgumentInvalidError(f"{name} must not be an empty string")
    return Path(value)


def _decode_marker(data: bytes) -> str:
    """Decode marker bytes, honouring a UTF-8 or UTF-16 byte order mark."""
    try:
        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            return data.decode("utf-16")
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise VersionFormatError(f"Version marker is not valid text: {e}") from e


class VersionedBundle(ABC):
    """A set of project system files that knows its own version."""

    @abstractmethod
    def get_version(self) -> Version:
        """Read the bundle version.

        Raises:
            VersionMarkerMissingError: version.txt does not exist
            VersionFormatError: version.txt does not hold a valid version
            BundleIOError: storage could not be read
        """

    def read_version(self) -> VersionRead:
        """Read the bundle version, reporting read failures as a result value."""
        try:
            return VersionRead.success(self.get_version())
        except BundleError as e:
            if e.failure is None:
                raise
            return VersionRead.failed(e)


class LocalBundle(VersionedBundle):
    """Project system deployed as plain files and folders."""

    def __init__(self, folder: PathLike):
        """Initialize local bundle.

        Args:
            folder: Folder the project system is deployed in

        Raises:
            ArgumentInvalidError: folder is None or empty
            NotFoundOnDiskError: folder is not an existing directory
        """
        path = require_path(folder, "folder")
        if not path.is_dir():
            raise NotFoundOnDiskError(f"Directory not found: {path}")
        self.folder = path

    def get_version(self) -> Version:
        marker = self.folder / VERSION_MARKER
        try:
            data = marker.read_bytes()
        except FileNotFoundError as e:
            raise VersionMarkerMissingError(f"Version marker not found: {marker}") from e
        except OSError as e:
            raise BundleIOError(f"Cannot read version marker {marker}: {e}") from e
        return Version.parse(_decode_marker(data))

    def __repr__(self) -> str:
        return f"LocalBundle({str(self.folder)!r})"


class PackagedBundle(VersionedBundle):
    """Project system packed in a zip archive.

    Owns an open handle on the archive until ``close()`` (or the end of a
    ``with`` block); afterwards every operation raises ResourceReleasedError.
    """

    def __init__(self, archive_path: PathLike):
        """Open the archive.

        Args:
            archive_path: Path of the zip file containing the project system

        Raises:
            ArgumentInvalidError: archive_path is None or empty
            NotFoundOnDiskError: archive_path is not an existing file
            BundleIOError: the file could not be opened
            ArchiveCorruptError: the file is not a zip archive
        """
        path = require_path(archive_path, "archive_path")
        if not path.is_file():
            raise NotFoundOnDiskError(f"File not found: {path}")
        self.archive_path = path
        self._closed = False
        try:
            self._stream = open(path, "rb")
        except OSError as e:
            raise BundleIOError(f"Cannot open archive {path}: {e}") from e
        try:
            self._zip = zipfile.ZipFile(self._stream, "r")
        except zipfile.BadZipFile as e:
            self._stream.close()
            raise ArchiveCorruptError(f"Not a zip archive: {path}") from e
        except OSError as e:
            self._stream.close()
            raise BundleIOError(f"Cannot read archive {path}: {e}") from e
        logger.debug("Opened packaged bundle", path=str(path), entries=len(self._zip.infolist()))

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the archive handle. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._zip.close()
        finally:
            self._stream.close()

    def __enter__(self) -> "PackagedBundle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ResourceReleasedError(f"Packaged bundle already released: {self.archive_path}")

    def get_version(self) -> Version:
        self._ensure_open()
        try:
            info = self._zip.getinfo(VERSION_MARKER)
        except KeyError as e:
            raise VersionMarkerMissingError(
                f"Entry {VERSION_MARKER} not found in {self.archive_path}"
            ) from e
        try:
            data = self._zip.read(info)
        except _ARCHIVE_READ_ERRORS as e:
            raise ArchiveCorruptError(f"Cannot read entry {VERSION_MARKER}: {e}") from e
        except OSError as e:
            raise BundleIOError(f"Cannot read archive {self.archive_path}: {e}") from e
        return Version.parse(_decode_marker(data))

    def extract_all(self, directory: PathLike) -> List[Path]:
        """Extract every entry into ``directory``, preserving relative paths.

        All entries are validated before anything is written.

        Returns:
            Paths of the extracted files

        Raises:
            ArgumentInvalidError: directory is None or empty
            ResourceReleasedError: bundle already closed
            UnsafeArchiveEntryError: an entry is empty, absolute, escapes the
                directory, duplicates another entry or would overwrite a file
            ArchiveCorruptError: an entry cannot be decompressed
            BundleIOError: writing failed
        """
        target = require_path(directory, "directory")
        self._ensure_open()
        base = target.resolve()
        plan = self._plan_extraction(base)

        written: List[Path] = []
        try:
            base.mkdir(parents=True, exist_ok=True)
            for member, out_path in plan:
                if member.is_dir():
                    out_path.mkdir(parents=True, exist_ok=True)
                    continue
                out_path.parent.mkdir(parents=True, exist_ok=True)
                with self._zip.open(member, "r") as src, open(out_path, "xb") as dst:
                    shutil.copyfileobj(src, dst)
                written.append(out_path)
        except _ARCHIVE_READ_ERRORS as e:
            raise ArchiveCorruptError(f"Cannot extract {self.archive_path}: {e}") from e
        except OSError as e:
            raise BundleIOError(f"Cannot extract {self.archive_path} to {base}: {e}") from e

        logger.info("Extracted packaged bundle", archive=str(self.archive_path), dest=str(base), files=len(written))
        return written

    def _plan_extraction(self, base: Path) -> List[Tuple[zipfile.ZipInfo, Path]]:
        plan = []
        seen = {}
        for member in self._zip.infolist():
            out_path = self._member_path(base, member)
            if out_path is None:
                continue
            key = os.path.normcase(str(out_path))
            if key in seen:
                raise UnsafeArchiveEntryError(
                    f"Entries {seen[key]!r} and {member.filename!r} extract to the same path"
                )
            seen[key] = member.filename
            if member.is_dir():
                if os.path.lexists(out_path) and not out_path.is_dir():
                    raise UnsafeArchiveEntryError(f"Directory entry would replace existing file: {out_path}")
            elif os.path.lexists(out_path):
                raise UnsafeArchiveEntryError(f"Extraction would overwrite existing file: {out_path}")
            plan.append((member, out_path))

        # A folder on the way to an entry must not be a file, in the archive or on disk
        file_keys = {os.path.normcase(str(p)): m.filename for m, p in plan if not m.is_dir()}
        for member, out_path in plan:
            for parent in out_path.parents:
                if parent == base:
                    break
                owner = file_keys.get(os.path.normcase(str(parent)))
                if owner is not None:
                    raise UnsafeArchiveEntryError(
                        f"Entry {member.filename!r} needs {owner!r} to be a directory"
                    )
                if os.path.lexists(parent) and not parent.is_dir():
                    raise UnsafeArchiveEntryError(f"Entry {member.filename!r} needs existing file {parent} to be a directory")
        return plan

    def _member_path(self, base: Path, member: zipfile.ZipInfo) -> Optional[Path]:
        """Resolve where ``member`` goes under ``base``, rejecting zip-slip."""
        name = member.filename.replace("\\", "/")
        if not name.strip():
            raise UnsafeArchiveEntryError("Archive contains an entry with an empty name")
        if name.startswith("/") or _DRIVE_RE.match(name):
            raise UnsafeArchiveEntryError(f"Archive entry has an absolute path: {member.filename!r}")
        parts = [p for p in PurePosixPath(name).parts if p not in ("", ".")]
        if ".." in parts:
            raise UnsafeArchiveEntryError(f"Archive entry escapes destination (zip-slip): {member.filename!r}")
        if not parts:
            if member.is_dir():
                return None
            raise UnsafeArchiveEntryError(f"Archive entry has no file name: {member.filename!r}")
        out_path = base.joinpath(*parts).resolve()
        if out_path == base or not out_path.is_relative_to(base):
            raise UnsafeArchiveEntryError(f"Archive entry escapes destination (zip-slip): {member.filename!r}")
        return out_path

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"PackagedBundle({str(self.archive_path)!r}, {state})"
