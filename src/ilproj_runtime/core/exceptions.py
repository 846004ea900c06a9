"""Custom exceptions for ILProj Runtime."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error taxonomy shared by every runtime error."""

    ARGUMENT_INVALID = "argument_invalid"
    NOT_FOUND_ON_DISK = "not_found_on_disk"
    IO_FAILURE = "io_failure"
    ARCHIVE_CORRUPT = "archive_corrupt"
    VERSION_MARKER_MISSING = "version_marker_missing"
    VERSION_MALFORMED = "version_malformed"
    VERSION_OUT_OF_RANGE = "version_out_of_range"
    RESOURCE_ALREADY_RELEASED = "resource_already_released"
    CONFIGURATION = "configuration"
    TOOL_EXECUTION = "tool_execution"


class VersionReadFailure(str, Enum):
    """Why a bundle version could not be read."""

    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    IO_FAILURE = "io_failure"


class ILProjRuntimeError(Exception):
    """Base exception for all runtime errors."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code or self.kind.value


class ArgumentInvalidError(ILProjRuntimeError, ValueError):
    """A required path argument is None or empty."""

    kind = ErrorKind.ARGUMENT_INVALID


class ConfigurationError(ILProjRuntimeError):
    """Configuration error."""

    kind = ErrorKind.CONFIGURATION


class ToolExecutionError(ILProjRuntimeError):
    """External tool could not be started."""

    kind = ErrorKind.TOOL_EXECUTION


class BundleError(ILProjRuntimeError):
    """Bundle-related errors.

    ``failure`` is the read-failure category a caller reading a version can
    branch on; it is ``None`` for errors that never come out of a version read.
    """

    failure: Optional[VersionReadFailure] = None


class NotFoundOnDiskError(BundleError):
    """Bundle directory or archive does not exist."""

    kind = ErrorKind.NOT_FOUND_ON_DISK


class BundleIOError(BundleError):
    """Bundle storage could not be read or written."""

    kind = ErrorKind.IO_FAILURE
    failure = VersionReadFailure.IO_FAILURE


class ArchiveCorruptError(BundleIOError):
    """Archive is not a valid zip or an entry cannot be decompressed."""

    kind = ErrorKind.ARCHIVE_CORRUPT


class ResourceReleasedError(BundleIOError):
    """Bundle was used after its backing resource was released."""

    kind = ErrorKind.RESOURCE_ALREADY_RELEASED


class UnsafeArchiveEntryError(BundleIOError):
    """Archive entry cannot be extracted safely into the target directory."""


class VersionMarkerMissingError(BundleError):
    """version.txt is missing from the bundle."""

    kind = ErrorKind.VERSION_MARKER_MISSING
    failure = VersionReadFailure.NOT_FOUND


class VersionFormatError(BundleError, ValueError):
    """Version text has the wrong number of components or a non-numeric one."""

    kind = ErrorKind.VERSION_MALFORMED
    failure = VersionReadFailure.MALFORMED


class VersionOutOfRangeError(VersionFormatError):
    """Version component does not fit a signed 32-bit integer."""

    kind = ErrorKind.VERSION_OUT_OF_RANGE
