"""Models for local deployment of the custom project system."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ilproj_runtime.core.exceptions import BundleError, VersionReadFailure
from ilproj_runtime.core.version import Version


class DeploymentState(str, Enum):
    ABSENT = "absent"      # No local folder at all
    STALE = "stale"        # Local version older than packaged
    CURRENT = "current"    # Local version equal or newer
    CORRUPT = "corrupt"    # Local version marker unreadable or unparsable

    @property
    def needs_deployment(self) -> bool:
        return self is not DeploymentState.CURRENT


class VersionRead(BaseModel):
    """Outcome of reading a bundle version: either ``version`` or ``failure``."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    version: Optional[Version] = None
    failure: Optional[VersionReadFailure] = None
    error: Optional[BundleError] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, version: Version) -> "VersionRead":
        return cls(version=version)

    @classmethod
    def failed(cls, error: BundleError) -> "VersionRead":
        return cls(failure=error.failure, error=error)


class DeploymentResult(BaseModel):
    """What ensure_deployed() found and did."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    previous_state: DeploymentState
    deployed: bool = False
    version: Optional[Version] = None
