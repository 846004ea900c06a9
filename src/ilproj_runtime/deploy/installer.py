"""Installs the packed custom project system into the per-user local folder."""

from __future__ import annotations

import shutil
from typing import Optional

import structlog

from ilproj_runtime.core.config import Settings, load_settings
from ilproj_runtime.core.exceptions import BundleIOError
from ilproj_runtime.core.version import Version
from ilproj_runtime.deploy.bundles import LocalBundle, PackagedBundle, PathLike, require_path
from ilproj_runtime.deploy.models import DeploymentResult, DeploymentState

logger = structlog.get_logger()


class DeploymentCoordinator:
    """Decides whether the local project system is out of date and replaces it.

    Deployment is delete-then-extract and not atomic: if ``deploy()`` fails
    after the old folder was removed, the local folder is left in an
    indeterminate state and ``deploy()`` should simply be run again.
    Concurrent deployments into the same folder must be serialized by the caller.
    """

    def __init__(self, local_path: PathLike, archive_path: PathLike):
        """Initialize coordinator.

        Args:
            local_path: Folder the project system is deployed into
            archive_path: Zip file the project system is deployed from
        """
        self.local_path = require_path(local_path, "local_path")
        self.archive_path = require_path(archive_path, "archive_path")

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeploymentCoordinator":
        return cls(settings.local_install_path, settings.package_archive)

    def open_package(self) -> PackagedBundle:
        return PackagedBundle(self.archive_path)

    def get_state(self) -> DeploymentState:
        """Classify the local deployment against the packaged one.

        Raises:
            BundleError: the package cannot be opened or its version read
        """
        if not self.local_path.is_dir():
            logger.info("Local project system not installed", path=str(self.local_path))
            return DeploymentState.ABSENT

        with self.open_package() as package:
            local = LocalBundle(self.local_path).read_version()
            if not local.ok:
                logger.warning(
                    "Local project system is corrupt",
                    path=str(self.local_path),
                    failure=local.failure.value,
                    error=str(local.error),
                )
                return DeploymentState.CORRUPT

            packaged_version = package.get_version()

        state = DeploymentState.STALE if local.version < packaged_version else DeploymentState.CURRENT
        logger.info(
            "Compared project system versions",
            local_version=str(local.version),
            packaged_version=str(packaged_version),
            state=state.value,
        )
        return state

    def needs_deployment(self) -> bool:
        """True if the local project system is missing, corrupt or older than the package."""
        return self.get_state().needs_deployment

    def deploy(self) -> Version:
        """Replace the local project system with the packaged one.

        Does not check ``needs_deployment()`` first. The package version is
        read before the old folder is removed, so a package without a valid
        marker leaves the local folder untouched.

        Returns:
            Version of the deployed package

        Raises:
            BundleError: opening the package, removing the old folder,
                extracting or reading the version failed
        """
        with self.open_package() as package:
            version = package.get_version()
            if self.local_path.is_dir():
                logger.info("Removing previous project system", path=str(self.local_path))
                try:
                    shutil.rmtree(self.local_path)
                except OSError as e:
                    raise BundleIOError(f"Cannot remove {self.local_path}: {e}") from e
            package.extract_all(self.local_path)

        logger.info("Deployed project system", path=str(self.local_path), version=str(version))
        return version

    def ensure_deployed(self) -> DeploymentResult:
        """Deploy only when the local project system needs it."""
        state = self.get_state()
        if not state.needs_deployment:
            return DeploymentResult(previous_state=state)
        version = self.deploy()
        return DeploymentResult(previous_state=state, deployed=True, version=version)


def _default_coordinator(settings: Optional[Settings]) -> DeploymentCoordinator:
    return DeploymentCoordinator.from_settings(settings or load_settings())


def needs_deployment(settings: Optional[Settings] = None) -> bool:
    """Host entry point: check the configured local project system."""
    return _default_coordinator(settings).needs_deployment()


def deploy(settings: Optional[Settings] = None) -> Version:
    """Host entry point: deploy the configured package."""
    return _default_coordinator(settings).deploy()


def ensure_deployed(settings: Optional[Settings] = None) -> DeploymentResult:
    """Host entry point: deploy the configured package if needed."""
    return _default_coordinator(settings).ensure_deployed()
