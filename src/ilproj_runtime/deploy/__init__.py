"""
Local deployment of the packed custom project system.

- LocalBundle / PackagedBundle: version sources for the deployed folder and the zip
- DeploymentCoordinator: decides whether to deploy and replaces the local folder
- needs_deployment / deploy / ensure_deployed: host entry points bound to Settings
"""

from .bundles import VERSION_MARKER, LocalBundle, PackagedBundle, VersionedBundle
from .installer import DeploymentCoordinator, deploy, ensure_deployed, needs_deployment
from .models import DeploymentResult, DeploymentState, VersionRead

__all__ = [
    "VERSION_MARKER",
    "VersionedBundle",
    "LocalBundle",
    "PackagedBundle",
    "DeploymentCoordinator",
    "DeploymentState",
    "DeploymentResult",
    "VersionRead",
    "needs_deployment",
    "deploy",
    "ensure_deployed",
]
