"""ILProj Runtime - local deployment of the CIL custom project system."""

__version__ = "0.1.0"
__author__ = "ILProj Core Team"

from ilproj_runtime.core.config import Settings
from ilproj_runtime.core.version import Version

__all__ = ["Settings", "Version", "__version__"]
