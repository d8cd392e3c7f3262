"""
DiskPart - Disk partitioning command interpreter for Linux.

Accepts diskpart-style commands interactively or from a script file and
runs them against the Linux block-device tools.
"""

__version__ = "1.0.0"
__author__ = "DiskPart Team"

from diskpart.core.config import DiskPartConfig
from diskpart.core.session import Session

__all__ = ["DiskPartConfig", "Session", "__version__"]
