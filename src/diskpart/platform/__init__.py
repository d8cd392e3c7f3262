"""
diskpart Platform Abstraction Layer.

Provides the platform-specific implementation of enumeration and disk
operations.
"""

from __future__ import annotations

import platform

from diskpart.platform.base import CommandResult, PlatformBackend


def get_platform_name() -> str:
    """Get the current platform name."""
    return platform.system().lower()


def is_linux() -> bool:
    """Check if running on Linux."""
    return get_platform_name() == "linux"


def get_platform_backend(timeout: int = 3600, device_root: str = "/dev") -> PlatformBackend:
    """Get the appropriate platform backend for the current OS."""
    if is_linux():
        from diskpart.platform.linux import LinuxBackend

        return LinuxBackend(timeout=timeout, device_root=device_root)
    raise RuntimeError(f"Unsupported platform: {get_platform_name()}")


__all__ = [
    "CommandResult",
    "PlatformBackend",
    "get_platform_backend",
    "get_platform_name",
    "is_linux",
]
