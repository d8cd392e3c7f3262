"""
diskpart Platform Backend Base.

Defines the abstract interface the interpreter uses to reach the system:
enumeration, inspection, privilege query and execution of operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from diskpart.core.models import BlockDevice, DeviceKind, Operation


class CommandResult:
    """Result of a command execution."""

    def __init__(
        self,
        returncode: int,
        stdout: str,
        stderr: str,
        command: str | list[str],
        duration_seconds: float = 0.0,
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = command
        self.duration_seconds = duration_seconds

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def command_text(self) -> str:
        return self.command if isinstance(self.command, str) else " ".join(self.command)

    def __repr__(self) -> str:
        return f"CommandResult(rc={self.returncode}, cmd='{self.command_text[:50]}...')"


class PlatformBackend(ABC):
    """Abstract base class for platform-specific disk operations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name (e.g., 'linux')."""

    @abstractmethod
    def is_admin(self) -> bool:
        """Check if running with admin privileges."""

    # ==================== Inventory Operations ====================

    @abstractmethod
    def list_devices(self, kind: DeviceKind) -> list[BlockDevice]:
        """List devices of one kind in enumerator order."""

    @abstractmethod
    def describe(self, device_path: str) -> BlockDevice | None:
        """Get information about a specific device."""

    @abstractmethod
    def partition_parent(self, partition_path: str) -> tuple[str, int] | None:
        """
        Get the parent disk and 1-based partition number of a partition.
        Returns None when the device is not a partition.
        """

    @abstractmethod
    def device_exists(self, device_path: str) -> bool:
        """Check whether a device node exists."""

    def canonicalize(self, device_path: str) -> str:
        """Map an alias of a device node to the path the enumerator reports."""
        return device_path

    # ==================== Operations ====================

    @abstractmethod
    def execute(self, operation: Operation) -> CommandResult:
        """Run an external operation to completion."""
