"""
Device reference resolution.

Turns the references users type (``1``, ``sdb``, ``/dev/sdb``) into
canonical device paths.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from diskpart.core.logging import get_logger
from diskpart.core.models import DeviceKind

if TYPE_CHECKING:
    from diskpart.platform.base import PlatformBackend

logger = get_logger(__name__)


def parse_index(reference: str) -> int | None:
    try:
        return int(reference)
    except ValueError:
        return None


class DeviceResolver:
    """Resolves device references against the platform backend."""

    def __init__(self, backend: PlatformBackend, device_root: str = "/dev") -> None:
        self.backend = backend
        self.device_root = device_root.rstrip("/") or "/"

    def canonical_path(self, name: str) -> str:
        if name.startswith("/"):
            return name
        if self.device_root == "/":
            return f"/{name}"
        return f"{self.device_root}/{name}"

    def resolve(self, kind: DeviceKind, reference: str) -> str | None:
        """
        Resolve a reference to a device path.

        Integers are 1-based positions in the enumeration of ``kind``;
        anything else is a device name. The result is not checked for
        existence.
        """
        index = parse_index(reference)
        if index is None:
            return self.canonical_path(reference)

        if index <= 0:
            return None

        devices = self.backend.list_devices(kind)
        if index > len(devices):
            logger.debug(
                "Device index out of range",
                kind=kind.value,
                index=index,
                available=len(devices),
            )
            return None
        return devices[index - 1].path

    def parent_and_number(self, partition_path: str) -> tuple[str, int] | None:
        """Parent disk path and partition number, queried fresh every time."""
        result = self.backend.partition_parent(partition_path)
        if result is None:
            return None

        disk_path, number = result
        if not disk_path or number <= 0:
            return None
        return disk_path, number

    def exists(self, path: str) -> bool:
        return self.backend.device_exists(path)

    def canonicalize(self, path: str) -> str:
        """Path of the device node behind an existing alias."""
        return self.backend.canonicalize(path)
