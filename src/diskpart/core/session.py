"""
diskpart Session Management.

Owns the configuration, the platform backend and the selection state of
one interpreter session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from diskpart.core.config import DiskPartConfig, load_config
from diskpart.core.logging import bind_session, get_logger, setup_logging, unbind_session
from diskpart.core.models import DeviceKind

if TYPE_CHECKING:
    from diskpart.platform.base import PlatformBackend

logger = get_logger(__name__)

SELECTABLE_KINDS = (DeviceKind.DISK, DeviceKind.PARTITION, DeviceKind.VOLUME)


@dataclass
class SelectionState:
    """
    Currently selected disk, partition and volume.

    The slots are independent: selecting a disk leaves the partition and
    volume selections untouched, and nothing clears a slot except a new
    selection of the same kind.
    """

    disk: str | None = None
    partition: str | None = None
    volume: str | None = None

    def select(self, kind: DeviceKind, path: str) -> None:
        if kind not in SELECTABLE_KINDS:
            raise ValueError(f"{kind.value} cannot be selected")
        setattr(self, kind.value, path)

    def get(self, kind: DeviceKind) -> str | None:
        if kind not in SELECTABLE_KINDS:
            return None
        return getattr(self, kind.value)


class Session:
    """
    Manages a diskpart session: configuration, backend and selections.

    This is the state every command handler works against.
    """

    def __init__(
        self,
        config: DiskPartConfig | None = None,
        backend: PlatformBackend | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or str(uuid.uuid4())
        self.config = config or load_config()
        self.started_at = datetime.now()
        self.selection = SelectionState()

        setup_logging(self.config.logging)
        bind_session(self.id)

        # Platform backend (lazily loaded)
        self._platform_backend = backend

        logger.info("Session started")

    @property
    def platform(self) -> PlatformBackend:
        """Get the platform-specific backend."""
        if self._platform_backend is None:
            from diskpart.platform import get_platform_backend

            self._platform_backend = get_platform_backend(
                timeout=self.config.shell.command_timeout_seconds,
                device_root=self.config.shell.device_root,
            )
        return self._platform_backend

    def select(self, kind: DeviceKind, path: str) -> None:
        self.selection.select(kind, path)
        logger.info("Selected device", kind=kind.value, path=path)

    def selected(self, kind: DeviceKind) -> str | None:
        return self.selection.get(kind)

    def close(self) -> None:
        logger.info(
            "Session closed",
            duration_seconds=(datetime.now() - self.started_at).total_seconds(),
        )
        unbind_session()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()
