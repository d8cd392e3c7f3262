"""
DiskPart Core - Session, configuration and shared models.
"""

from diskpart.core.config import DiskPartConfig
from diskpart.core.errors import (
    CommandSyntaxError,
    DeviceNotFoundError,
    DiskPartError,
    ServiceError,
)
from diskpart.core.logging import bind_session, get_logger, setup_logging
from diskpart.core.models import ExitCode, Outcome, OutcomeKind
from diskpart.core.session import Session, SelectionState

__all__ = [
    "DiskPartConfig",
    "CommandSyntaxError",
    "DeviceNotFoundError",
    "DiskPartError",
    "ServiceError",
    "bind_session",
    "get_logger",
    "setup_logging",
    "ExitCode",
    "Outcome",
    "OutcomeKind",
    "Session",
    "SelectionState",
]
