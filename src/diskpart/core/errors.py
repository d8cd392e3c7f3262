"""
diskpart error taxonomy.

Handlers raise these; the dispatcher turns them into command outcomes.
"""

from __future__ import annotations

from diskpart.core.models import Outcome, OutcomeKind


class DiskPartError(Exception):
    """Base class for errors raised while handling a command."""

    kind = OutcomeKind.SERVICE

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_outcome(self) -> Outcome:
        message = self.message
        if self.hint:
            message = f"{message}\n{self.hint}"
        return Outcome(self.kind, message)


class CommandSyntaxError(DiskPartError):
    """Malformed command, missing argument or missing selection."""

    kind = OutcomeKind.SYNTAX


class ServiceError(DiskPartError):
    """An external operation or one of its preconditions failed."""

    kind = OutcomeKind.SERVICE


class DeviceNotFoundError(ServiceError):
    """A referenced device could not be resolved or does not exist."""

    kind = OutcomeKind.DEVICE_NOT_FOUND
