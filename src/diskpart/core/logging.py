"""
diskpart structured logging.

Every external operation the interpreter submits is logged as an audit
record: what was asked for, against which device, and how the tool
exited. Log lines emitted while a session is active carry its id.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from diskpart.core.config import LoggingConfig
    from diskpart.core.models import Operation
    from diskpart.platform.base import CommandResult


_configured = False

# stderr excerpt kept in audit records
STDERR_EXCERPT = 200

# Operation audit records go to the log file, never to the console
AUDIT_LOGGER = "diskpart.audit"


class ExcludeAudit(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(AUDIT_LOGGER)


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if config.console_enabled:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(getattr(logging, config.level))
        stream.addFilter(ExcludeAudit())
        handlers.append(stream)

    if config.file_enabled:
        config.log_directory.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d")
        audit = logging.FileHandler(
            config.log_directory / f"diskpart_{stamp}.log", encoding="utf-8"
        )
        audit.setLevel(logging.DEBUG)
        handlers.append(audit)

    return handlers or [logging.NullHandler()]


def setup_logging(config: LoggingConfig) -> None:
    """Route structlog through the stdlib handlers described by *config*.

    Only the first call has an effect.
    """
    global _configured

    if _configured:
        return

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=_build_handlers(config),
        format="%(message)s",
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if config.json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or "diskpart")


def bind_session(session_id: str) -> None:
    """Attach *session_id* to every log line emitted from now on."""
    structlog.contextvars.bind_contextvars(session_id=session_id)


def unbind_session() -> None:
    structlog.contextvars.unbind_contextvars("session_id")


class OperationLogger:
    """Audit one submitted operation from submission to tool exit.

    Usage::

        with OperationLogger(operation) as audit:
            audit.record(backend.execute(operation))
    """

    def __init__(
        self,
        operation: Operation,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.operation = operation
        self.logger = (logger or get_logger(AUDIT_LOGGER)).bind(
            operation=operation.kind.value,
            target=operation.target,
            **operation.params,
        )
        self.result: CommandResult | None = None
        self._started: datetime | None = None

    def __enter__(self) -> OperationLogger:
        self._started = datetime.now()
        self.logger.info("Submitting operation")
        return self

    def record(self, result: CommandResult) -> None:
        self.result = result

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        return (datetime.now() - self._started).total_seconds()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_type is not None:
            self.logger.error(
                "Operation raised",
                duration_seconds=self.elapsed,
                error_type=exc_type.__name__,
                error=str(exc_val),
            )
            return

        if self.result is None:
            self.logger.warning("Operation produced no result", duration_seconds=self.elapsed)
        elif self.result.success:
            self.logger.info(
                "Operation completed",
                duration_seconds=self.elapsed,
                returncode=self.result.returncode,
            )
        else:
            self.logger.warning(
                "Operation failed",
                duration_seconds=self.elapsed,
                returncode=self.result.returncode,
                stderr=self.result.stderr.strip()[:STDERR_EXCERPT],
            )
