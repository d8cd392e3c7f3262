"""
Interpreter loop.

Drives the dispatcher over an interactive stream or a script file and
turns command outcomes into loop decisions and process exit codes.
"""

from __future__ import annotations

import sys
from enum import Enum, auto
from pathlib import Path
from typing import TextIO

from rich.console import Console

from diskpart.core.logging import get_logger
from diskpart.core.models import ExitCode, Outcome, OutcomeKind
from diskpart.shell.dispatcher import Dispatcher
from diskpart.shell.tokenizer import tokenize

logger = get_logger(__name__)

NOERR_FLAG = "noerr"


class LoopState(Enum):
    RUNNING = auto()
    TERMINATED = auto()
    FAILED = auto()


class Interpreter:
    """
    Runs command lines through a dispatcher.

    Interactive mode reports errors and keeps prompting. Script mode stops
    at the first ``exit`` or error line, unless the line carries ``noerr``.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.console = console or dispatcher.console
        self.err_console = err_console or Console(stderr=True)
        self.state = LoopState.RUNNING
        self.exit_code = ExitCode.OK

    @property
    def prompt(self) -> str:
        return self.dispatcher.session.config.shell.prompt

    def report(self, outcome: Outcome) -> None:
        """Show an outcome's message to the user."""
        if not outcome.message:
            return

        if outcome.is_error:
            self.err_console.print(outcome.message, style="red", markup=False, highlight=False)
        elif outcome.kind == OutcomeKind.NOT_IMPLEMENTED:
            self.console.print(outcome.message, style="yellow", markup=False, highlight=False)
        else:
            self.console.print(outcome.message, markup=False, highlight=False)

    def execute_line(self, line: str) -> Outcome:
        outcome = self.dispatcher.dispatch(line)
        self.report(outcome)
        return outcome

    def run_interactive(self, stream: TextIO | None = None) -> ExitCode:
        """Prompt and dispatch until ``exit`` or end of input."""
        stream = stream or sys.stdin
        self.state = LoopState.RUNNING
        self.exit_code = ExitCode.OK

        while self.state == LoopState.RUNNING:
            self.console.print(self.prompt, end="", markup=False, highlight=False)
            line = stream.readline()
            if not line:
                self.console.print()
                self.state = LoopState.TERMINATED
                break

            outcome = self.execute_line(line)
            if outcome.kind == OutcomeKind.EXIT:
                self.state = LoopState.TERMINATED

        logger.info("Interactive session finished")
        return self.exit_code

    def run_script(self, path: Path) -> ExitCode:
        """Run every line of a script file, stopping at the first error."""
        self.state = LoopState.RUNNING
        self.exit_code = ExitCode.OK

        try:
            handle = open(path, encoding="utf-8")
        except OSError as e:
            logger.error("Cannot open script", path=str(path), error=str(e))
            self.err_console.print(
                f"Cannot open script file {path}: {e.strerror or e}",
                style="red",
                markup=False,
                highlight=False,
            )
            self.state = LoopState.FAILED
            self.exit_code = ExitCode.FILE
            return self.exit_code

        with handle:
            try:
                for line_number, line in enumerate(handle, start=1):
                    self._run_script_line(line_number, line)
                    if self.state != LoopState.RUNNING:
                        break
            except UnicodeDecodeError as e:
                logger.error("Cannot read script", path=str(path), error=str(e))
                self.err_console.print(
                    f"Cannot read script file {path}: {e.reason}",
                    style="red",
                    markup=False,
                    highlight=False,
                )
                self.state = LoopState.FAILED
                self.exit_code = ExitCode.FILE

        if self.state == LoopState.RUNNING:
            self.state = LoopState.TERMINATED

        logger.info(
            "Script finished",
            path=str(path),
            state=self.state.name,
            exit_code=int(self.exit_code),
        )
        return self.exit_code

    def _run_script_line(self, line_number: int, line: str) -> None:
        outcome = self.execute_line(line)

        if outcome.kind == OutcomeKind.EXIT:
            self.state = LoopState.TERMINATED
            return
        if not outcome.is_error:
            return

        tokens = tokenize(line, self.dispatcher.max_tokens)
        if any(token.lower() == NOERR_FLAG for token in tokens[1:]):
            logger.info("Ignoring error on noerr line", line=line_number)
            return

        logger.info(
            "Script stopped on error",
            line=line_number,
            outcome=outcome.kind.name,
        )
        self.state = LoopState.FAILED
        self.exit_code = outcome.exit_code
