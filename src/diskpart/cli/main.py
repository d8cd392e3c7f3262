"""
diskpart CLI Main Entry Point.

Parses the diskpart-style invocation flags and starts either a script run
or an interactive session.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Sequence
from pathlib import Path

import click
from rich.console import Console

from diskpart import __version__
from diskpart.core.config import DiskPartConfig, load_config
from diskpart.core.models import ExitCode
from diskpart.core.session import Session
from diskpart.shell.dispatcher import Dispatcher
from diskpart.shell.interpreter import Interpreter
from diskpart.shell.verbs import render_full_help

console = Console()
err_console = Console(stderr=True)

INTERRUPTED_EXIT_CODE = 130

BANNER = f"DiskPart {__version__} (Linux compatibility mode)"

USAGE = """Usage: diskpart [-s <script>] [-t <seconds>] [-c <config>] [-h | -?]

  -s <script>    Run the commands in <script>, then exit.
  -t <seconds>   Wait <seconds> before starting.
  -c <config>    Read configuration from <config>.
  -h, -?         Show this help and exit.
"""


def print_usage() -> None:
    console.print(USAGE, markup=False, highlight=False)


def print_error(message: str) -> None:
    err_console.print(message, style="red", markup=False, highlight=False)


@click.command(
    context_settings={
        "help_option_names": [],
        "token_normalize_func": str.lower,
    }
)
@click.version_option(version=__version__, prog_name="DiskPart")
@click.option("-s", "script", type=str, default=None, help="Script file to run")
@click.option("-t", "delay", type=int, default=0, help="Seconds to wait before starting")
@click.option(
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file",
)
@click.option("-h", "-?", "show_help", is_flag=True, help="Show usage and exit")
def cli(
    script: str | None,
    delay: int,
    config_path: Path | None,
    show_help: bool,
) -> int:
    """DiskPart - disk partitioning command interpreter."""
    if show_help:
        print_usage()
        console.print(render_full_help(), markup=False, highlight=False)
        return ExitCode.OK

    if delay > 0:
        time.sleep(delay)

    config = DiskPartConfig.load(config_path) if config_path else load_config()
    if config_path:
        config.ensure_directories()

    if config.shell.show_banner:
        console.print(f"[bold]{BANNER}[/bold]")
        console.print()

    with Session(config=config) as session:
        dispatcher = Dispatcher(session, console=console)
        interpreter = Interpreter(dispatcher, console=console, err_console=err_console)
        if script is not None:
            return interpreter.run_script(Path(script))
        return interpreter.run_interactive()


def run(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = list(argv) if argv is not None else sys.argv[1:]

    try:
        result = cli.main(args=args, prog_name="diskpart", standalone_mode=False)
    except click.NoSuchOption as e:
        print_error(f"Error: {e.format_message()}")
        print_usage()
        return ExitCode.SYNTAX
    except (click.BadOptionUsage, click.BadParameter) as e:
        print_error(f"Error: {e.format_message()}")
        return ExitCode.CMD_ARG
    except click.UsageError as e:
        print_error(f"Error: {e.format_message()}")
        print_usage()
        return ExitCode.SYNTAX
    except (click.Abort, KeyboardInterrupt):
        console.print("\n[yellow]Operation cancelled[/yellow]")
        return INTERRUPTED_EXIT_CODE
    except Exception as e:
        print_error(f"Error: {e}")
        return ExitCode.FATAL

    if result is None:
        return ExitCode.OK
    return int(result)


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
