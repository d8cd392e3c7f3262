"""
DiskPart CLI Module.

Provides the process entry point.
"""

from diskpart.cli.main import cli, main, run

__all__ = ["cli", "main", "run"]
