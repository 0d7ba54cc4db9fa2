"""Command line utilities for ORSF."""

from orsf.cli.app import main, run_cli
from orsf.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
