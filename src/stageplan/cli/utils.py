"""CLI utility functions and error handling.

Shared exit codes and output helpers for the stageplan CLI. Errors, warnings
and progress go to stderr so that stdout carries only the rendered topology.

Example:
    from stageplan.cli.utils import error_exit, ExitCode

    error_exit("Plan file not found", exit_code=ExitCode.PLAN_FILE_ERROR, path="plan.yaml")
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes for CLI commands.

    Values match the ``exit_code`` attributes of the stageplan exceptions.
    """

    SUCCESS = 0
    """Command completed successfully."""

    GENERAL_ERROR = 1
    """General error (catch-all for failures)."""

    CONFIGURATION_ERROR = 2
    """Invalid environment configuration or invalid usage."""

    STRATEGY_ERROR = 3
    """Unknown deployment strategy."""

    PLAN_FILE_ERROR = 4
    """Plan file missing or unreadable."""


def _format(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("File not found", path="/path/to/file")
        # Output: Error: File not found (path=/path/to/file)
    """
    click.echo(_format("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: int = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with a code.

    Args:
        message: Error message to display.
        exit_code: Exit code to use (default: GENERAL_ERROR).
        **context: Optional context key-value pairs to include.

    Raises:
        SystemExit: Always exits with the specified code.
    """
    error(message, **context)
    sys.exit(exit_code)


def warn(message: str, **context: str | int | bool | None) -> None:
    """Print a warning message to stderr."""
    click.echo(_format("Warning", message, context), err=True)


def success(message: str) -> None:
    """Print a result to stdout."""
    click.echo(message)


def info(message: str) -> None:
    """Print an informational message to stderr."""
    click.echo(message, err=True)


__all__ = ["ExitCode", "error", "error_exit", "info", "success", "warn"]
