"""Command-line interface for stageplan.

Example:
    $ stageplan --version
    $ stageplan plan --config plan.yaml

Exit Codes:
    0: Success
    1: General error
    2: Configuration error (or invalid usage)
    3: Unknown deployment strategy
    4: Plan file missing or invalid
"""

from __future__ import annotations

from stageplan.cli.main import cli, main
from stageplan.cli.utils import ExitCode, error, error_exit, success, warn

__all__: list[str] = [
    "ExitCode",
    "cli",
    "error",
    "error_exit",
    "main",
    "success",
    "warn",
]
