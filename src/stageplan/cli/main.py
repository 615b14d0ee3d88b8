"""Main entry point for the stageplan CLI.

Commands:
    stageplan plan: Build a deployment topology from a plan file

Example:
    $ stageplan --help
    $ stageplan plan --config plan.yaml --output json
"""

from __future__ import annotations

import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

import click

from stageplan.cli.plan import plan_command


def _get_version() -> str:
    """Return the installed stageplan version, or 'unknown'."""
    try:
        return get_version("stageplan")
    except PackageNotFoundError:
        return "unknown"


@click.group(
    name="stageplan",
    help="stageplan - Multi-environment deployment topology planner.",
    epilog="Use 'stageplan <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="stageplan",
    message="%(prog)s %(version)s",
)
def cli() -> None:
    """Root command group for the stageplan CLI."""


cli.add_command(plan_command)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the stageplan CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
