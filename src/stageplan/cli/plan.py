"""Plan command implementation.

Loads a plan file, builds the deployment topology and prints it.

Example:
    $ stageplan plan --config plan.yaml
    $ stageplan plan --config plan.yaml --output json > topology.json
"""

from __future__ import annotations

from pathlib import Path

import click
import structlog

from stageplan.builder import build_topology
from stageplan.cli.utils import error_exit, success, warn
from stageplan.config import load_plan_request
from stageplan.errors import StageplanError
from stageplan.schemas.topology import Topology
from stageplan.telemetry.logging import configure_logging

logger = structlog.get_logger(__name__)


def format_table(topology: Topology) -> str:
    """Render a human-readable summary of a topology.

    Environments are listed in promotion order, followed by the edges.
    """
    rows = [("ENVIRONMENT", "TYPE", "STRATEGY", "APPROVALS", "ROLLBACK")]
    by_name = {env.name: env for env in topology.environments}
    for name in topology.promotion_order:
        env = by_name[name]
        gate = topology.gates.get(name)
        policy = topology.rollback_policies.get(name)
        rows.append(
            (
                name,
                env.type.value,
                topology.strategies[name].type,
                str(gate.required_approvals) if gate else "-",
                policy.strategy.value if policy else "-",
            )
        )

    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = ["  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip() for row in rows]

    if topology.promotion_edges:
        lines.append("")
        lines.append("PROMOTION")
        for edge in topology.promotion_edges:
            mode = "auto" if edge.auto_promote else "manual"
            conditions = ", ".join(edge.condition_types)
            lines.append(f"  {edge.source} -> {edge.target} [{mode}] {conditions}")
    return "\n".join(lines)


@click.command(
    name="plan",
    help="Build a deployment topology from a plan file.",
    epilog="""
Examples:
    $ stageplan plan --config plan.yaml
    $ stageplan plan --config plan.yaml --output json
""",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Path to the plan file (plan.yaml).",
    metavar="PATH",
)
@click.option(
    "--output",
    "-o",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="ERROR",
    show_default=True,
    help="Minimum level of structured logs written to stderr.",
)
def plan_command(config_path: Path, output_format: str, log_level: str) -> None:
    """Build and print a deployment topology.

    Args:
        config_path: Path to the plan file.
        output_format: table or json.
        log_level: Structured log level.
    """
    configure_logging(log_level=log_level, json_output=False)

    try:
        request = load_plan_request(config_path)
        topology = build_topology(
            request.environments,
            detection=request.detection,
            options=request.options,
        )
    except StageplanError as e:
        logger.debug("plan_failed", error_type=type(e).__name__)
        for message in e.warnings:
            warn(message)
        error_exit(str(e), exit_code=e.exit_code)

    for message in topology.warnings:
        warn(message)

    if output_format.lower() == "json":
        success(topology.model_dump_json(indent=2))
    else:
        success(format_table(topology))


__all__ = ["format_table", "plan_command"]
