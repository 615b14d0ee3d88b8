"""Approval gate planning.

An environment gets a manual approval gate when it asks for one or when it is
production. Approvers come from a role table keyed by environment type; the
table can be overridden per type through ``PlanOptions.approvers``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import structlog

from stageplan.schemas.environment import Environment, EnvironmentType, PlanOptions
from stageplan.schemas.promotion import ApprovalGate

logger = structlog.get_logger(__name__)

DEFAULT_APPROVERS: Mapping[EnvironmentType, tuple[str, ...]] = MappingProxyType(
    {
        EnvironmentType.PRODUCTION: ("team-leads", "devops-team", "security-team"),
        EnvironmentType.STAGING: ("team-leads", "qa-team"),
        EnvironmentType.DEVELOPMENT: ("developers",),
    }
)
"""Read-only default approver roles per environment type."""

PRODUCTION_REQUIRED_APPROVALS = 2


def resolve_approvers(
    env_type: EnvironmentType, options: PlanOptions | None = None
) -> tuple[str, ...]:
    """Return the approver roles for an environment type.

    Args:
        env_type: Environment tier.
        options: Plan options whose ``approvers`` override the defaults.

    Returns:
        Approver roles in table order.

    Examples:
        >>> resolve_approvers(EnvironmentType.STAGING)
        ('team-leads', 'qa-team')
    """
    if options is not None and env_type in options.approvers:
        return options.approvers[env_type]
    return DEFAULT_APPROVERS[env_type]


def required_approvals(env_type: EnvironmentType) -> int:
    """Approvals needed to pass a gate for the given tier."""
    if env_type is EnvironmentType.PRODUCTION:
        return PRODUCTION_REQUIRED_APPROVALS
    return 1


def plan_approval_gate(
    environment: Environment, options: PlanOptions | None = None
) -> ApprovalGate | None:
    """Plan the approval gate for an environment.

    Args:
        environment: Environment to gate.
        options: Plan options (approver overrides, gate timeout).

    Returns:
        ApprovalGate if the environment requests approval or is production,
        None otherwise.
    """
    if not (environment.approval_required or environment.is_production):
        return None

    options = options or PlanOptions()
    gate = ApprovalGate(
        environment=environment.name,
        approvers=resolve_approvers(environment.type, options),
        required_approvals=required_approvals(environment.type),
        timeout_minutes=options.approval_timeout_minutes,
        instructions=(
            f"Please review and approve deployment to {environment.name} environment"
        ),
    )
    logger.debug(
        "approval_gate_planned",
        environment=environment.name,
        required_approvals=gate.required_approvals,
        approvers=list(gate.approvers),
    )
    return gate


__all__ = [
    "DEFAULT_APPROVERS",
    "PRODUCTION_REQUIRED_APPROVALS",
    "plan_approval_gate",
    "required_approvals",
    "resolve_approvers",
]
