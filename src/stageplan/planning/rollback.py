"""Rollback policy planning."""

from __future__ import annotations

import structlog

from stageplan.schemas.environment import Environment
from stageplan.schemas.rollback import (
    ErrorRateThresholdTrigger,
    HealthCheckFailureTrigger,
    ManualTrigger,
    RollbackPolicy,
    RollbackStrategy,
    RollbackTrigger,
)

logger = structlog.get_logger(__name__)

MAX_ROLLBACK_RETRIES = 3


def rollback_triggers(environment: Environment) -> tuple[RollbackTrigger, ...]:
    """Failure triggers for an environment.

    Production tolerates a 5% error rate before rolling back, lower tiers 10%.
    """
    return (
        HealthCheckFailureTrigger(threshold=3, duration="5m"),
        ErrorRateThresholdTrigger(
            percent=5 if environment.is_production else 10,
            duration="10m",
        ),
        ManualTrigger(),
    )


def plan_rollback_policy(environment: Environment) -> RollbackPolicy | None:
    """Plan the rollback policy for an environment.

    Args:
        environment: Environment to plan for.

    Returns:
        RollbackPolicy if rollback is enabled, None otherwise.

    Examples:
        >>> from stageplan.schemas import Environment
        >>> env = Environment(name="prod", type="production", rollback_enabled=True)
        >>> plan_rollback_policy(env).strategy.value
        'gradual'
    """
    if not environment.rollback_enabled:
        return None

    strategy = (
        RollbackStrategy.GRADUAL if environment.is_production else RollbackStrategy.IMMEDIATE
    )
    policy = RollbackPolicy(
        enabled=True,
        triggers=rollback_triggers(environment),
        strategy=strategy,
        max_retries=MAX_ROLLBACK_RETRIES,
    )
    logger.debug(
        "rollback_policy_planned",
        environment=environment.name,
        strategy=strategy.value,
    )
    return policy


__all__ = ["MAX_ROLLBACK_RETRIES", "plan_rollback_policy", "rollback_triggers"]
