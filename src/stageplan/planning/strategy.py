"""Deployment strategy resolution.

Derives concrete rollout parameters from an environment's tier and requested
strategy. Production gets a conservative replacement pace and one explicit
human checkpoint mid-canary; lower tiers optimize for speed.

Example:
    >>> from stageplan.schemas import Environment
    >>> env = Environment(name="prod", type="production", deployment_strategy="rolling")
    >>> config = resolve_strategy(env)
    >>> (config.max_unavailable, config.max_surge)
    ('25%', '25%')
"""

from __future__ import annotations

import structlog

from stageplan.errors import StrategyResolutionError
from stageplan.schemas.environment import DeploymentStrategyType, Environment
from stageplan.schemas.strategy import (
    AnalysisArg,
    AnalysisConfig,
    AnalysisTemplate,
    BlueGreenConfig,
    CanaryConfig,
    CanaryStep,
    DeploymentStrategy,
    Pause,
    RollingConfig,
    SetWeight,
)

logger = structlog.get_logger(__name__)

CANARY_WEIGHTS: tuple[int, ...] = (20, 40, 60, 80)

# One pause follows each weight; None marks the approval checkpoint slot
_PRODUCTION_PAUSES: tuple[str | None, ...] = ("5m", "10m", None, "10m")
_NON_PRODUCTION_PAUSES: tuple[str | None, ...] = ("2m", "5m", None, "5m")


def parse_strategy_type(environment: Environment) -> DeploymentStrategyType:
    """Map an environment's strategy identifier to a DeploymentStrategyType.

    Identifiers are matched case-insensitively, ignoring surrounding whitespace.

    Raises:
        StrategyResolutionError: If the identifier is not recognized.
    """
    requested = environment.deployment_strategy.strip().lower()
    try:
        return DeploymentStrategyType(requested)
    except ValueError:
        raise StrategyResolutionError(
            environment.name,
            environment.deployment_strategy,
            valid=[s.value for s in DeploymentStrategyType],
        ) from None


def resolve_strategy(environment: Environment) -> DeploymentStrategy:
    """Resolve concrete deployment strategy parameters for an environment.

    Args:
        environment: Environment whose strategy is resolved.

    Returns:
        RollingConfig, BlueGreenConfig or CanaryConfig.

    Raises:
        StrategyResolutionError: If the requested strategy is unknown.
    """
    strategy_type = parse_strategy_type(environment)

    config: DeploymentStrategy
    if strategy_type is DeploymentStrategyType.BLUE_GREEN:
        config = _blue_green_config(environment)
    elif strategy_type is DeploymentStrategyType.CANARY:
        config = _canary_config(environment)
    else:
        config = _rolling_config(environment)

    logger.debug(
        "strategy_resolved",
        environment=environment.name,
        environment_type=environment.type.value,
        strategy=strategy_type.value,
    )
    return config


def _rolling_config(environment: Environment) -> RollingConfig:
    if environment.is_production:
        return RollingConfig(max_unavailable="25%", max_surge="25%")
    return RollingConfig(max_unavailable="50%", max_surge="100%")


def _service_analysis(environment: Environment, *template_names: str) -> AnalysisConfig:
    return AnalysisConfig(
        templates=tuple(AnalysisTemplate(template_name=t) for t in template_names),
        args=(AnalysisArg(name="service-name", value=f"{environment.name}-service"),),
    )


def _blue_green_config(environment: Environment) -> BlueGreenConfig:
    pre_analysis = None
    post_analysis = None
    if environment.analysis:
        pre_analysis = _service_analysis(environment, "success-rate", "avg-req-duration")
        post_analysis = _service_analysis(environment, "success-rate")

    return BlueGreenConfig(
        pre_promotion_analysis=pre_analysis,
        post_promotion_analysis=post_analysis,
        scale_down_delay_seconds=300 if environment.is_production else 60,
        preview_replica_count=1,
        auto_promotion_enabled=not environment.is_production,
    )


def canary_schedule(is_production: bool) -> tuple[CanaryStep, ...]:
    """Build the fixed eight-step canary schedule.

    SetWeight(20), Pause, SetWeight(40), Pause, SetWeight(60), Pause,
    SetWeight(80), Pause. The third pause waits for approval in production
    and carries no duration outside it.

    Args:
        is_production: Whether the schedule is for a production environment.

    Returns:
        Canary steps in execution order.
    """
    pauses = _PRODUCTION_PAUSES if is_production else _NON_PRODUCTION_PAUSES
    steps: list[CanaryStep] = []
    for weight, duration in zip(CANARY_WEIGHTS, pauses):
        steps.append(SetWeight(weight=weight))
        if duration is None:
            steps.append(Pause(until_approved=is_production))
        else:
            steps.append(Pause(duration=duration))
    return tuple(steps)


def _canary_config(environment: Environment) -> CanaryConfig:
    analysis = None
    if environment.analysis:
        analysis = _service_analysis(environment, "success-rate", "avg-req-duration")

    return CanaryConfig(
        steps=canary_schedule(environment.is_production),
        analysis=analysis,
        traffic_routing=environment.traffic_routing,
        max_unavailable="25%",
    )


__all__ = [
    "CANARY_WEIGHTS",
    "canary_schedule",
    "parse_strategy_type",
    "resolve_strategy",
]
