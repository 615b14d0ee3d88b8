"""Environment catalog schemas.

Typed, immutable descriptions of deployment targets and of the inputs that
accompany them into topology planning.

Key Components:
    EnvironmentType: development / staging / production, with promotion rank
    DeploymentStrategyType: rolling / blue-green / canary
    Environment: One named deployment target
    DetectionResult: Project detection summary consumed by step providers
    PlanOptions: Global planning options (approver table overrides, timeouts)

Examples:
    >>> env = Environment(name="prod", type="production", deploymentStrategy="canary")
    >>> env.type.rank
    2
    >>> env.deployment_strategy
    'canary'
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stageplan.schemas.duration import Duration
from stageplan.schemas.readonly import ReadOnlyMapping, empty_mapping
from stageplan.schemas.strategy import TrafficRoutingConfig


class EnvironmentType(str, Enum):
    """Environment tier.

    The tier determines the environment's position in the promotion path
    and how conservative its rollout parameters are.

    Attributes:
        DEVELOPMENT: Lowest tier, optimized for speed.
        STAGING: Pre-production validation tier.
        PRODUCTION: Highest tier, conservative rollout and mandatory gates.

    Examples:
        >>> EnvironmentType.STAGING.rank
        1
    """

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def rank(self) -> int:
        """Promotion rank (development=0, staging=1, production=2)."""
        return _RANKS[self]


_RANKS = {
    EnvironmentType.DEVELOPMENT: 0,
    EnvironmentType.STAGING: 1,
    EnvironmentType.PRODUCTION: 2,
}


class DeploymentStrategyType(str, Enum):
    """Supported deployment strategy identifiers."""

    ROLLING = "rolling"
    BLUE_GREEN = "blue-green"
    CANARY = "canary"


class Environment(BaseModel):
    """A named deployment target.

    ``deployment_strategy`` is kept as a plain identifier and resolved by the
    strategy resolver, so an unknown identifier is reported as a strategy
    resolution failure for this environment rather than a schema error.

    Attributes:
        name: Unique, non-empty environment name.
        type: Environment tier.
        deployment_strategy: Requested strategy identifier.
        approval_required: Request a manual approval gate.
        rollback_enabled: Plan a rollback policy for this environment.
        variables: Plain environment variables (e.g. DEPLOYMENT_URL).
        secrets: Names of secrets exposed to the deploy and rollback jobs.
        analysis: Attach analysis blocks to blue-green and canary rollouts.
        traffic_routing: Traffic routing used by canary rollouts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str = Field(..., description="Unique environment name")
    type: EnvironmentType = Field(..., description="Environment tier")
    deployment_strategy: str = Field(
        default=DeploymentStrategyType.ROLLING.value,
        alias="deploymentStrategy",
        description="Requested deployment strategy identifier",
    )
    approval_required: bool = Field(default=False, alias="approvalRequired")
    rollback_enabled: bool = Field(default=False, alias="rollbackEnabled")
    variables: ReadOnlyMapping[str, str] = Field(default_factory=empty_mapping)
    secrets: tuple[str, ...] = Field(default=())
    analysis: bool = Field(default=False)
    traffic_routing: TrafficRoutingConfig | None = Field(
        default=None, alias="trafficRouting"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Strip surrounding whitespace and reject empty names."""
        v = v.strip()
        if not v:
            raise ValueError("environment name must not be empty")
        return v

    @property
    def is_production(self) -> bool:
        """Whether this is a production environment."""
        return self.type is EnvironmentType.PRODUCTION


class DetectionResult(BaseModel):
    """Project detection summary.

    Produced by an external detection layer and only read by step providers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    languages: tuple[str, ...] = Field(default=())
    frameworks: tuple[str, ...] = Field(default=())
    package_managers: tuple[str, ...] = Field(default=(), alias="packageManagers")
    deployment_targets: tuple[str, ...] = Field(default=(), alias="deploymentTargets")


class PlanOptions(BaseModel):
    """Global options applied to every environment in a plan.

    Attributes:
        approvers: Approver role overrides keyed by environment type. Types
            not listed keep the default role table.
        approval_timeout_minutes: Timeout of per-environment approval gates.
        promotion_approval_timeout_minutes: Timeout of the manual approval
            condition on edges into production.
        health_endpoint: Health check path used by promotion conditions.
        soak_duration: Delay before promoting into production.
        promotion_test_suite: Test suite that must pass in the source environment.

    Examples:
        >>> options = PlanOptions(approvers={"production": ["release-managers", "sre"]})
        >>> options.approvers[EnvironmentType.PRODUCTION]
        ('release-managers', 'sre')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    approvers: ReadOnlyMapping[EnvironmentType, tuple[str, ...]] = Field(
        default_factory=empty_mapping
    )
    approval_timeout_minutes: int = Field(default=60, ge=1, le=10080)
    promotion_approval_timeout_minutes: int = Field(default=120, ge=1, le=10080)
    health_endpoint: str = Field(default="/health", min_length=1)
    soak_duration: Duration = Field(default="30m")
    promotion_test_suite: str = Field(default="integration", min_length=1)

    @field_validator("approvers")
    @classmethod
    def validate_approvers(
        cls, v: Mapping[EnvironmentType, tuple[str, ...]]
    ) -> Mapping[EnvironmentType, tuple[str, ...]]:
        """Reject empty or duplicated approver lists."""
        for env_type, roles in v.items():
            if not roles:
                raise ValueError(f"approvers for {env_type.value} must not be empty")
            if len(set(roles)) != len(roles):
                raise ValueError(f"approvers for {env_type.value} contain duplicates")
        return v


__all__ = [
    "DeploymentStrategyType",
    "DetectionResult",
    "Environment",
    "EnvironmentType",
    "PlanOptions",
]
