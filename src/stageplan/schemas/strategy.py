"""Deployment strategy schemas.

Concrete parameter sets for the three supported rollout strategies. Each
configuration carries a ``type`` discriminator so that a ``DeploymentStrategy``
value round-trips through JSON without losing its variant.

Key Components:
    RollingConfig: Incremental instance replacement bounded by maxUnavailable/maxSurge
    BlueGreenConfig: Preview stack with atomic traffic cutover
    CanaryConfig: Progressive traffic-weighted rollout
    CanaryStep: SetWeight | Pause | SetCanaryScale | AnalysisStep
    AnalysisConfig: Analysis templates attached to a rollout
    TrafficRoutingConfig: Istio / NGINX / ALB traffic routing
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stageplan.schemas.duration import Duration

# =============================================================================
# Analysis
# =============================================================================


class AnalysisTemplate(BaseModel):
    """Reference to an analysis template evaluated during a rollout.

    Attributes:
        template_name: Name of the analysis template (e.g. "success-rate").
        cluster_scope: Whether the template is cluster scoped.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    template_name: str = Field(..., min_length=1, description="Analysis template name")
    cluster_scope: bool = Field(default=False, description="Template is cluster scoped")


class AnalysisArg(BaseModel):
    """Argument passed to analysis templates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Argument name")
    value: str = Field(..., description="Argument value")


class AnalysisConfig(BaseModel):
    """Analysis block attached to a blue-green or canary rollout.

    Examples:
        >>> config = AnalysisConfig(
        ...     templates=(AnalysisTemplate(template_name="success-rate"),),
        ... )
        >>> config.templates[0].template_name
        'success-rate'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    templates: tuple[AnalysisTemplate, ...] = Field(
        ...,
        min_length=1,
        description="Analysis templates to evaluate",
    )
    args: tuple[AnalysisArg, ...] = Field(
        default=(),
        description="Arguments passed to every template",
    )


# =============================================================================
# Traffic routing
# =============================================================================


class IstioRouting(BaseModel):
    """Istio virtual service / destination rule routing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    virtual_service: str = Field(..., min_length=1)
    routes: tuple[str, ...] = Field(default=())
    destination_rule: str | None = Field(default=None)
    canary_subset_name: str = Field(default="canary")
    stable_subset_name: str = Field(default="stable")


class NginxRouting(BaseModel):
    """NGINX ingress routing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stable_ingress: str = Field(..., min_length=1)
    annotation_prefix: str | None = Field(default=None)


class AlbRouting(BaseModel):
    """AWS ALB ingress routing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ingress: str = Field(..., min_length=1)
    service_port: int = Field(..., ge=1, le=65535)
    annotation_prefix: str | None = Field(default=None)


class TrafficRoutingConfig(BaseModel):
    """Traffic routing provider for canary rollouts.

    Exactly one provider must be configured.

    Examples:
        >>> routing = TrafficRoutingConfig(nginx=NginxRouting(stable_ingress="web"))
        >>> routing.provider
        'nginx'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    istio: IstioRouting | None = Field(default=None)
    nginx: NginxRouting | None = Field(default=None)
    alb: AlbRouting | None = Field(default=None)

    @model_validator(mode="after")
    def validate_single_provider(self) -> TrafficRoutingConfig:
        """Validate that exactly one routing provider is configured."""
        configured = [
            name
            for name in ("istio", "nginx", "alb")
            if getattr(self, name) is not None
        ]
        if len(configured) != 1:
            raise ValueError(
                "exactly one of istio, nginx or alb must be configured "
                f"(got: {configured or 'none'})"
            )
        return self

    @property
    def provider(self) -> str:
        """Name of the configured routing provider."""
        for name in ("istio", "nginx", "alb"):
            if getattr(self, name) is not None:
                return name
        raise AssertionError("unreachable: validated in validate_single_provider")


# =============================================================================
# Canary steps
# =============================================================================


class SetWeight(BaseModel):
    """Shift a percentage of traffic to the canary."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["set_weight"] = Field(default="set_weight", description="Step discriminator")
    weight: int = Field(..., ge=0, le=100, description="Canary traffic percentage")


class Pause(BaseModel):
    """Pause the rollout for a fixed duration or until approved.

    A pause with neither ``duration`` nor ``until_approved`` is an
    indefinite pause resumed by the rollout controller.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["pause"] = Field(default="pause", description="Step discriminator")
    duration: Duration | None = Field(default=None)
    until_approved: bool = Field(default=False)

    @model_validator(mode="after")
    def validate_exclusive(self) -> Pause:
        """A pause waits either for a duration or for approval, not both."""
        if self.duration is not None and self.until_approved:
            raise ValueError("pause cannot set both duration and until_approved")
        return self


class SetCanaryScale(BaseModel):
    """Scale the canary independently of its traffic weight."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["set_canary_scale"] = Field(
        default="set_canary_scale", description="Step discriminator"
    )
    weight: int | None = Field(default=None, ge=0, le=100)
    replicas: int | None = Field(default=None, ge=0)
    match_traffic_weight: bool = Field(default=False)


class AnalysisStep(BaseModel):
    """Run an inline analysis before continuing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["analysis"] = Field(default="analysis", description="Step discriminator")
    analysis: AnalysisConfig


CanaryStep = Annotated[
    SetWeight | Pause | SetCanaryScale | AnalysisStep,
    Field(discriminator="type"),
]
"""Discriminated union of canary step types."""


# =============================================================================
# Strategy configurations
# =============================================================================


class RollingConfig(BaseModel):
    """Rolling update parameters.

    Examples:
        >>> RollingConfig(max_unavailable="25%", max_surge="25%").progress_deadline_seconds
        600
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["rolling"] = Field(default="rolling", description="Strategy discriminator")
    max_unavailable: str = Field(..., min_length=1)
    max_surge: str = Field(..., min_length=1)
    progress_deadline_seconds: int = Field(default=600, ge=1)
    revision_history_limit: int = Field(default=10, ge=0)


class BlueGreenConfig(BaseModel):
    """Blue-green rollout parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["blue-green"] = Field(
        default="blue-green", description="Strategy discriminator"
    )
    pre_promotion_analysis: AnalysisConfig | None = Field(default=None)
    post_promotion_analysis: AnalysisConfig | None = Field(default=None)
    scale_down_delay_seconds: int = Field(..., ge=0)
    preview_replica_count: int = Field(default=1, ge=0)
    auto_promotion_enabled: bool = Field(...)


class CanaryConfig(BaseModel):
    """Canary rollout parameters.

    SetWeight steps must be monotonically non-decreasing; a rollout that
    shifts traffic back toward the stable version mid-flight is rejected.

    Examples:
        >>> CanaryConfig(steps=(SetWeight(weight=40), SetWeight(weight=20)))
        Traceback (most recent call last):
            ...
        pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["canary"] = Field(default="canary", description="Strategy discriminator")
    steps: tuple[CanaryStep, ...] = Field(..., min_length=1)
    analysis: AnalysisConfig | None = Field(default=None)
    traffic_routing: TrafficRoutingConfig | None = Field(default=None)
    max_unavailable: str = Field(default="25%", min_length=1)

    @model_validator(mode="after")
    def validate_monotonic_weights(self) -> CanaryConfig:
        """Validate that SetWeight values never decrease."""
        previous = -1
        for index, step in enumerate(self.steps):
            if isinstance(step, SetWeight):
                if step.weight < previous:
                    raise ValueError(
                        f"canary weights must be non-decreasing: step {index} sets "
                        f"{step.weight}% after {previous}%"
                    )
                previous = step.weight
        return self

    @property
    def weights(self) -> tuple[int, ...]:
        """Traffic weights in schedule order."""
        return tuple(s.weight for s in self.steps if isinstance(s, SetWeight))


DeploymentStrategy = Annotated[
    RollingConfig | BlueGreenConfig | CanaryConfig,
    Field(discriminator="type"),
]
"""Discriminated union of deployment strategy configurations."""


__all__ = [
    "AlbRouting",
    "AnalysisArg",
    "AnalysisConfig",
    "AnalysisStep",
    "AnalysisTemplate",
    "BlueGreenConfig",
    "CanaryConfig",
    "CanaryStep",
    "DeploymentStrategy",
    "IstioRouting",
    "NginxRouting",
    "Pause",
    "RollingConfig",
    "SetCanaryScale",
    "SetWeight",
    "TrafficRoutingConfig",
]
