"""Rollback policy schemas.

Key Components:
    RollbackStrategy: immediate / gradual
    RollbackTrigger: HealthCheckFailure | ErrorRateThreshold | Manual
    RollbackPolicy: Triggers, strategy and retry budget for one environment
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from stageplan.schemas.duration import Duration


class RollbackStrategy(str, Enum):
    """How a rollback is carried out.

    Attributes:
        IMMEDIATE: Revert all traffic to the previous revision at once.
        GRADUAL: Shift traffic back progressively.
    """

    IMMEDIATE = "immediate"
    GRADUAL = "gradual"


class HealthCheckFailureTrigger(BaseModel):
    """Roll back after consecutive failed health checks."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["health_check_failure"] = Field(default="health_check_failure")
    threshold: int = Field(..., ge=1, description="Consecutive failures")
    duration: Duration


class ErrorRateThresholdTrigger(BaseModel):
    """Roll back when the error rate stays above a percentage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["error_rate_threshold"] = Field(default="error_rate_threshold")
    percent: int = Field(..., ge=0, le=100)
    duration: Duration


class ManualTrigger(BaseModel):
    """Roll back on operator request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["manual"] = Field(default="manual")


RollbackTrigger = Annotated[
    HealthCheckFailureTrigger | ErrorRateThresholdTrigger | ManualTrigger,
    Field(discriminator="type"),
]
"""Discriminated union of rollback trigger types."""


class RollbackPolicy(BaseModel):
    """Rollback policy for one environment.

    Examples:
        >>> policy = RollbackPolicy(triggers=(ManualTrigger(),), strategy="immediate")
        >>> policy.strategy
        <RollbackStrategy.IMMEDIATE: 'immediate'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True)
    triggers: tuple[RollbackTrigger, ...] = Field(..., min_length=1)
    strategy: RollbackStrategy
    max_retries: int = Field(default=3, ge=0)


__all__ = [
    "ErrorRateThresholdTrigger",
    "HealthCheckFailureTrigger",
    "ManualTrigger",
    "RollbackPolicy",
    "RollbackStrategy",
    "RollbackTrigger",
]
