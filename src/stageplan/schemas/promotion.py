"""Approval gate and promotion schemas.

Key Components:
    ApprovalGate: Manual sign-off required before deploying to an environment
    PromotionCondition: HealthCheck | TestSuccess | ManualApproval | TimeDelay
    PromotionEdge: Directed promotion from one environment to the next

Examples:
    >>> edge = PromotionEdge(
    ...     source="dev",
    ...     target="staging",
    ...     conditions=(TestSuccessCondition(suite="integration", environment="dev"),),
    ...     auto_promote=True,
    ... )
    >>> edge.condition_types
    ('test_success',)
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stageplan.schemas.duration import Duration


class ApprovalGate(BaseModel):
    """Manual approval gate for an environment.

    Attributes:
        environment: Environment the gate protects.
        approvers: Approver roles, unique, in table order.
        required_approvals: Number of approvals needed to proceed.
        timeout_minutes: How long the gate waits before failing.
        instructions: Text shown to approvers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    environment: str = Field(..., min_length=1)
    approvers: tuple[str, ...] = Field(..., min_length=1)
    required_approvals: int = Field(..., ge=1)
    timeout_minutes: int = Field(default=60, ge=1)
    instructions: str = Field(default="")

    @field_validator("approvers")
    @classmethod
    def validate_unique_approvers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate approver roles are not repeated."""
        if len(set(v)) != len(v):
            raise ValueError(f"approvers must be unique: {list(v)}")
        return v


# =============================================================================
# Promotion conditions
# =============================================================================


class HealthCheckCondition(BaseModel):
    """Target must answer its health endpoint before promotion."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["health_check"] = Field(default="health_check")
    endpoint: str = Field(..., min_length=1)
    expected_status: int = Field(default=200, ge=100, le=599)
    timeout_seconds: int = Field(default=30, ge=1)
    retries: int = Field(default=3, ge=0)


class TestSuccessCondition(BaseModel):
    """A test suite must have passed in the given environment."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["test_success"] = Field(default="test_success")
    suite: str = Field(..., min_length=1)
    environment: str = Field(..., min_length=1)


class ManualApprovalCondition(BaseModel):
    """Promotion waits for manual approval."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["manual_approval"] = Field(default="manual_approval")
    approvers: tuple[str, ...] = Field(..., min_length=1)
    required_approvals: int = Field(..., ge=1)
    timeout_minutes: int = Field(default=60, ge=1)

    @field_validator("approvers")
    @classmethod
    def validate_unique_approvers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate approver roles are not repeated."""
        if len(set(v)) != len(v):
            raise ValueError(f"approvers must be unique: {list(v)}")
        return v


class TimeDelayCondition(BaseModel):
    """Promotion waits a fixed soak period."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["time_delay"] = Field(default="time_delay")
    duration: Duration
    reason: str = Field(default="")


PromotionCondition = Annotated[
    HealthCheckCondition
    | TestSuccessCondition
    | ManualApprovalCondition
    | TimeDelayCondition,
    Field(discriminator="type"),
]
"""Discriminated union of promotion condition types."""


class PromotionEdge(BaseModel):
    """Directed promotion from ``source`` to ``target``.

    Conditions are evaluated in order by the runtime executor.

    Attributes:
        source: Environment the release is promoted from.
        target: Environment the release is promoted to.
        conditions: Ordered conditions that must hold before promotion.
        auto_promote: Promote without operator action once conditions hold.
        rollback_on_failure: Roll the target back if promotion fails.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    conditions: tuple[PromotionCondition, ...] = Field(default=())
    auto_promote: bool = Field(default=False)
    rollback_on_failure: bool = Field(default=True)

    @model_validator(mode="after")
    def validate_distinct_endpoints(self) -> PromotionEdge:
        """An environment cannot promote to itself."""
        if self.source == self.target:
            raise ValueError(f"promotion edge cannot loop on '{self.source}'")
        return self

    @property
    def condition_types(self) -> tuple[str, ...]:
        """Condition discriminators in evaluation order."""
        return tuple(c.type for c in self.conditions)


__all__ = [
    "ApprovalGate",
    "HealthCheckCondition",
    "ManualApprovalCondition",
    "PromotionCondition",
    "PromotionEdge",
    "TestSuccessCondition",
    "TimeDelayCondition",
]
