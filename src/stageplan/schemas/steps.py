"""Renderer-neutral step intents and per-environment pipelines.

A ``StepIntent`` says *what* a pipeline step has to achieve; renderers decide
how to express it for a given CI/CD platform. ``RunCommand.command`` is either
a shell command line supplied by a step provider (``npm ci``) or a namespaced
action identifier (``deploy:rolling``) that renderers map to their own
implementation, with parameters passed through ``env``.

Key Components:
    StepIntent: Checkout | SetupRuntime | RunCommand | Wait | ManualApprovalGate | HealthCheck
    JobKind: pre_deploy / approval / deploy / post_deploy_validate / rollback
    PipelineJob: Named job with dependencies and an ordered step sequence
    EnvironmentPipeline: All jobs, triggers and permissions for one environment
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from stageplan.schemas.duration import Duration
from stageplan.schemas.readonly import ReadOnlyMapping, empty_mapping


class Checkout(BaseModel):
    """Check out the source revision being deployed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["checkout"] = Field(default="checkout")
    name: str = Field(default="Checkout code")


class SetupRuntime(BaseModel):
    """Install a language runtime."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["setup_runtime"] = Field(default="setup_runtime")
    name: str = Field(default="Setup runtime")
    runtime: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)


class RunCommand(BaseModel):
    """Run a command or a namespaced deployment action."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["run_command"] = Field(default="run_command")
    name: str = Field(..., min_length=1)
    command: str = Field(..., min_length=1)
    env: ReadOnlyMapping[str, str] = Field(default_factory=empty_mapping)
    continue_on_error: bool = Field(default=False)


class Wait(BaseModel):
    """Wait for a fixed duration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["wait"] = Field(default="wait")
    name: str = Field(..., min_length=1)
    duration: Duration
    reason: str = Field(default="")


class ManualApprovalGate(BaseModel):
    """Block until the required number of approvals is given."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["manual_approval_gate"] = Field(default="manual_approval_gate")
    name: str = Field(..., min_length=1)
    approvers: tuple[str, ...] = Field(..., min_length=1)
    required_approvals: int = Field(default=1, ge=1)
    timeout_minutes: int | None = Field(default=None, ge=1)
    instructions: str = Field(default="")


class HealthCheck(BaseModel):
    """Probe an HTTP endpoint and fail the job if it is unhealthy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["health_check"] = Field(default="health_check")
    name: str = Field(default="Run health checks")
    endpoint: str = Field(..., min_length=1)
    expected_status: int = Field(default=200, ge=100, le=599)
    timeout_seconds: int = Field(default=30, ge=1)
    retries: int = Field(default=3, ge=0)


StepIntent = Annotated[
    Checkout | SetupRuntime | RunCommand | Wait | ManualApprovalGate | HealthCheck,
    Field(discriminator="type"),
]
"""Discriminated union of step intent types."""


class JobKind(str, Enum):
    """Role of a job inside an environment pipeline."""

    PRE_DEPLOY = "pre_deploy"
    APPROVAL = "approval"
    DEPLOY = "deploy"
    POST_DEPLOY_VALIDATE = "post_deploy_validate"
    ROLLBACK = "rollback"


class RunCondition(str, Enum):
    """When a job runs relative to the jobs it needs.

    Attributes:
        ON_SUCCESS: All needed jobs succeeded.
        ON_FAILURE_OR_MANUAL: A needed job failed or was cancelled, or an
            operator requested it.
    """

    ON_SUCCESS = "on_success"
    ON_FAILURE_OR_MANUAL = "on_failure_or_manual"


class PipelineJob(BaseModel):
    """One job in an environment pipeline.

    Attributes:
        name: Job name, unique within the pipeline.
        kind: Role of the job.
        needs: Names of jobs that must finish first.
        run_when: Condition on the needed jobs.
        steps: Steps in execution order.
        secrets: Names of secrets exposed to the job's steps.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    kind: JobKind
    needs: tuple[str, ...] = Field(default=())
    run_when: RunCondition = Field(default=RunCondition.ON_SUCCESS)
    steps: tuple[StepIntent, ...] = Field(..., min_length=1)
    secrets: tuple[str, ...] = Field(default=())


class PipelineTriggers(BaseModel):
    """Events that start an environment pipeline.

    Attributes:
        manual_dispatch: Operators can start the pipeline by hand.
        push_branches: Branches whose pushes start the pipeline.
        schedules: Cron expressions (UTC) that start the pipeline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manual_dispatch: bool = Field(default=True)
    push_branches: tuple[str, ...] = Field(default=())
    schedules: tuple[str, ...] = Field(default=())


class EnvironmentPipeline(BaseModel):
    """Ordered jobs plus run metadata for one environment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    environment: str = Field(..., min_length=1)
    jobs: tuple[PipelineJob, ...] = Field(..., min_length=1)
    triggers: PipelineTriggers = Field(default_factory=PipelineTriggers)
    permissions: ReadOnlyMapping[str, str] = Field(default_factory=empty_mapping)
    concurrency_group: str = Field(..., min_length=1)

    @property
    def job_kinds(self) -> tuple[JobKind, ...]:
        """Job kinds in execution order."""
        return tuple(job.kind for job in self.jobs)

    def job(self, kind: JobKind) -> PipelineJob | None:
        """Return the job of the given kind, if present."""
        for candidate in self.jobs:
            if candidate.kind is kind:
                return candidate
        return None


__all__ = [
    "Checkout",
    "EnvironmentPipeline",
    "HealthCheck",
    "JobKind",
    "ManualApprovalGate",
    "PipelineJob",
    "PipelineTriggers",
    "RunCommand",
    "RunCondition",
    "SetupRuntime",
    "StepIntent",
    "Wait",
]
