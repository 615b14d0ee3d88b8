"""Per-environment pipeline composition.

Turns the planned strategy, gate and rollback policy of one environment into
an EnvironmentPipeline of renderer-neutral jobs:

    pre-deploy -> [approval] -> deploy -> post-deploy -> [rollback]

Deployment actions are expressed as namespaced ``RunCommand`` identifiers
(``deploy:rolling``, ``canary:set-weight``, ``rollback:gradual``) with their
parameters in ``env``; renderers decide what each one runs.
"""

from __future__ import annotations

import structlog

from stageplan.planning.approval import required_approvals, resolve_approvers
from stageplan.providers import StepProvider
from stageplan.schemas.environment import (
    DetectionResult,
    Environment,
    EnvironmentType,
    PlanOptions,
)
from stageplan.schemas.promotion import ApprovalGate
from stageplan.schemas.rollback import RollbackPolicy
from stageplan.schemas.steps import (
    Checkout,
    EnvironmentPipeline,
    HealthCheck,
    JobKind,
    ManualApprovalGate,
    PipelineJob,
    PipelineTriggers,
    RunCommand,
    RunCondition,
    StepIntent,
    Wait,
)
from stageplan.schemas.strategy import (
    AnalysisConfig,
    AnalysisStep,
    BlueGreenConfig,
    CanaryConfig,
    DeploymentStrategy,
    Pause,
    RollingConfig,
    SetCanaryScale,
    SetWeight,
)

logger = structlog.get_logger(__name__)

READINESS_WAIT = "30s"
PLACEHOLDER_URL = "https://example.com"
PRODUCTION_SCHEDULE = "0 9 * * 1-5"

_PUSH_BRANCHES: dict[EnvironmentType, tuple[str, ...]] = {
    EnvironmentType.DEVELOPMENT: ("main", "develop"),
    EnvironmentType.STAGING: ("main",),
    EnvironmentType.PRODUCTION: (),
}

_BASE_PERMISSIONS: dict[str, str] = {
    "contents": "read",
    "deployments": "write",
    "id-token": "write",
    "issues": "write",
}


def job_name(kind: JobKind, environment: Environment) -> str:
    """Name of the job of the given kind for an environment."""
    prefix = {
        JobKind.PRE_DEPLOY: "pre-deploy",
        JobKind.APPROVAL: "approve",
        JobKind.DEPLOY: "deploy",
        JobKind.POST_DEPLOY_VALIDATE: "post-deploy",
        JobKind.ROLLBACK: "rollback",
    }[kind]
    return f"{prefix}-{environment.name}"


def health_endpoint_url(environment: Environment, options: PlanOptions) -> str:
    """URL probed by deploy-time health checks.

    ``HEALTH_ENDPOINT`` wins; otherwise ``DEPLOYMENT_URL`` (or a placeholder)
    joined with the configured health path.
    """
    explicit = environment.variables.get("HEALTH_ENDPOINT")
    if explicit:
        return explicit
    base = environment.variables.get("DEPLOYMENT_URL", PLACEHOLDER_URL)
    return f"{base.rstrip('/')}/{options.health_endpoint.lstrip('/')}"


def pipeline_triggers(environment: Environment) -> PipelineTriggers:
    """Events that start the pipeline of an environment."""
    return PipelineTriggers(
        manual_dispatch=True,
        push_branches=_PUSH_BRANCHES[environment.type],
        schedules=(PRODUCTION_SCHEDULE,) if environment.is_production else (),
    )


def pipeline_permissions(environment: Environment) -> dict[str, str]:
    """Token permissions the pipeline of an environment needs."""
    permissions = dict(_BASE_PERMISSIONS)
    if environment.is_production:
        permissions["checks"] = "write"
        permissions["statuses"] = "write"
    return permissions


def strategy_steps(
    environment: Environment,
    strategy: DeploymentStrategy,
    gate: ApprovalGate | None = None,
    options: PlanOptions | None = None,
) -> tuple[StepIntent, ...]:
    """Translate a resolved strategy into deploy-job steps.

    Args:
        environment: Environment being deployed.
        strategy: Resolved strategy parameters.
        gate: Environment approval gate, used for blue-green promotion approval.
        options: Plan options (approver overrides).

    Returns:
        Steps in execution order.
    """
    options = options or PlanOptions()
    if isinstance(strategy, RollingConfig):
        return _rolling_steps(environment, strategy)
    if isinstance(strategy, BlueGreenConfig):
        return _blue_green_steps(environment, strategy, gate, options)
    return _canary_steps(environment, strategy, options)


def _rolling_steps(environment: Environment, config: RollingConfig) -> tuple[StepIntent, ...]:
    return (
        RunCommand(
            name="Execute rolling deployment",
            command="deploy:rolling",
            env={
                "ENVIRONMENT": environment.name,
                "MAX_UNAVAILABLE": config.max_unavailable,
                "MAX_SURGE": config.max_surge,
                "PROGRESS_DEADLINE": str(config.progress_deadline_seconds),
            },
        ),
        RunCommand(
            name="Monitor rolling deployment progress",
            command="deploy:rolling-monitor",
            env={
                "ENVIRONMENT": environment.name,
                "PROGRESS_DEADLINE": str(config.progress_deadline_seconds),
            },
        ),
    )


def _analysis_env(analysis: AnalysisConfig) -> dict[str, str]:
    return {
        "TEMPLATES": ",".join(t.template_name for t in analysis.templates),
        "ARGS": ",".join(f"{a.name}={a.value}" for a in analysis.args),
    }


def _blue_green_steps(
    environment: Environment,
    config: BlueGreenConfig,
    gate: ApprovalGate | None,
    options: PlanOptions,
) -> tuple[StepIntent, ...]:
    steps: list[StepIntent] = [
        RunCommand(
            name="Deploy to green environment",
            command="deploy:blue-green-preview",
            env={
                "ENVIRONMENT": environment.name,
                "PREVIEW_REPLICAS": str(config.preview_replica_count),
            },
        )
    ]
    if config.pre_promotion_analysis is not None:
        steps.append(
            RunCommand(
                name="Run pre-promotion analysis",
                command="analysis:pre-promotion",
                env=_analysis_env(config.pre_promotion_analysis),
            )
        )
    if not config.auto_promotion_enabled:
        approvers = gate.approvers if gate else resolve_approvers(environment.type, options)
        needed = gate.required_approvals if gate else required_approvals(environment.type)
        steps.append(
            ManualApprovalGate(
                name="Approve promotion to blue environment",
                approvers=approvers,
                required_approvals=needed,
                instructions=f"Approve switching {environment.name} traffic to the new version",
            )
        )
    steps.append(
        RunCommand(
            name="Promote to blue environment",
            command="deploy:blue-green-promote",
            env={"ENVIRONMENT": environment.name},
        )
    )
    if config.post_promotion_analysis is not None:
        steps.append(
            RunCommand(
                name="Run post-promotion analysis",
                command="analysis:post-promotion",
                env=_analysis_env(config.post_promotion_analysis),
            )
        )
    steps.append(
        Wait(
            name="Wait before scaling down old version",
            duration=f"{config.scale_down_delay_seconds}s",
            reason="scale-down delay",
        )
    )
    steps.append(
        RunCommand(
            name="Scale down old version",
            command="deploy:blue-green-scale-down",
            env={"ENVIRONMENT": environment.name},
        )
    )
    return tuple(steps)


def _canary_steps(
    environment: Environment, config: CanaryConfig, options: PlanOptions
) -> tuple[StepIntent, ...]:
    init_env = {"ENVIRONMENT": environment.name, "MAX_UNAVAILABLE": config.max_unavailable}
    if config.traffic_routing is not None:
        init_env["TRAFFIC_ROUTER"] = config.traffic_routing.provider
    steps: list[StepIntent] = [
        RunCommand(
            name="Initialize canary deployment",
            command="canary:initialize",
            env=init_env,
        )
    ]

    current_weight: int | None = None
    for index, step in enumerate(config.steps, start=1):
        if isinstance(step, SetWeight):
            current_weight = step.weight
            steps.append(
                RunCommand(
                    name=f"Set canary weight to {step.weight}%",
                    command="canary:set-weight",
                    env={"WEIGHT": str(step.weight)},
                )
            )
        elif isinstance(step, Pause):
            if step.duration is not None:
                steps.append(
                    Wait(
                        name=f"Pause for {step.duration}",
                        duration=step.duration,
                        reason="canary observation",
                    )
                )
            elif step.until_approved:
                at = f"{current_weight}%" if current_weight is not None else "current"
                steps.append(
                    ManualApprovalGate(
                        name="Wait for manual approval",
                        approvers=resolve_approvers(environment.type, options),
                        required_approvals=1,
                        instructions=(
                            f"Please approve continuation of canary deployment at {at} traffic"
                        ),
                    )
                )
            # an indefinite pause is resumed by the rollout controller, not the pipeline
        elif isinstance(step, SetCanaryScale):
            scale_env: dict[str, str] = {
                "MATCH_TRAFFIC_WEIGHT": str(step.match_traffic_weight).lower()
            }
            if step.weight is not None:
                scale_env["WEIGHT"] = str(step.weight)
            if step.replicas is not None:
                scale_env["REPLICAS"] = str(step.replicas)
            steps.append(
                RunCommand(
                    name=f"Set canary scale (step {index})",
                    command="canary:set-scale",
                    env=scale_env,
                )
            )
        elif isinstance(step, AnalysisStep):
            steps.append(
                RunCommand(
                    name=f"Run canary analysis (step {index})",
                    command="canary:analysis",
                    env=_analysis_env(step.analysis),
                )
            )

    steps.append(
        RunCommand(
            name="Complete canary deployment",
            command="canary:complete",
            env={"ENVIRONMENT": environment.name},
        )
    )
    return tuple(steps)


def _pre_deploy_job(environment: Environment, strategy: DeploymentStrategy) -> PipelineJob:
    return PipelineJob(
        name=job_name(JobKind.PRE_DEPLOY, environment),
        kind=JobKind.PRE_DEPLOY,
        steps=(
            Checkout(),
            RunCommand(
                name="Validate deployment prerequisites",
                command="check:prerequisites",
                env={
                    "ENVIRONMENT": environment.name,
                    "DEPLOYMENT_STRATEGY": strategy.type,
                },
            ),
            RunCommand(
                name="Run pre-deployment tests",
                command="test:pre-deploy",
                continue_on_error=True,
            ),
        ),
    )


def _approval_job(environment: Environment, gate: ApprovalGate) -> PipelineJob:
    return PipelineJob(
        name=job_name(JobKind.APPROVAL, environment),
        kind=JobKind.APPROVAL,
        needs=(job_name(JobKind.PRE_DEPLOY, environment),),
        steps=(
            ManualApprovalGate(
                name="Wait for approval",
                approvers=gate.approvers,
                required_approvals=gate.required_approvals,
                timeout_minutes=gate.timeout_minutes,
                instructions=gate.instructions,
            ),
        ),
    )


def _deploy_job(
    environment: Environment,
    strategy: DeploymentStrategy,
    gate: ApprovalGate | None,
    provider: StepProvider,
    detection: DetectionResult,
    options: PlanOptions,
) -> PipelineJob:
    needs = [job_name(JobKind.PRE_DEPLOY, environment)]
    if gate is not None:
        needs.append(job_name(JobKind.APPROVAL, environment))

    steps: list[StepIntent] = [Checkout()]
    steps.extend(provider.deploy_steps(environment, detection))
    steps.extend(strategy_steps(environment, strategy, gate, options))
    steps.extend(
        (
            Wait(
                name="Wait for deployment to be ready",
                duration=READINESS_WAIT,
                reason="deployment readiness",
            ),
            HealthCheck(endpoint=health_endpoint_url(environment, options)),
            RunCommand(
                name="Run smoke tests",
                command="test:smoke",
                continue_on_error=True,
            ),
        )
    )
    return PipelineJob(
        name=job_name(JobKind.DEPLOY, environment),
        kind=JobKind.DEPLOY,
        needs=tuple(needs),
        steps=tuple(steps),
        secrets=environment.secrets,
    )


def _post_deploy_job(environment: Environment, options: PlanOptions) -> PipelineJob:
    return PipelineJob(
        name=job_name(JobKind.POST_DEPLOY_VALIDATE, environment),
        kind=JobKind.POST_DEPLOY_VALIDATE,
        needs=(job_name(JobKind.DEPLOY, environment),),
        steps=(
            RunCommand(
                name="Validate deployment success",
                command="validate:deployment",
                env={"ENVIRONMENT": environment.name},
            ),
            RunCommand(
                name="Run integration tests",
                command=f"test:{options.promotion_test_suite}",
                continue_on_error=not environment.is_production,
            ),
            RunCommand(
                name="Update deployment status",
                command="status:update",
                env={"ENVIRONMENT": environment.name},
            ),
        ),
    )


def _rollback_job(
    environment: Environment, policy: RollbackPolicy, options: PlanOptions
) -> PipelineJob:
    return PipelineJob(
        name=job_name(JobKind.ROLLBACK, environment),
        kind=JobKind.ROLLBACK,
        needs=(
            job_name(JobKind.DEPLOY, environment),
            job_name(JobKind.POST_DEPLOY_VALIDATE, environment),
        ),
        run_when=RunCondition.ON_FAILURE_OR_MANUAL,
        secrets=environment.secrets,
        steps=(
            RunCommand(
                name="Detect rollback trigger",
                command="rollback:detect",
                env={
                    "ENVIRONMENT": environment.name,
                    "ROLLBACK_STRATEGY": policy.strategy.value,
                    "MAX_RETRIES": str(policy.max_retries),
                },
            ),
            RunCommand(
                name="Execute rollback",
                command=f"rollback:{policy.strategy.value}",
                env={"ENVIRONMENT": environment.name},
            ),
            HealthCheck(
                name="Verify rollback success",
                endpoint=health_endpoint_url(environment, options),
            ),
            RunCommand(
                name="Notify rollback completion",
                command="notify:rollback",
                env={"ENVIRONMENT": environment.name},
            ),
        ),
    )


def compose_environment_pipeline(
    environment: Environment,
    strategy: DeploymentStrategy,
    gate: ApprovalGate | None,
    policy: RollbackPolicy | None,
    provider: StepProvider,
    detection: DetectionResult | None = None,
    options: PlanOptions | None = None,
) -> EnvironmentPipeline:
    """Compose the pipeline for one environment.

    Args:
        environment: Environment being planned.
        strategy: Its resolved deployment strategy.
        gate: Its approval gate, if any. Adds an approval job.
        policy: Its rollback policy, if any. Adds a rollback job.
        provider: Source of language-specific deploy steps.
        detection: Detected project characteristics.
        options: Plan options.

    Returns:
        EnvironmentPipeline with jobs in execution order.
    """
    detection = detection or DetectionResult()
    options = options or PlanOptions()

    jobs = [_pre_deploy_job(environment, strategy)]
    if gate is not None:
        jobs.append(_approval_job(environment, gate))
    jobs.append(_deploy_job(environment, strategy, gate, provider, detection, options))
    jobs.append(_post_deploy_job(environment, options))
    if policy is not None:
        jobs.append(_rollback_job(environment, policy, options))

    pipeline = EnvironmentPipeline(
        environment=environment.name,
        jobs=tuple(jobs),
        triggers=pipeline_triggers(environment),
        permissions=pipeline_permissions(environment),
        concurrency_group=f"deploy-{environment.name}",
    )
    logger.debug(
        "pipeline_composed",
        environment=environment.name,
        provider=provider.name,
        jobs=[job.name for job in jobs],
    )
    return pipeline


__all__ = [
    "PLACEHOLDER_URL",
    "PRODUCTION_SCHEDULE",
    "READINESS_WAIT",
    "compose_environment_pipeline",
    "health_endpoint_url",
    "job_name",
    "pipeline_permissions",
    "pipeline_triggers",
    "strategy_steps",
]
