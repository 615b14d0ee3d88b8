"""Deployment topology builder.

Runs the planners in stages and assembles their results into one immutable
Topology:

1. VALIDATE - Coerce and check environment input
2. STRATEGY - Resolve deployment strategy parameters
3. GATES - Plan approval gates
4. ROLLBACK - Plan rollback policies
5. PROMOTION - Order environments and plan promotion edges
6. PIPELINES - Compose per-environment pipelines

Each stage runs in its own OpenTelemetry span under ``stageplan.build_topology``.
The first fatal error aborts the build; no partial Topology is returned.
Warnings collected before the failure are logged and attached to the
raised error as ``warnings``.

Example:
    >>> from stageplan.builder import build_topology
    >>> topology = build_topology([
    ...     {"name": "dev", "type": "development"},
    ...     {"name": "prod", "type": "production", "rollbackEnabled": True},
    ... ])
    >>> [(e.source, e.target) for e in topology.promotion_edges]
    [('dev', 'prod')]
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from enum import Enum

import structlog

from stageplan.errors import StageplanError
from stageplan.planning.approval import plan_approval_gate
from stageplan.planning.pipeline import compose_environment_pipeline
from stageplan.planning.promotion import plan_promotion_edges
from stageplan.planning.rollback import plan_rollback_policy
from stageplan.planning.strategy import resolve_strategy
from stageplan.planning.validation import (
    EnvironmentInput,
    environment_warnings,
    validate_environments,
)
from stageplan.providers import GenericStepProvider, StepProvider
from stageplan.schemas.environment import DetectionResult, PlanOptions
from stageplan.schemas.promotion import ApprovalGate
from stageplan.schemas.rollback import RollbackPolicy
from stageplan.schemas.topology import Topology
from stageplan.telemetry.tracing import create_span

logger = structlog.get_logger(__name__)


class BuildStage(str, Enum):
    """Stages of topology construction, in execution order."""

    VALIDATE = "validate"
    STRATEGY = "strategy"
    GATES = "gates"
    ROLLBACK = "rollback"
    PROMOTION = "promotion"
    PIPELINES = "pipelines"


class DeploymentTopologyBuilder:
    """Builds a Topology from a list of environments.

    The builder holds configuration only; ``build`` is pure and may be called
    any number of times, from any number of threads.

    Args:
        options: Global plan options. Defaults to PlanOptions().
        step_provider: Source of language-specific deploy steps.
            Defaults to GenericStepProvider().

    Example:
        >>> builder = DeploymentTopologyBuilder()
        >>> topology = builder.build([{"name": "dev", "type": "development"}])
        >>> topology.promotion_order
        ('dev',)
    """

    def __init__(
        self,
        options: PlanOptions | None = None,
        step_provider: StepProvider | None = None,
    ) -> None:
        self.options = options or PlanOptions()
        self.step_provider = step_provider or GenericStepProvider()

    def build(
        self,
        environments: Sequence[EnvironmentInput],
        detection: DetectionResult | None = None,
    ) -> Topology:
        """Build the deployment topology.

        Args:
            environments: Environments (or mappings of environment fields)
                in declaration order.
            detection: Detected project characteristics for the step provider.

        Returns:
            The complete Topology.

        Raises:
            ConfigurationError: If an environment is structurally invalid.
            StrategyResolutionError: If an environment requests an unknown
                deployment strategy.
        """
        detection = detection or DetectionResult()
        log = logger.bind(step_provider=self.step_provider.name)
        build_start = time.perf_counter()

        with create_span(
            "stageplan.build_topology",
            attributes={"stageplan.environment_count": len(environments)},
        ) as build_span:
            log.info("topology_build_start", environment_count=len(environments))

            warnings: list[str] = []
            try:
                topology = self._run_stages(environments, detection, warnings)
            except StageplanError as e:
                e.warnings = tuple(warnings)
                for message in warnings:
                    log.warning("topology_warning", message=message)
                log.error(
                    "topology_build_failed",
                    error_type=type(e).__name__,
                    warning_count=len(warnings),
                )
                raise

            for message in topology.warnings:
                log.warning("topology_warning", message=message)

            build_span.set_attribute("stageplan.warning_count", len(topology.warnings))
            duration_ms = (time.perf_counter() - build_start) * 1000
            log.info(
                "topology_build_complete",
                environment_count=len(topology.environments),
                gate_count=len(topology.gates),
                edge_count=len(topology.promotion_edges),
                rollback_policy_count=len(topology.rollback_policies),
                warning_count=len(topology.warnings),
                duration_ms=round(duration_ms, 2),
            )
            return topology

    def _run_stages(
        self,
        environments: Sequence[EnvironmentInput],
        detection: DetectionResult,
        warnings: list[str],
    ) -> Topology:
        """Run every build stage, appending advisory messages to ``warnings``."""
        with create_span(
            "stageplan.validate",
            attributes={"stageplan.stage": BuildStage.VALIDATE.value},
        ):
            envs = validate_environments(environments)
            warnings.extend(environment_warnings(envs))

        with create_span(
            "stageplan.resolve_strategies",
            attributes={"stageplan.stage": BuildStage.STRATEGY.value},
        ):
            strategies = {env.name: resolve_strategy(env) for env in envs}

        with create_span(
            "stageplan.plan_gates",
            attributes={"stageplan.stage": BuildStage.GATES.value},
        ):
            gates: dict[str, ApprovalGate] = {}
            for env in envs:
                gate = plan_approval_gate(env, self.options)
                if gate is not None:
                    gates[env.name] = gate

        with create_span(
            "stageplan.plan_rollback",
            attributes={"stageplan.stage": BuildStage.ROLLBACK.value},
        ):
            policies: dict[str, RollbackPolicy] = {}
            for env in envs:
                policy = plan_rollback_policy(env)
                if policy is not None:
                    policies[env.name] = policy

        with create_span(
            "stageplan.plan_promotion",
            attributes={"stageplan.stage": BuildStage.PROMOTION.value},
        ) as promotion_span:
            promotion = plan_promotion_edges(envs, self.options)
            warnings.extend(promotion.warnings)
            promotion_span.set_attribute(
                "stageplan.edge_count", len(promotion.edges)
            )

        with create_span(
            "stageplan.compose_pipelines",
            attributes={"stageplan.stage": BuildStage.PIPELINES.value},
        ):
            pipelines = {
                env.name: compose_environment_pipeline(
                    env,
                    strategies[env.name],
                    gates.get(env.name),
                    policies.get(env.name),
                    self.step_provider,
                    detection,
                    self.options,
                )
                for env in envs
            }

        return Topology(
            environments=envs,
            promotion_order=promotion.order,
            strategies=strategies,
            gates=gates,
            promotion_edges=promotion.edges,
            rollback_policies=policies,
            pipelines=pipelines,
            warnings=tuple(warnings),
        )


def build_topology(
    environments: Sequence[EnvironmentInput],
    detection: DetectionResult | None = None,
    options: PlanOptions | None = None,
    step_provider: StepProvider | None = None,
) -> Topology:
    """Build a Topology with a one-off DeploymentTopologyBuilder.

    See DeploymentTopologyBuilder.build for arguments and errors.
    """
    builder = DeploymentTopologyBuilder(options=options, step_provider=step_provider)
    return builder.build(environments, detection)


__all__ = ["BuildStage", "DeploymentTopologyBuilder", "build_topology"]
