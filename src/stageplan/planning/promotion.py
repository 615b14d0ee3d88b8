"""Promotion pipeline planning.

Environments are ordered by tier rank (development < staging < production).
Environments of the same tier keep their declaration order; this secondary
key is a deliberate default so that plans are reproducible. Each adjacent
pair of environments with distinct ranks gets exactly one promotion edge, so
the edges always form a chain (and therefore a DAG) and their number is one
less than the number of distinct tiers present.

Every edge checks the target's health and requires the source's integration
suite to have passed. Edges into production additionally wait for a manual
approval and a soak period, and never auto-promote.

Example:
    >>> from stageplan.schemas import Environment
    >>> plan = plan_promotion_edges([
    ...     Environment(name="prod", type="production"),
    ...     Environment(name="dev", type="development"),
    ... ])
    >>> [(e.source, e.target) for e in plan.edges]
    [('dev', 'prod')]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from stageplan.planning.approval import PRODUCTION_REQUIRED_APPROVALS, resolve_approvers
from stageplan.schemas.environment import Environment, EnvironmentType, PlanOptions
from stageplan.schemas.promotion import (
    HealthCheckCondition,
    ManualApprovalCondition,
    PromotionCondition,
    PromotionEdge,
    TestSuccessCondition,
    TimeDelayCondition,
)

logger = structlog.get_logger(__name__)

SOAK_REASON = "soak time before production deployment"


@dataclass(frozen=True)
class PromotionPlan:
    """Result of promotion planning.

    Attributes:
        order: Environment names in promotion order.
        edges: Promotion edges in promotion order.
        warnings: Advisory messages (same-tier ties, skipped tiers).
    """

    order: tuple[str, ...] = ()
    edges: tuple[PromotionEdge, ...] = ()
    warnings: tuple[str, ...] = ()


def promotion_order(environments: Sequence[Environment]) -> list[Environment]:
    """Sort environments by tier rank, keeping declaration order within a tier.

    Args:
        environments: Environments in declaration order.

    Returns:
        New list in promotion order.
    """
    indexed = sorted(
        enumerate(environments),
        key=lambda item: (item[1].type.rank, item[0]),
    )
    return [env for _, env in indexed]


def promotion_conditions(
    source: Environment,
    target: Environment,
    options: PlanOptions | None = None,
) -> tuple[PromotionCondition, ...]:
    """Build the ordered conditions guarding promotion from source to target."""
    options = options or PlanOptions()
    conditions: list[PromotionCondition] = [
        HealthCheckCondition(
            endpoint=options.health_endpoint,
            expected_status=200,
            timeout_seconds=30,
            retries=3,
        ),
        TestSuccessCondition(
            suite=options.promotion_test_suite,
            environment=source.name,
        ),
    ]
    if target.is_production:
        conditions.append(
            ManualApprovalCondition(
                approvers=resolve_approvers(target.type, options),
                required_approvals=PRODUCTION_REQUIRED_APPROVALS,
                timeout_minutes=options.promotion_approval_timeout_minutes,
            )
        )
        conditions.append(
            TimeDelayCondition(duration=options.soak_duration, reason=SOAK_REASON)
        )
    return tuple(conditions)


def plan_promotion_edges(
    environments: Sequence[Environment],
    options: PlanOptions | None = None,
) -> PromotionPlan:
    """Plan the promotion edges between environments.

    Args:
        environments: Environments in declaration order. Names are assumed
            to be unique (validated by the topology builder).
        options: Plan options.

    Returns:
        PromotionPlan with order, edges and warnings. Zero or one environment,
        or environments that all share a tier, yield no edges.
    """
    ordered = promotion_order(environments)
    edges: list[PromotionEdge] = []
    warnings: list[str] = []

    for source, target in zip(ordered, ordered[1:]):
        if source.type.rank == target.type.rank:
            warnings.append(
                f"Environments '{source.name}' and '{target.name}' share type "
                f"{source.type.value}; no promotion edge between them "
                "(ordered by declaration)"
            )
            continue

        if target.type.rank - source.type.rank > 1:
            skipped = [
                t.value
                for t in EnvironmentType
                if source.type.rank < t.rank < target.type.rank
            ]
            warnings.append(
                f"Promotion from '{source.name}' ({source.type.value}) to "
                f"'{target.name}' ({target.type.value}) skips {', '.join(skipped)}"
            )

        edges.append(
            PromotionEdge(
                source=source.name,
                target=target.name,
                conditions=promotion_conditions(source, target, options),
                auto_promote=not target.is_production,
                rollback_on_failure=True,
            )
        )

    logger.debug(
        "promotion_edges_planned",
        order=[env.name for env in ordered],
        edge_count=len(edges),
    )
    return PromotionPlan(
        order=tuple(env.name for env in ordered),
        edges=tuple(edges),
        warnings=tuple(warnings),
    )


__all__ = [
    "SOAK_REASON",
    "PromotionPlan",
    "plan_promotion_edges",
    "promotion_conditions",
    "promotion_order",
]
