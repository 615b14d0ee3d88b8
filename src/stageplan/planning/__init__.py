"""Planners that derive each part of a deployment topology.

Every planner is a pure function of its inputs:

- resolve_strategy: rollout parameters per environment
- plan_approval_gate: manual approval gate per environment
- plan_rollback_policy: rollback triggers and strategy per environment
- plan_promotion_edges: ordered promotion chain between environments
- compose_environment_pipeline: renderer-neutral jobs per environment
"""

from __future__ import annotations

from stageplan.planning.approval import (
    DEFAULT_APPROVERS,
    plan_approval_gate,
    required_approvals,
    resolve_approvers,
)
from stageplan.planning.pipeline import compose_environment_pipeline, strategy_steps
from stageplan.planning.promotion import (
    PromotionPlan,
    plan_promotion_edges,
    promotion_conditions,
    promotion_order,
)
from stageplan.planning.rollback import plan_rollback_policy, rollback_triggers
from stageplan.planning.strategy import canary_schedule, parse_strategy_type, resolve_strategy
from stageplan.planning.validation import environment_warnings, validate_environments

__all__ = [
    "DEFAULT_APPROVERS",
    "PromotionPlan",
    "canary_schedule",
    "compose_environment_pipeline",
    "environment_warnings",
    "parse_strategy_type",
    "plan_approval_gate",
    "plan_promotion_edges",
    "plan_rollback_policy",
    "promotion_conditions",
    "promotion_order",
    "required_approvals",
    "resolve_approvers",
    "resolve_strategy",
    "rollback_triggers",
    "strategy_steps",
    "validate_environments",
]
