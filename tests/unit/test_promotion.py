"""Unit tests for promotion planning.

Tests cover:
- Ordering by tier rank with declaration order as tie-break
- Edge count (one edge per pair of adjacent distinct tiers)
- Conditions on edges into production and lower tiers
- Warnings for same-tier ties and skipped tiers
"""

from __future__ import annotations

import itertools

import pytest


def _envs(*specs: tuple[str, str]) -> list:
    from stageplan.schemas import Environment

    return [Environment(name=name, type=env_type) for name, env_type in specs]


class TestPromotionOrder:
    """Tests for promotion_order."""

    @pytest.mark.requirement("FR-005")
    def test_sorted_by_rank(self) -> None:
        """Test environments are ordered development, staging, production."""
        from stageplan.planning.promotion import promotion_order

        envs = _envs(("prod", "production"), ("dev", "development"), ("stg", "staging"))

        assert [e.name for e in promotion_order(envs)] == ["dev", "stg", "prod"]

    @pytest.mark.requirement("FR-005")
    def test_ties_keep_declaration_order(self) -> None:
        """Test environments of the same tier keep their input order."""
        from stageplan.planning.promotion import promotion_order

        envs = _envs(
            ("stg-b", "staging"),
            ("dev", "development"),
            ("stg-a", "staging"),
        )

        assert [e.name for e in promotion_order(envs)] == ["dev", "stg-b", "stg-a"]


class TestPlanPromotionEdges:
    """Tests for plan_promotion_edges."""

    @pytest.mark.requirement("FR-005")
    @pytest.mark.parametrize("count", [0, 1])
    def test_too_few_environments(self, count: int) -> None:
        """Test zero or one environment yields no edges."""
        from stageplan.planning.promotion import plan_promotion_edges

        envs = _envs(("dev", "development"))[:count]
        plan = plan_promotion_edges(envs)

        assert plan.edges == ()
        assert plan.warnings == ()

    @pytest.mark.requirement("FR-005")
    def test_edge_count_matches_distinct_tiers(self) -> None:
        """Test every combination of tiers yields k-1 edges that climb in rank."""
        from stageplan.planning.promotion import plan_promotion_edges
        from stageplan.schemas import EnvironmentType

        tiers = [t.value for t in EnvironmentType]
        for size in range(1, 5):
            for combo in itertools.product(tiers, repeat=size):
                envs = _envs(*((f"env-{i}", t) for i, t in enumerate(combo)))
                plan = plan_promotion_edges(envs)

                assert len(plan.edges) == max(0, len(set(combo)) - 1)
                ranks = {e.name: e.type.rank for e in envs}
                for edge in plan.edges:
                    assert ranks[edge.source] < ranks[edge.target]

    @pytest.mark.requirement("FR-005")
    def test_edge_into_production(self) -> None:
        """Test production edges add approval and soak, and never auto-promote."""
        from stageplan.planning.promotion import SOAK_REASON, plan_promotion_edges
        from stageplan.schemas import (
            HealthCheckCondition,
            ManualApprovalCondition,
            TestSuccessCondition,
            TimeDelayCondition,
        )

        plan = plan_promotion_edges(_envs(("stg", "staging"), ("prod", "production")))

        (edge,) = plan.edges
        assert (edge.source, edge.target) == ("stg", "prod")
        assert edge.auto_promote is False
        assert edge.rollback_on_failure is True

        health, tests, approval, delay = edge.conditions
        assert isinstance(health, HealthCheckCondition)
        assert (health.endpoint, health.expected_status) == ("/health", 200)
        assert (health.timeout_seconds, health.retries) == (30, 3)
        assert isinstance(tests, TestSuccessCondition)
        assert (tests.suite, tests.environment) == ("integration", "stg")
        assert isinstance(approval, ManualApprovalCondition)
        assert approval.approvers == ("team-leads", "devops-team", "security-team")
        assert approval.required_approvals == 2
        assert approval.timeout_minutes == 120
        assert isinstance(delay, TimeDelayCondition)
        assert delay.duration == "30m"
        assert delay.reason == SOAK_REASON

    @pytest.mark.requirement("FR-005")
    def test_edge_into_staging_auto_promotes(self) -> None:
        """Test non-production edges auto-promote on health and tests."""
        from stageplan.planning.promotion import plan_promotion_edges

        plan = plan_promotion_edges(_envs(("dev", "development"), ("stg", "staging")))

        (edge,) = plan.edges
        assert edge.auto_promote is True
        assert edge.condition_types == ("health_check", "test_success")

    @pytest.mark.requirement("FR-005")
    def test_options_shape_conditions(self) -> None:
        """Test plan options feed the health path, suite and soak time."""
        from stageplan.planning.promotion import plan_promotion_edges
        from stageplan.schemas import PlanOptions

        options = PlanOptions(
            health_endpoint="/ready",
            promotion_test_suite="e2e",
            soak_duration="1h",
            promotion_approval_timeout_minutes=30,
        )
        plan = plan_promotion_edges(
            _envs(("stg", "staging"), ("prod", "production")), options
        )

        health, tests, approval, delay = plan.edges[0].conditions
        assert health.endpoint == "/ready"
        assert tests.suite == "e2e"
        assert approval.timeout_minutes == 30
        assert delay.duration == "1h"

    @pytest.mark.requirement("FR-005")
    def test_same_tier_pair_warns_without_edge(self) -> None:
        """Test adjacent environments of one tier produce a warning, not an edge."""
        from stageplan.planning.promotion import plan_promotion_edges

        plan = plan_promotion_edges(
            _envs(("stg-a", "staging"), ("stg-b", "staging"), ("prod", "production"))
        )

        assert [(e.source, e.target) for e in plan.edges] == [("stg-b", "prod")]
        assert len(plan.warnings) == 1
        assert "stg-a" in plan.warnings[0]
        assert "stg-b" in plan.warnings[0]

    @pytest.mark.requirement("FR-005")
    def test_skipped_tier_warns(self) -> None:
        """Test promoting straight from development to production warns."""
        from stageplan.planning.promotion import plan_promotion_edges

        plan = plan_promotion_edges(_envs(("dev", "development"), ("prod", "production")))

        assert [(e.source, e.target) for e in plan.edges] == [("dev", "prod")]
        assert len(plan.warnings) == 1
        assert "skips staging" in plan.warnings[0]

    @pytest.mark.requirement("FR-005")
    def test_order_is_reported(self) -> None:
        """Test the plan reports environment names in promotion order."""
        from stageplan.planning.promotion import plan_promotion_edges

        plan = plan_promotion_edges(
            _envs(("prod", "production"), ("stg", "staging"), ("dev", "development"))
        )

        assert plan.order == ("dev", "stg", "prod")
