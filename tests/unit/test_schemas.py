"""Unit tests for the stageplan schemas.

Tests cover:
- Duration strings and duration_to_seconds
- Environment name normalization and camelCase aliases
- Canary weight monotonicity and pause exclusivity
- Traffic routing provider selection
- PlanOptions approver overrides
- Promotion edge and approval gate constraints
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError


class TestDuration:
    """Tests for duration strings."""

    @pytest.mark.requirement("FR-020")
    @pytest.mark.parametrize(
        ("duration", "seconds"),
        [("30s", 30), ("5m", 300), ("10m", 600), ("1h", 3600), ("0s", 0)],
    )
    def test_duration_to_seconds(self, duration: str, seconds: int) -> None:
        """Test duration strings convert to whole seconds."""
        from stageplan.schemas import duration_to_seconds

        assert duration_to_seconds(duration) == seconds

    @pytest.mark.requirement("FR-020")
    @pytest.mark.parametrize(
        "duration", ["", "5", "m5", "5 m", "5d", "-5m", "1.5h", "5m\n", " 5m"]
    )
    def test_invalid_duration_raises_value_error(self, duration: str) -> None:
        """Test malformed durations are rejected."""
        from stageplan.schemas import duration_to_seconds

        with pytest.raises(ValueError, match="Invalid duration"):
            duration_to_seconds(duration)

    @pytest.mark.requirement("FR-020")
    def test_duration_field_validates_pattern(self) -> None:
        """Test Duration-typed fields reject malformed values."""
        from stageplan.schemas import Wait

        assert Wait(name="Soak", duration="5m").duration == "5m"
        with pytest.raises(ValidationError):
            Wait(name="Soak", duration="five minutes")

    @pytest.mark.requirement("FR-020")
    def test_field_and_converter_agree_on_trailing_newline(self) -> None:
        """Test a trailing newline is rejected by both the field and the converter."""
        from stageplan.schemas import Wait, duration_to_seconds

        with pytest.raises(ValidationError):
            Wait(name="Soak", duration="5m\n")
        with pytest.raises(ValueError, match="Invalid duration"):
            duration_to_seconds("5m\n")


class TestEnvironment:
    """Tests for the Environment model."""

    @pytest.mark.requirement("FR-001")
    def test_defaults(self) -> None:
        """Test optional fields default to a plain rolling environment."""
        from stageplan.schemas import Environment, EnvironmentType

        env = Environment(name="dev", type="development")

        assert env.type is EnvironmentType.DEVELOPMENT
        assert env.deployment_strategy == "rolling"
        assert env.approval_required is False
        assert env.rollback_enabled is False
        assert env.variables == {}
        assert env.secrets == ()
        assert env.analysis is False
        assert env.traffic_routing is None

    @pytest.mark.requirement("FR-001")
    def test_variables_are_read_only(self) -> None:
        """Test variables cannot be changed and do not alias the input dict."""
        from stageplan.schemas import Environment

        source = {"DEPLOYMENT_URL": "https://dev.example.com"}
        env = Environment(name="dev", type="development", variables=source)

        source["DEPLOYMENT_URL"] = "https://other.example.com"
        with pytest.raises(TypeError):
            env.variables["DEPLOYMENT_URL"] = "https://other.example.com"  # type: ignore[index]

        assert env.variables == {"DEPLOYMENT_URL": "https://dev.example.com"}
        assert env.model_dump()["variables"] == {"DEPLOYMENT_URL": "https://dev.example.com"}

    @pytest.mark.requirement("FR-001")
    def test_camel_case_aliases(self) -> None:
        """Test camelCase keys are accepted alongside snake_case names."""
        from stageplan.schemas import Environment

        env = Environment.model_validate(
            {
                "name": "prod",
                "type": "production",
                "deploymentStrategy": "canary",
                "approvalRequired": True,
                "rollbackEnabled": True,
            }
        )

        assert env.deployment_strategy == "canary"
        assert env.approval_required is True
        assert env.rollback_enabled is True
        assert env.is_production

    @pytest.mark.requirement("FR-001")
    def test_name_is_stripped(self) -> None:
        """Test surrounding whitespace is removed from names."""
        from stageplan.schemas import Environment

        assert Environment(name="  staging ", type="staging").name == "staging"

    @pytest.mark.requirement("FR-001")
    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name: str) -> None:
        """Test empty or blank names are rejected."""
        from stageplan.schemas import Environment

        with pytest.raises(ValidationError, match="must not be empty"):
            Environment(name=name, type="development")

    @pytest.mark.requirement("FR-001")
    def test_unknown_type_rejected(self) -> None:
        """Test environment types outside the three tiers are rejected."""
        from stageplan.schemas import Environment

        with pytest.raises(ValidationError):
            Environment(name="qa", type="qa")

    @pytest.mark.requirement("FR-001")
    def test_unknown_field_rejected(self) -> None:
        """Test extra fields are forbidden."""
        from stageplan.schemas import Environment

        with pytest.raises(ValidationError):
            Environment.model_validate({"name": "dev", "type": "development", "region": "eu"})

    @pytest.mark.requirement("FR-001")
    def test_environment_is_frozen(self) -> None:
        """Test environments are immutable."""
        from stageplan.schemas import Environment

        env = Environment(name="dev", type="development")
        with pytest.raises(ValidationError):
            env.name = "other"  # type: ignore[misc]

    @pytest.mark.requirement("FR-001")
    def test_type_ranks(self) -> None:
        """Test tier ranks order development < staging < production."""
        from stageplan.schemas import EnvironmentType

        assert [t.rank for t in EnvironmentType] == [0, 1, 2]


class TestCanaryConfig:
    """Tests for canary schedule validation."""

    @pytest.mark.requirement("FR-004")
    def test_non_decreasing_weights_accepted(self) -> None:
        """Test repeated and increasing weights are valid."""
        from stageplan.schemas import CanaryConfig, Pause, SetWeight

        config = CanaryConfig(
            steps=(
                SetWeight(weight=10),
                Pause(duration="1m"),
                SetWeight(weight=10),
                SetWeight(weight=50),
            )
        )

        assert config.weights == (10, 10, 50)

    @pytest.mark.requirement("FR-004")
    def test_decreasing_weights_rejected(self) -> None:
        """Test a schedule that shifts traffic back is rejected."""
        from stageplan.schemas import CanaryConfig, SetWeight

        with pytest.raises(ValidationError, match="non-decreasing"):
            CanaryConfig(steps=(SetWeight(weight=40), SetWeight(weight=20)))

    @pytest.mark.requirement("FR-004")
    @pytest.mark.parametrize("weight", [-1, 101])
    def test_weight_out_of_range_rejected(self, weight: int) -> None:
        """Test weights outside 0..100 are rejected."""
        from stageplan.schemas import SetWeight

        with pytest.raises(ValidationError):
            SetWeight(weight=weight)

    @pytest.mark.requirement("FR-004")
    def test_pause_cannot_wait_for_both(self) -> None:
        """Test a pause sets a duration or waits for approval, not both."""
        from stageplan.schemas import Pause

        with pytest.raises(ValidationError, match="both"):
            Pause(duration="5m", until_approved=True)

    @pytest.mark.requirement("FR-004")
    def test_steps_validate_from_tagged_mappings(self) -> None:
        """Test canary steps deserialize through their type tag."""
        from stageplan.schemas import AnalysisStep, CanaryConfig, Pause, SetWeight

        config = CanaryConfig.model_validate(
            {
                "steps": [
                    {"type": "set_weight", "weight": 25},
                    {"type": "pause", "until_approved": True},
                    {
                        "type": "analysis",
                        "analysis": {"templates": [{"template_name": "success-rate"}]},
                    },
                ]
            }
        )

        assert [type(s) for s in config.steps] == [SetWeight, Pause, AnalysisStep]


class TestTrafficRouting:
    """Tests for traffic routing configuration."""

    @pytest.mark.requirement("FR-004")
    def test_single_provider(self) -> None:
        """Test the configured provider is reported."""
        from stageplan.schemas import AlbRouting, TrafficRoutingConfig

        routing = TrafficRoutingConfig(alb=AlbRouting(ingress="web", service_port=443))

        assert routing.provider == "alb"

    @pytest.mark.requirement("FR-004")
    def test_no_provider_rejected(self) -> None:
        """Test an empty routing block is rejected."""
        from stageplan.schemas import TrafficRoutingConfig

        with pytest.raises(ValidationError, match="exactly one"):
            TrafficRoutingConfig()

    @pytest.mark.requirement("FR-004")
    def test_two_providers_rejected(self) -> None:
        """Test configuring two providers is rejected."""
        from stageplan.schemas import IstioRouting, NginxRouting, TrafficRoutingConfig

        with pytest.raises(ValidationError, match="exactly one"):
            TrafficRoutingConfig(
                istio=IstioRouting(virtual_service="web"),
                nginx=NginxRouting(stable_ingress="web"),
            )


class TestPlanOptions:
    """Tests for global plan options."""

    @pytest.mark.requirement("FR-021")
    def test_defaults(self) -> None:
        """Test default option values."""
        from stageplan.schemas import PlanOptions

        options = PlanOptions()

        assert options.approvers == {}
        assert options.approval_timeout_minutes == 60
        assert options.promotion_approval_timeout_minutes == 120
        assert options.health_endpoint == "/health"
        assert options.soak_duration == "30m"
        assert options.promotion_test_suite == "integration"

    @pytest.mark.requirement("FR-021")
    def test_empty_approver_override_rejected(self) -> None:
        """Test an override must name at least one approver."""
        from stageplan.schemas import PlanOptions

        with pytest.raises(ValidationError, match="must not be empty"):
            PlanOptions(approvers={"production": []})

    @pytest.mark.requirement("FR-021")
    def test_duplicate_approver_override_rejected(self) -> None:
        """Test an override must not repeat approvers."""
        from stageplan.schemas import PlanOptions

        with pytest.raises(ValidationError, match="duplicates"):
            PlanOptions(approvers={"staging": ["qa-team", "qa-team"]})

    @pytest.mark.requirement("FR-021")
    def test_invalid_soak_duration_rejected(self) -> None:
        """Test the soak duration must be a duration string."""
        from stageplan.schemas import PlanOptions

        with pytest.raises(ValidationError):
            PlanOptions(soak_duration="half an hour")


class TestPromotionSchemas:
    """Tests for promotion edges and approval gates."""

    @pytest.mark.requirement("FR-005")
    def test_edge_cannot_loop(self) -> None:
        """Test an edge from an environment to itself is rejected."""
        from stageplan.schemas import PromotionEdge

        with pytest.raises(ValidationError, match="cannot loop"):
            PromotionEdge(source="dev", target="dev")

    @pytest.mark.requirement("FR-003")
    def test_gate_requires_approvers(self) -> None:
        """Test a gate needs at least one approver."""
        from stageplan.schemas import ApprovalGate

        with pytest.raises(ValidationError):
            ApprovalGate(environment="prod", approvers=(), required_approvals=2)

    @pytest.mark.requirement("FR-003")
    def test_gate_rejects_duplicate_approvers(self) -> None:
        """Test gate approvers must be unique."""
        from stageplan.schemas import ApprovalGate

        with pytest.raises(ValidationError, match="unique"):
            ApprovalGate(environment="prod", approvers=("sre", "sre"), required_approvals=1)

    @pytest.mark.requirement("FR-005")
    def test_conditions_validate_from_tagged_mappings(self) -> None:
        """Test promotion conditions deserialize through their type tag."""
        from stageplan.schemas import (
            HealthCheckCondition,
            PromotionEdge,
            TimeDelayCondition,
        )

        edge = PromotionEdge.model_validate(
            {
                "source": "staging",
                "target": "prod",
                "conditions": [
                    {"type": "health_check", "endpoint": "/health"},
                    {"type": "time_delay", "duration": "30m", "reason": "soak"},
                ],
            }
        )

        assert isinstance(edge.conditions[0], HealthCheckCondition)
        assert isinstance(edge.conditions[1], TimeDelayCondition)
        assert edge.condition_types == ("health_check", "time_delay")
