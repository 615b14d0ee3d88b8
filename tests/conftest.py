"""Shared test configuration for stageplan.

Registers the requirement marker and provides environment fixtures for the
three canonical topologies used across the suite.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
import structlog


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test with requirement ID for traceability",
    )


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore default structlog configuration after each test.

    The CLI configures structlog to write to the stderr stream that is
    current at the time; CliRunner closes that stream after the invocation.
    """
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def reset_stageplan_tracer() -> Iterator[None]:
    """Drop any tracer a test installed."""
    yield
    from stageplan.telemetry import reset_tracer

    reset_tracer()


@pytest.fixture
def three_tier_environments() -> list[dict[str, Any]]:
    """Development, staging and production with rollback everywhere.

    Staging requests approval and blue-green, production uses canary.
    """
    return [
        {"name": "dev", "type": "development", "rollbackEnabled": True},
        {
            "name": "staging",
            "type": "staging",
            "deploymentStrategy": "blue-green",
            "approvalRequired": True,
            "rollbackEnabled": True,
        },
        {
            "name": "prod",
            "type": "production",
            "deploymentStrategy": "canary",
            "approvalRequired": True,
            "rollbackEnabled": True,
            "variables": {"DEPLOYMENT_URL": "https://prod.example.com"},
        },
    ]


@pytest.fixture
def plan_file_content() -> str:
    """A complete plan file."""
    return """\
options:
  soak_duration: 1h
  approvers:
    production: [release-managers, sre]
detection:
  languages: [python]
environments:
  - name: dev
    type: development
  - name: staging
    type: staging
    deploymentStrategy: blue-green
    rollbackEnabled: true
  - name: prod
    type: production
    deploymentStrategy: canary
    rollbackEnabled: true
    variables:
      DEPLOYMENT_URL: https://prod.example.com
"""
