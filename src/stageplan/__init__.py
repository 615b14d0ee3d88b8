"""stageplan: multi-environment deployment topology planner.

Given a list of target environments, stageplan derives one deterministic
deployment topology: strategy parameters, approval gates, an ordered
promotion chain, rollback policies and renderer-neutral pipelines.

Example:
    >>> from stageplan import build_topology
    >>> topology = build_topology([
    ...     {"name": "dev", "type": "development"},
    ...     {"name": "staging", "type": "staging", "approvalRequired": True},
    ...     {"name": "prod", "type": "production", "rollbackEnabled": True},
    ... ])
    >>> topology.promotion_order
    ('dev', 'staging', 'prod')
"""

from __future__ import annotations

__version__ = "0.1.0"

from stageplan.builder import DeploymentTopologyBuilder, build_topology
from stageplan.config import PlanRequest, load_plan_request
from stageplan.errors import (
    ConfigurationError,
    PlanFileError,
    StageplanError,
    StrategyResolutionError,
)
from stageplan.providers import GenericStepProvider, Renderer, StepProvider
from stageplan.schemas import (
    DetectionResult,
    Environment,
    EnvironmentType,
    PlanOptions,
    Topology,
)

__all__ = [
    "ConfigurationError",
    "DeploymentTopologyBuilder",
    "DetectionResult",
    "Environment",
    "EnvironmentType",
    "GenericStepProvider",
    "PlanFileError",
    "PlanOptions",
    "PlanRequest",
    "Renderer",
    "StageplanError",
    "StepProvider",
    "StrategyResolutionError",
    "Topology",
    "__version__",
    "load_plan_request",
    "build_topology",
]
