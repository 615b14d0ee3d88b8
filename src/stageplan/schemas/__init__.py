"""Schema definitions for stageplan.

Pydantic v2 models for the inputs and the output of topology planning.

Input Models:
    Environment: One named deployment target
    EnvironmentType: development / staging / production
    DeploymentStrategyType: rolling / blue-green / canary
    DetectionResult: Project detection summary for step providers
    PlanOptions: Global planning options

Output Models:
    Topology: The complete deployment plan
    DeploymentStrategy: RollingConfig | BlueGreenConfig | CanaryConfig
    ApprovalGate, PromotionEdge, PromotionCondition
    RollbackPolicy, RollbackTrigger
    EnvironmentPipeline, PipelineJob, StepIntent

Example:
    >>> from stageplan.schemas import Environment
    >>> import yaml
    >>> with open("plan.yaml") as f:
    ...     data = yaml.safe_load(f)
    >>> envs = [Environment.model_validate(e) for e in data["environments"]]
"""

from __future__ import annotations

from stageplan.schemas.duration import Duration, duration_to_seconds
from stageplan.schemas.environment import (
    DeploymentStrategyType,
    DetectionResult,
    Environment,
    EnvironmentType,
    PlanOptions,
)
from stageplan.schemas.promotion import (
    ApprovalGate,
    HealthCheckCondition,
    ManualApprovalCondition,
    PromotionCondition,
    PromotionEdge,
    TestSuccessCondition,
    TimeDelayCondition,
)
from stageplan.schemas.rollback import (
    ErrorRateThresholdTrigger,
    HealthCheckFailureTrigger,
    ManualTrigger,
    RollbackPolicy,
    RollbackStrategy,
    RollbackTrigger,
)
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
    SetupRuntime,
    StepIntent,
    Wait,
)
from stageplan.schemas.strategy import (
    AlbRouting,
    AnalysisArg,
    AnalysisConfig,
    AnalysisStep,
    AnalysisTemplate,
    BlueGreenConfig,
    CanaryConfig,
    CanaryStep,
    DeploymentStrategy,
    IstioRouting,
    NginxRouting,
    Pause,
    RollingConfig,
    SetCanaryScale,
    SetWeight,
    TrafficRoutingConfig,
)
from stageplan.schemas.topology import Topology

__all__ = [
    # Durations
    "Duration",
    "duration_to_seconds",
    # Environment catalog
    "DeploymentStrategyType",
    "DetectionResult",
    "Environment",
    "EnvironmentType",
    "PlanOptions",
    # Strategies
    "AlbRouting",
    "AnalysisArg",
    "AnalysisConfig",
    "AnalysisStep",
    "AnalysisTemplate",
    "BlueGreenConfig",
    "CanaryConfig",
    "CanaryStep",
    "DeploymentStrategy",
    "IstioRouting",
    "NginxRouting",
    "Pause",
    "RollingConfig",
    "SetCanaryScale",
    "SetWeight",
    "TrafficRoutingConfig",
    # Promotion
    "ApprovalGate",
    "HealthCheckCondition",
    "ManualApprovalCondition",
    "PromotionCondition",
    "PromotionEdge",
    "TestSuccessCondition",
    "TimeDelayCondition",
    # Rollback
    "ErrorRateThresholdTrigger",
    "HealthCheckFailureTrigger",
    "ManualTrigger",
    "RollbackPolicy",
    "RollbackStrategy",
    "RollbackTrigger",
    # Pipelines
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
    # Output
    "Topology",
]
