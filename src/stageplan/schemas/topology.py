"""Topology schema: the single output value of topology planning.

A Topology is computed once per request, never mutated (its mappings are
read-only views), and handed to a
renderer that projects it onto platform-specific artifacts.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from stageplan.schemas.environment import Environment
from stageplan.schemas.promotion import ApprovalGate, PromotionEdge
from stageplan.schemas.readonly import ReadOnlyMapping, empty_mapping
from stageplan.schemas.rollback import RollbackPolicy
from stageplan.schemas.steps import EnvironmentPipeline
from stageplan.schemas.strategy import DeploymentStrategy


class Topology(BaseModel):
    """Complete multi-environment deployment plan.

    Attributes:
        environments: Input environments in declaration order.
        promotion_order: Environment names in promotion order.
        strategies: Resolved deployment strategy per environment.
        gates: Approval gate per gated environment.
        promotion_edges: Promotion edges in promotion order.
        rollback_policies: Rollback policy per rollback-enabled environment.
        pipelines: Per-environment pipelines, keyed by environment name.
        warnings: Advisory messages for the invoking tool.

    Examples:
        >>> topology = Topology()
        >>> topology.promotion_edges
        ()
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    environments: tuple[Environment, ...] = Field(default=())
    promotion_order: tuple[str, ...] = Field(default=())
    strategies: ReadOnlyMapping[str, DeploymentStrategy] = Field(
        default_factory=empty_mapping
    )
    gates: ReadOnlyMapping[str, ApprovalGate] = Field(default_factory=empty_mapping)
    promotion_edges: tuple[PromotionEdge, ...] = Field(default=())
    rollback_policies: ReadOnlyMapping[str, RollbackPolicy] = Field(
        default_factory=empty_mapping
    )
    pipelines: ReadOnlyMapping[str, EnvironmentPipeline] = Field(
        default_factory=empty_mapping
    )
    warnings: tuple[str, ...] = Field(default=())

    def edge(self, source: str, target: str) -> PromotionEdge | None:
        """Return the promotion edge between two environments, if any."""
        for candidate in self.promotion_edges:
            if candidate.source == source and candidate.target == target:
                return candidate
        return None


__all__ = ["Topology"]
