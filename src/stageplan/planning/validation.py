"""Structural validation of environment input.

Hard problems (empty or duplicate names, unknown types, malformed fields)
raise ConfigurationError naming the offending environment and field. Soft
problems are returned as warning strings and never stop planning.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from stageplan.errors import ConfigurationError
from stageplan.schemas.environment import Environment

EnvironmentInput = Environment | Mapping[str, Any]


def _label(raw: Mapping[str, Any], index: int) -> str:
    name = raw.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    return f"environments[{index}]"


def coerce_environment(raw: EnvironmentInput, index: int) -> Environment:
    """Return ``raw`` as a fresh, validated Environment.

    Environment instances are revalidated from their field values, so the
    result never shares state with a caller-owned object.

    Args:
        raw: Environment instance or mapping of environment fields.
        index: Position in the input list, used to label nameless entries.

    Raises:
        ConfigurationError: If the mapping does not validate.
    """
    if isinstance(raw, Environment):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"environments[{index}]",
            "<root>",
            f"expected a mapping, got {type(raw).__name__}",
        )
    try:
        return Environment.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first.get("loc", ())) or "<root>"
        raise ConfigurationError(
            _label(raw, index), field, str(first.get("msg", "invalid value"))
        ) from e


def validate_environments(environments: Sequence[EnvironmentInput]) -> tuple[Environment, ...]:
    """Validate environment input and return it as Environment models.

    Args:
        environments: Environments or mappings, in declaration order.

    Returns:
        Validated environments in declaration order.

    Raises:
        ConfigurationError: On the first invalid entry or duplicate name.
    """
    validated: list[Environment] = []
    seen: set[str] = set()
    for index, raw in enumerate(environments):
        env = coerce_environment(raw, index)
        if env.name in seen:
            raise ConfigurationError(env.name, "name", "duplicate environment name")
        seen.add(env.name)
        validated.append(env)
    return tuple(validated)


def environment_warnings(environments: Sequence[Environment]) -> list[str]:
    """Collect advisory warnings about individual environments."""
    if not environments:
        return ["No environments configured; topology is empty"]

    warnings: list[str] = []
    for env in environments:
        if not env.is_production:
            continue
        if not env.rollback_enabled:
            warnings.append(
                f"Production environment '{env.name}' has rollback disabled"
            )
        if "DEPLOYMENT_URL" not in env.variables and "HEALTH_ENDPOINT" not in env.variables:
            warnings.append(
                f"Production environment '{env.name}' defines neither DEPLOYMENT_URL "
                "nor HEALTH_ENDPOINT; health checks use a placeholder URL"
            )
    return warnings


__all__ = [
    "EnvironmentInput",
    "coerce_environment",
    "environment_warnings",
    "validate_environments",
]
