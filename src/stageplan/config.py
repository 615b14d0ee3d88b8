"""Plan file loading.

A plan file is YAML with three top-level keys:

    options:       # PlanOptions (optional)
      soak_duration: 1h
    environments:  # list of environment mappings
      - name: dev
        type: development
    detection:     # DetectionResult (optional)
      languages: [python]

Environment entries stay raw mappings here so that the topology builder
reports their problems as ConfigurationError naming the environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stageplan.errors import PlanFileError
from stageplan.schemas.environment import DetectionResult, PlanOptions
from stageplan.telemetry.tracing import traced

logger = structlog.get_logger(__name__)


class PlanRequest(BaseModel):
    """Everything needed to build one topology.

    Attributes:
        options: Global plan options.
        environments: Environment mappings in declaration order.
        detection: Detected project characteristics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    options: PlanOptions = Field(default_factory=PlanOptions)
    environments: list[dict[str, Any]] = Field(default_factory=list)
    detection: DetectionResult = Field(default_factory=DetectionResult)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise PlanFileError(str(path), "file not found")

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise PlanFileError(str(path), f"not valid UTF-8: {e.reason}") from e
    except OSError as e:
        raise PlanFileError(str(path), f"cannot read file: {e.strerror or e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PlanFileError(str(path), f"invalid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PlanFileError(
            str(path), f"expected a mapping at top level, got {type(data).__name__}"
        )
    return cast(dict[str, Any], data)


@traced(name="stageplan.load_plan_request")
def load_plan_request(path: Path | str) -> PlanRequest:
    """Load and validate a plan file.

    Args:
        path: Path to the plan YAML file.

    Returns:
        Validated PlanRequest.

    Raises:
        PlanFileError: If the file is missing or unreadable, is not UTF-8
            encoded YAML, or its options/detection sections do not validate.

    Example:
        >>> request = load_plan_request("plan.yaml")
        >>> [env["name"] for env in request.environments]
        ['dev', 'staging', 'prod']
    """
    path = Path(path)
    data = _load_yaml(path)
    try:
        request = PlanRequest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(loc) for loc in first.get("loc", ()))
        error_msg = str(first.get("msg", "Invalid value"))
        raise PlanFileError(str(path), f"{field_path}: {error_msg}") from e

    logger.debug(
        "plan_file_loaded",
        path=str(path),
        environment_count=len(request.environments),
    )
    return request


__all__ = ["PlanRequest", "load_plan_request"]
