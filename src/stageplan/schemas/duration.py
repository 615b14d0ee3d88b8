"""Duration strings used in deployment plans.

Durations are written the way CI/CD runners and rollout controllers expect
them: an integer followed by a unit suffix (``s``, ``m`` or ``h``), e.g.
``"30s"``, ``"5m"`` or ``"1h"``.

Example:
    >>> duration_to_seconds("5m")
    300
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import Field

DURATION_PATTERN = r"^\d+[smh]$"

_DURATION_RE = re.compile(r"(\d+)([smh])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}

Duration = Annotated[
    str,
    Field(
        pattern=DURATION_PATTERN,
        description="Duration with unit suffix (e.g. '30s', '5m', '1h')",
        examples=["30s", "5m", "1h"],
    ),
]
"""Validated duration string type for pydantic fields."""


def duration_to_seconds(duration: str) -> int:
    """Convert a duration string to a number of seconds.

    Args:
        duration: Duration such as ``"30s"``, ``"5m"`` or ``"2h"``.

    Returns:
        Duration in whole seconds.

    Raises:
        ValueError: If the string is not a valid duration.

    Examples:
        >>> duration_to_seconds("30s")
        30
        >>> duration_to_seconds("2h")
        7200
    """
    match = _DURATION_RE.fullmatch(duration)
    if match is None:
        raise ValueError(
            f"Invalid duration '{duration}': expected <number><s|m|h>, e.g. '5m'"
        )
    value, unit = match.groups()
    return int(value) * _UNIT_SECONDS[unit]


__all__ = ["DURATION_PATTERN", "Duration", "duration_to_seconds"]
