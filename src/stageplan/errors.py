"""Exception hierarchy for stageplan.

All exceptions inherit from StageplanError, the base exception class.

Exception Hierarchy:
    StageplanError (base)
    ├── ConfigurationError          # Structurally invalid environment input
    │   └── StrategyResolutionError # Unknown deployment strategy identifier
    └── PlanFileError               # Plan file missing or not valid YAML

Exit Codes:
    0 - Success
    1 - General error (StageplanError)
    2 - Configuration error (ConfigurationError)
    3 - Strategy resolution error (StrategyResolutionError)
    4 - Plan file error (PlanFileError)

Example:
    >>> from stageplan.errors import ConfigurationError
    >>> raise ConfigurationError("prod", "name", "duplicate environment name")
    Traceback (most recent call last):
        ...
    ConfigurationError: Invalid environment 'prod': name: duplicate environment name
"""

from __future__ import annotations

from collections.abc import Sequence


class StageplanError(Exception):
    """Base exception for all stageplan errors.

    Attributes:
        exit_code: CLI exit code for this error type (default: 1).
        warnings: Advisory messages collected before the error was raised.
    """

    exit_code: int = 1
    warnings: tuple[str, ...] = ()


class ConfigurationError(StageplanError):
    """Raised when environment input is structurally invalid.

    Covers empty or duplicate environment names, unknown environment types
    and malformed field values. Topology construction is aborted and no
    partial result is returned.

    Attributes:
        environment: Name (or positional label) of the offending environment.
        field: Field that failed validation.
        reason: Description of the problem.
        exit_code: CLI exit code (2).

    Example:
        >>> raise ConfigurationError("environments[0]", "name", "must not be empty")
        Traceback (most recent call last):
            ...
        ConfigurationError: Invalid environment 'environments[0]': name: must not be empty
    """

    exit_code: int = 2

    def __init__(self, environment: str, field: str, reason: str) -> None:
        """Initialize ConfigurationError.

        Args:
            environment: Name or positional label of the offending environment.
            field: Field that failed validation.
            reason: Description of the problem.
        """
        self.environment = environment
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid environment '{environment}': {field}: {reason}")


class StrategyResolutionError(ConfigurationError):
    """Raised when an environment requests an unknown deployment strategy.

    Attributes:
        strategy: The unrecognized strategy identifier.
        exit_code: CLI exit code (3).

    Example:
        >>> raise StrategyResolutionError("prod", "shadow")
        Traceback (most recent call last):
            ...
        StrategyResolutionError: Invalid environment 'prod': deployment_strategy: ...
    """

    exit_code: int = 3

    def __init__(
        self, environment: str, strategy: str, valid: Sequence[str] = ()
    ) -> None:
        """Initialize StrategyResolutionError.

        Args:
            environment: Name of the environment requesting the strategy.
            strategy: The unrecognized strategy identifier.
            valid: Recognized strategy identifiers, listed in the message.
        """
        self.strategy = strategy
        self.valid = tuple(valid)
        reason = f"unknown strategy '{strategy}'"
        if self.valid:
            reason += f" (expected one of: {', '.join(self.valid)})"
        super().__init__(environment, "deployment_strategy", reason)


class PlanFileError(StageplanError):
    """Raised when a plan file cannot be read or parsed.

    Attributes:
        path: Path of the plan file.
        reason: Description of the problem.
        exit_code: CLI exit code (4).
    """

    exit_code: int = 4

    def __init__(self, path: str, reason: str) -> None:
        """Initialize PlanFileError.

        Args:
            path: Path of the plan file.
            reason: Description of the problem.
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load plan file {path}: {reason}")


__all__ = [
    "ConfigurationError",
    "PlanFileError",
    "StageplanError",
    "StrategyResolutionError",
]
