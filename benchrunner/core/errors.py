"""Fatal configuration errors raised while resolving a run configuration."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

USAGE_EXIT_CODE = 64


class ConfigurationError(RuntimeError):
    """Base exception for failures that abort configuration resolution."""

    exit_code: int = USAGE_EXIT_CODE


class OptionError(ConfigurationError):
    """Raised for unknown flags or malformed option syntax."""


class ValueParseError(ConfigurationError, ValueError):
    """Raised when an option value cannot be parsed or is out of range."""


class ConfigSourceError(ConfigurationError):
    """Raised when a config source cannot be resolved."""


class ConfigValidationError(ConfigurationError):
    """Raised when a merged configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        component: str | None = None,
        source: str | None = None,
        errors: Sequence[Any] | None = None,
    ) -> None:
        """Capture validation metadata for downstream error reporting."""
        context = []
        if component:
            context.append(f"component={component}")
        if source:
            context.append(f"source={source}")
        if errors:
            context.append(f"errors={errors}")
        suffix = f" ({', '.join(context)})" if context else ""
        super().__init__(f"{message}{suffix}")
        self.component = component
        self.source = source
        self.errors = errors
