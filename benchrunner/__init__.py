"""Command-line front end for benchmark executables.

This package resolves benchmark run configuration from command-line options,
handles help/version/list requests, and hands the resolved configuration to
the measurement and analysis collaborators.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "Config",
    "ConfigDelta",
    "bench",
    "bgroup",
    "default_main",
    "default_main_with",
    "default_options",
    "parse_args",
]

_EXPORTS: dict[str, tuple[str, str]] = {
    "Config": ("benchrunner.core.config", "Config"),
    "ConfigDelta": ("benchrunner.core.config", "ConfigDelta"),
    "bench": ("benchrunner.core.benchmark", "bench"),
    "bgroup": ("benchrunner.core.benchmark", "bgroup"),
    "default_main": ("benchrunner.runner", "default_main"),
    "default_main_with": ("benchrunner.runner", "default_main_with"),
    "default_options": ("benchrunner.cli.options", "default_options"),
    "parse_args": ("benchrunner.cli.runtime", "parse_args"),
}


def __getattr__(name: str) -> Any:
    """Lazily resolve exports to keep import-time dependencies minimal."""
    try:
        module_path, attr_name = _EXPORTS[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from exc
    module = import_module(module_path)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose dynamically-resolved attributes via dir()."""
    return sorted(list(globals().keys()) + __all__)
