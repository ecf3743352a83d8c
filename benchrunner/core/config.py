"""Configuration System for the benchmark runner.

This module defines the resolved run configuration, the partial configuration
deltas produced by individual command-line options, and the merge rules used
to fold deltas over a default configuration.

Scalar fields follow last-write-wins semantics: a delta only overrides the
fields that were explicitly set on it (tracked through pydantic's
``model_fields_set``). The plot map is additive: requested outputs are unioned
per plot purpose.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from functools import reduce
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from benchrunner.core.errors import ConfigValidationError


class Verbosity(StrEnum):
    """How much output a run produces."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


class PrintExit(StrEnum):
    """Exit intent selected on the command line."""

    NORMAL = "normal"
    HELP = "help"
    VERSION = "version"
    LIST = "list"


class PlotPurpose(StrEnum):
    """Category a requested plot belongs to."""

    TIMING = "timing"
    KERNEL_DENSITY = "kernel-density"


class PlotFormat(StrEnum):
    """Output format of a requested plot."""

    WINDOW = "window"
    PDF = "pdf"
    PNG = "png"
    SVG = "svg"
    CSV = "csv"


# Pixels for window/png, 72dpi points for pdf/svg. CSV has no dimensions.
DEFAULT_DIMENSIONS: dict[PlotFormat, tuple[int, int] | None] = {
    PlotFormat.WINDOW: (800, 600),
    PlotFormat.PDF: (432, 324),
    PlotFormat.PNG: (800, 600),
    PlotFormat.SVG: (432, 324),
    PlotFormat.CSV: None,
}

Dimension = Annotated[int, Field(ge=0)]
ConfidenceLevel = Annotated[float, Field(gt=0.0, lt=1.0)]
PositiveCount = Annotated[int, Field(gt=0)]


class PlotOutput(BaseModel):
    """A single requested plot output with its dimensions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: PlotFormat = Field(description="Output format of the plot")
    width: Dimension | None = Field(default=None, description="Width in pixels or points")
    height: Dimension | None = Field(default=None, description="Height in pixels or points")

    @model_validator(mode="after")
    def validate_dimensions(self) -> Self:
        has_dimensions = self.width is not None or self.height is not None
        if DEFAULT_DIMENSIONS[self.kind] is None:
            if has_dimensions:
                raise ValueError(f"{self.kind} output does not take dimensions")
        elif self.width is None or self.height is None:
            raise ValueError(f"{self.kind} output requires both width and height")
        return self

    @classmethod
    def with_defaults(cls, kind: PlotFormat) -> PlotOutput:
        """Build an output using the built-in dimensions of ``kind``."""
        dimensions = DEFAULT_DIMENSIONS[kind]
        if dimensions is None:
            return cls(kind=kind)
        width, height = dimensions
        return cls(kind=kind, width=width, height=height)

    def __str__(self) -> str:
        if self.width is None or self.height is None:
            return self.kind.value
        return f"{self.kind.value}:{self.width}x{self.height}"


type PlotMap = dict[PlotPurpose, frozenset[PlotOutput]]

SCALAR_FIELDS: tuple[str, ...] = (
    "banner",
    "conf_interval",
    "perform_gc",
    "print_exit",
    "resamples",
    "samples",
    "verbosity",
)


class ConfigDelta(BaseModel):
    """Partial configuration produced by a single matched option.

    A scalar field counts as set only when it was passed explicitly at
    construction time; unset fields never override anything.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    banner: str | None = Field(default=None, description="Banner printed for help/version")
    conf_interval: ConfidenceLevel | None = Field(
        default=None, description="Bootstrap confidence interval"
    )
    perform_gc: bool | None = Field(
        default=None, description="Collect garbage between iterations"
    )
    print_exit: PrintExit | None = Field(default=None, description="Exit intent")
    resamples: PositiveCount | None = Field(
        default=None, description="Number of bootstrap resamples"
    )
    samples: PositiveCount | None = Field(default=None, description="Number of samples")
    verbosity: Verbosity | None = Field(default=None, description="Output verbosity")
    plot: PlotMap = Field(default_factory=dict, description="Requested plots by purpose")

    def is_set(self, name: str) -> bool:
        """Return True when ``name`` was explicitly set on this delta."""
        return name in self.model_fields_set

    def scalar_overrides(self) -> dict[str, Any]:
        """Return the explicitly set scalar fields."""
        return {name: getattr(self, name) for name in SCALAR_FIELDS if self.is_set(name)}


class Config(BaseModel):
    """Fully resolved run configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    banner: str | None = Field(default=None, description="Banner printed for help/version")
    conf_interval: ConfidenceLevel = Field(
        default=0.95, description="Bootstrap confidence interval"
    )
    perform_gc: bool = Field(default=False, description="Collect garbage between iterations")
    plot: PlotMap = Field(default_factory=dict, description="Requested plots by purpose")
    print_exit: PrintExit = Field(default=PrintExit.NORMAL, description="Exit intent")
    resamples: PositiveCount = Field(
        default=100 * 1000, description="Number of bootstrap resamples"
    )
    samples: PositiveCount = Field(default=100, description="Number of samples")
    verbosity: Verbosity = Field(default=Verbosity.NORMAL, description="Output verbosity")

    def as_mapping(self) -> dict[str, Any]:
        """Return a plain snapshot suitable for diffing and logging."""
        snapshot: dict[str, Any] = {name: getattr(self, name) for name in SCALAR_FIELDS}
        snapshot['plot'] = {
            str(purpose): sorted(str(output) for output in outputs)
            for purpose, outputs in sorted(self.plot.items())
        }
        return snapshot


def merge_last(left: ConfigDelta, right: ConfigDelta) -> dict[str, Any]:
    """Merge scalar fields, preferring values set on ``right``."""
    merged = left.scalar_overrides()
    merged.update(right.scalar_overrides())
    return merged


def merge_plots(
    left: Mapping[PlotPurpose, frozenset[PlotOutput]],
    right: Mapping[PlotPurpose, frozenset[PlotOutput]],
) -> PlotMap:
    """Union requested outputs per plot purpose."""
    merged: PlotMap = dict(left)
    for purpose, outputs in right.items():
        merged[purpose] = merged.get(purpose, frozenset()) | outputs
    return merged


def combine(left: ConfigDelta, right: ConfigDelta) -> ConfigDelta:
    """Combine two deltas, ``right`` applied after ``left``."""
    payload = merge_last(left, right)
    plots = merge_plots(left.plot, right.plot)
    if plots:
        payload['plot'] = plots
    return ConfigDelta(**payload)


def fold_deltas(deltas: Iterable[ConfigDelta]) -> ConfigDelta:
    """Fold deltas left to right into a single delta."""
    return reduce(combine, deltas, ConfigDelta())


def apply_delta(config: Config, delta: ConfigDelta) -> Config:
    """Overlay ``delta`` on a resolved configuration."""
    payload: dict[str, Any] = {name: getattr(config, name) for name in Config.model_fields}
    payload.update(delta.scalar_overrides())
    payload['plot'] = merge_plots(config.plot, delta.plot)
    try:
        return Config(**payload)
    except ValidationError as exc:
        raise ConfigValidationError(
            "Unable to build Config",
            source="delta",
            errors=exc.errors(),
        ) from exc


_global_config: Config | None = None


def get_config() -> Config:
    """Get the global default configuration.

    Returns:
        Global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global default configuration.

    Args:
        config: Config instance to set as global
    """
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = Config()
