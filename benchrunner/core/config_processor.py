"""ConfigProcessor centralises loading, folding, and validating configs."""

from __future__ import annotations

import os
from collections import namedtuple
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from benchrunner.core.config import (
    Config,
    ConfigDelta,
    PlotOutput,
    PlotPurpose,
    apply_delta,
    fold_deltas,
)
from benchrunner.core.errors import ConfigSourceError, ConfigValidationError
from benchrunner.core.parsers import (
    parse_confidence_interval,
    parse_plot_output,
    parse_positive,
)

type DeltaSource = ConfigDelta | Mapping[str, Any] | str | bytes | Path | None

FieldChange = namedtuple("FieldChange", ["path", "before", "after"])


class ConfigProcessor:
    """Resolve a Config by folding deltas over a default configuration."""

    def __init__(self, base: Config | None = None) -> None:
        """Initialise the processor with the default configuration."""
        self._defaults = base if base is not None else Config()

    @property
    def defaults(self) -> Config:
        """The configuration deltas are applied on top of."""
        return self._defaults

    # ------------------------------------------------------------------#
    # Public API
    # ------------------------------------------------------------------#
    def resolve(self, deltas: Iterable[ConfigDelta]) -> Config:
        """Fold ``deltas`` in order and apply the result to the defaults."""
        return apply_delta(self._defaults, fold_deltas(deltas))

    def with_source(self, source: DeltaSource) -> ConfigProcessor:
        """Return a processor whose defaults include ``source``."""
        delta = self.delta_from_source(source)
        if delta is None:
            return self
        return ConfigProcessor(base=apply_delta(self._defaults, delta))

    def delta_from_source(self, source: DeltaSource) -> ConfigDelta | None:
        """Build a delta from a model, mapping, or YAML file path."""
        if source is None:
            return None
        if isinstance(source, ConfigDelta):
            return source
        if isinstance(source, Mapping):
            return self._build_delta(source, origin="mapping")
        path = self._path_from_source(source)
        if path is None:
            raise ConfigSourceError(f"Unsupported config source: {source!r}")
        return self._build_delta(self.load_yaml(path), origin=str(path))

    def load_yaml(self, path: str | Path) -> Mapping[str, Any]:
        """Read a YAML file and return its mapping payload."""
        resolved_path = Path(path).expanduser()
        if not resolved_path.is_file():
            raise ConfigSourceError(f"Config file not found: {resolved_path}")

        try:
            with resolved_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigSourceError(f"Invalid YAML in {resolved_path}: {exc}") from exc

        if not isinstance(data, MutableMapping):
            raise ConfigSourceError(f"YAML root must be a mapping: {resolved_path}")

        return dict(data)

    def diff_with_defaults(self, config: Config) -> list[FieldChange]:
        """Compare a resolved config with the processor defaults.

        Plot requests are compared per purpose (``plot.timing``), every other
        field as a whole.
        """
        baseline = self._defaults.as_mapping()
        candidate = config.as_mapping()
        changes: list[FieldChange] = []
        for key in sorted(candidate):
            if key == 'plot':
                continue
            if baseline[key] != candidate[key]:
                changes.append(FieldChange(path=key, before=baseline[key], after=candidate[key]))

        before_plots, after_plots = baseline['plot'], candidate['plot']
        for purpose in sorted(set(before_plots) | set(after_plots)):
            before = before_plots.get(purpose)
            after = after_plots.get(purpose)
            if before != after:
                changes.append(FieldChange(path=f"plot.{purpose}", before=before, after=after))
        return changes

    @staticmethod
    def format_changes(changes: Sequence[FieldChange]) -> str:
        """Render field changes in a log-friendly format."""
        return "\n".join(
            f"- {change.path}: {change.before!r} -> {change.after!r}" for change in changes
        )

    # ------------------------------------------------------------------#
    # Internal helpers
    # ------------------------------------------------------------------#
    def _build_delta(self, payload: Mapping[str, Any], *, origin: str) -> ConfigDelta:
        try:
            return ConfigDelta(**self._coerce_payload(payload))
        except ValidationError as exc:
            raise ConfigValidationError(
                "Unable to build ConfigDelta",
                source=origin,
                errors=exc.errors(),
            ) from exc
        except TypeError as exc:
            raise ConfigValidationError(
                f"Unable to build ConfigDelta: {exc}",
                source=origin,
            ) from exc

    @staticmethod
    def _coerce_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
        """Run string values through the command-line value parsers."""
        bad_keys = [key for key in payload if not isinstance(key, str)]
        if bad_keys:
            raise ConfigSourceError(f"Config keys must be strings, got: {bad_keys!r}")
        normalized: dict[str, Any] = dict(payload)

        conf_interval = normalized.get('conf_interval')
        if isinstance(conf_interval, str):
            normalized['conf_interval'] = parse_confidence_interval(conf_interval)
        for key, label in (('samples', "sample count"), ('resamples', "resample count")):
            value = normalized.get(key)
            if isinstance(value, str):
                normalized[key] = parse_positive(value, label, int)

        plots = normalized.get('plot')
        if isinstance(plots, Mapping):
            normalized['plot'] = {
                ConfigProcessor._coerce_purpose(purpose): frozenset(
                    ConfigProcessor._coerce_plot_output(output)
                    for output in ConfigProcessor._plot_entries(purpose, outputs)
                )
                for purpose, outputs in plots.items()
            }
        return normalized

    @staticmethod
    def _plot_entries(purpose: Any, outputs: Any) -> list[Any]:
        if isinstance(outputs, str):
            return [outputs]
        if isinstance(outputs, Mapping) or not isinstance(outputs, Iterable):
            raise ConfigSourceError(
                f"Plot outputs for '{purpose}' must be a string or a list, got: {outputs!r}"
            )
        return list(outputs)

    @staticmethod
    def _coerce_purpose(purpose: Any) -> PlotPurpose:
        try:
            return PlotPurpose(purpose)
        except ValueError:
            raise ConfigSourceError(f"Unknown plot purpose: {purpose}") from None

    @staticmethod
    def _coerce_plot_output(output: Any) -> Any:
        if isinstance(output, str):
            return parse_plot_output(output)
        if isinstance(output, Mapping):
            return PlotOutput(**output)
        return output

    @staticmethod
    def _path_from_source(source: Any) -> Path | None:
        if isinstance(source, (str, bytes)):
            candidate = Path(os.fsdecode(source)).expanduser()
        elif isinstance(source, Path):
            candidate = source.expanduser()
        else:
            return None

        if candidate.is_file():
            return candidate
        if candidate.suffix.lower() in {".yml", ".yaml"}:
            return candidate
        return None
