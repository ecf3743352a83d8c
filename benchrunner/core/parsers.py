"""Parsers for individual option values.

Each parser takes the raw string given on the command line (or in a YAML
overlay) and returns a validated value, raising ``ValueParseError`` with a
user-facing message otherwise.
"""

from __future__ import annotations

import re

from benchrunner.core.config import DEFAULT_DIMENSIONS, PlotFormat, PlotOutput
from benchrunner.core.errors import ValueParseError

# Longer names come before their textual prefixes ("window" before "win").
PLOT_TOKENS: tuple[tuple[str, PlotFormat], ...] = (
    ("window", PlotFormat.WINDOW),
    ("win", PlotFormat.WINDOW),
    ("pdf", PlotFormat.PDF),
    ("png", PlotFormat.PNG),
    ("svg", PlotFormat.SVG),
    ("csv", PlotFormat.CSV),
)

_DIMENSIONS = re.compile(r":([0-9]+)x([0-9]+)", re.ASCII)
_DECIMAL = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?", re.ASCII)
_INTEGER = re.compile(r"-?[0-9]+", re.ASCII)


def parse_plot_output(text: str) -> PlotOutput:
    """Parse ``<format>[:<width>x<height>]`` into a PlotOutput.

    Tokens are tried in ``PLOT_TOKENS`` order; a token that matches a prefix of
    the input but leaves an invalid remainder does not consume anything, so the
    next candidate is tried against the full input.
    """
    for token, kind in PLOT_TOKENS:
        if not text.startswith(token):
            continue
        rest = text[len(token):]
        if not rest:
            return PlotOutput.with_defaults(kind)
        if DEFAULT_DIMENSIONS[kind] is None:
            continue
        match = _DIMENSIONS.fullmatch(rest)
        if match is not None:
            return PlotOutput(kind=kind, width=int(match.group(1)), height=int(match.group(2)))
    raise ValueParseError("unknown plot type")


def parse_confidence_interval(text: str) -> float:
    """Parse a confidence interval such as ``0.95``, ``.9`` or ``95%``."""
    normalized = f"0{text}" if text.startswith(".") else text
    percent = normalized.endswith("%")
    number = normalized[:-1] if percent else normalized
    if _DECIMAL.fullmatch(number) is None:
        raise ValueParseError("invalid confidence interval provided")

    value = float(number)
    if percent:
        value /= 100
    if value <= 0:
        raise ValueParseError("confidence interval must be greater than 0")
    if value >= 1:
        raise ValueParseError("confidence interval must be less than 1")
    return value


def parse_positive[N: (int, float)](text: str, label: str, number_type: type[N]) -> N:
    """Parse a strictly positive number of ``number_type``.

    Args:
        text: Raw value
        label: Field name used in error messages, e.g. "sample count"
        number_type: ``int`` or ``float``

    Returns:
        The parsed number
    """
    pattern = _INTEGER if number_type is int else _DECIMAL
    if pattern.fullmatch(text) is None:
        raise ValueParseError(f"invalid {label} provided")
    value = number_type(text)
    if value <= 0:
        raise ValueParseError(f"{label} must be positive")
    return value
