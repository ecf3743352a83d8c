"""Option table binding command-line flags to configuration deltas."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, NoReturn

from benchrunner.core.config import ConfigDelta, PlotPurpose, PrintExit, Verbosity
from benchrunner.core.errors import OptionError
from benchrunner.core.parsers import (
    parse_confidence_interval,
    parse_plot_output,
    parse_positive,
)

PLOT_TYPES_HELP = "\n".join(
    [
        "Plot types:",
        "  window or win   display a window immediately",
        "  csv             save a CSV file",
        "  pdf             save a PDF file",
        "  png             save a PNG file",
        "  svg             save an SVG file",
        "",
        'You can specify plot dimensions via a suffix, e.g. "window:640x480"',
        "Units are pixels for png and window, 72dpi points for pdf and svg",
    ]
)


@dataclass(frozen=True)
class OptionDescriptor:
    """Flags for one option and how a match turns into a ConfigDelta.

    ``metavar`` is None for flags without an argument; ``build`` then receives
    None, otherwise the raw argument string.
    """

    short_flags: str
    long_flags: tuple[str, ...]
    help: str
    build: Callable[[Any], ConfigDelta]
    metavar: str | None = None

    @property
    def takes_argument(self) -> bool:
        return self.metavar is not None

    def option_strings(self) -> list[str]:
        return [f"-{flag}" for flag in self.short_flags] + [
            f"--{name}" for name in self.long_flags
        ]


@dataclass(frozen=True)
class OptionMatch:
    """An option occurrence on the command line, not yet turned into a delta."""

    descriptor: OptionDescriptor
    option_string: str | None
    value: str | None

    def to_delta(self) -> ConfigDelta:
        return self.descriptor.build(self.value)


def no_arg(
    short_flags: str,
    long_flags: Sequence[str],
    delta: ConfigDelta,
    help: str,
) -> OptionDescriptor:
    """Describe a flag that always contributes the same delta."""
    return OptionDescriptor(
        short_flags=short_flags,
        long_flags=tuple(long_flags),
        help=help,
        build=lambda _value: delta,
    )


def req_arg(
    short_flags: str,
    long_flags: Sequence[str],
    metavar: str,
    build: Callable[[str], ConfigDelta],
    help: str,
) -> OptionDescriptor:
    """Describe a flag whose argument is parsed into a delta."""
    return OptionDescriptor(
        short_flags=short_flags,
        long_flags=tuple(long_flags),
        help=help,
        build=build,
        metavar=metavar,
    )


def plot_delta(purpose: PlotPurpose) -> Callable[[str], ConfigDelta]:
    """Return a builder requesting a plot output for ``purpose``."""

    def build(value: str) -> ConfigDelta:
        return ConfigDelta(plot={purpose: frozenset({parse_plot_output(value)})})

    return build


def ci_delta(value: str) -> ConfigDelta:
    return ConfigDelta(conf_interval=parse_confidence_interval(value))


def count_delta(field: str, label: str) -> Callable[[str], ConfigDelta]:
    """Return a builder setting a positive integer ``field``."""

    def build(value: str) -> ConfigDelta:
        return ConfigDelta(**{field: parse_positive(value, label, int)})

    return build


def default_options() -> list[OptionDescriptor]:
    """Return the standard option table."""
    return [
        no_arg("h?", ["help"], ConfigDelta(print_exit=PrintExit.HELP),
               "print help, then exit"),
        no_arg("G", ["no-gc"], ConfigDelta(perform_gc=False),
               "do not collect garbage between iterations"),
        no_arg("g", ["gc"], ConfigDelta(perform_gc=True),
               "collect garbage between iterations"),
        req_arg("I", ["ci"], "CI", ci_delta,
                "bootstrap confidence interval"),
        no_arg("l", ["list"], ConfigDelta(print_exit=PrintExit.LIST),
               "print a list of benchmarks"),
        req_arg("k", ["plot-kde"], "TYPE", plot_delta(PlotPurpose.KERNEL_DENSITY),
                "plot kernel density estimate of probabilities"),
        no_arg("q", ["quiet"], ConfigDelta(verbosity=Verbosity.QUIET),
               "print less output"),
        req_arg("", ["resamples"], "N", count_delta("resamples", "resample count"),
                "number of bootstrap resamples to perform"),
        req_arg("s", ["samples"], "N", count_delta("samples", "sample count"),
                "number of samples to collect"),
        req_arg("t", ["plot-timing"], "TYPE", plot_delta(PlotPurpose.TIMING),
                "plot timings"),
        no_arg("V", ["version"], ConfigDelta(print_exit=PrintExit.VERSION),
               "display version, then exit"),
        no_arg("v", ["verbose"], ConfigDelta(verbosity=Verbosity.VERBOSE),
               "print more output"),
    ]


class OptionParser(argparse.ArgumentParser):
    """ArgumentParser that raises OptionError instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise OptionError(message)


class _MatchAction(argparse.Action):
    """Record each occurrence of an option, in command-line order."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        descriptor: OptionDescriptor,
        **kwargs: Any,
    ) -> None:
        super().__init__(option_strings, dest, **kwargs)
        self.descriptor = descriptor

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        value = values if isinstance(values, str) else None
        getattr(namespace, self.dest).append(
            OptionMatch(descriptor=self.descriptor, option_string=option_string, value=value)
        )


def build_arg_parser(
    options: Sequence[OptionDescriptor],
    prog: str | None = None,
) -> OptionParser:
    """Create the argparse parser for an option table."""
    parser = OptionParser(
        prog=prog,
        usage="%(prog)s [OPTIONS] [BENCHMARK ...]",
        epilog=PLOT_TYPES_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    for descriptor in options:
        parser.add_argument(
            *descriptor.option_strings(),
            action=_MatchAction,
            descriptor=descriptor,
            dest="matches",
            default=argparse.SUPPRESS,
            nargs=None if descriptor.takes_argument else 0,
            metavar=descriptor.metavar,
            help=descriptor.help,
        )
    return parser
