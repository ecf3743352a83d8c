"""Runtime helpers turning command-line arguments into a resolved Config."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence

from benchrunner.cli.options import (
    OptionDescriptor,
    OptionMatch,
    OptionParser,
    build_arg_parser,
    default_options,
)
from benchrunner.cli.output import note, print_error
from benchrunner.core.config import Config, PrintExit
from benchrunner.core.config_processor import ConfigProcessor, DeltaSource
from benchrunner.core.errors import ConfigurationError, OptionError
from benchrunner.core.logger import configure_logging, get_logger

DEFAULT_BANNER = "Hey, nobody told me what version I am!"

logger = get_logger("cli.runtime")


def resolve_args(
    default: Config,
    options: Sequence[OptionDescriptor],
    argv: Sequence[str],
    *,
    prog: str | None = None,
    config_source: DeltaSource = None,
) -> tuple[Config, list[str]]:
    """Resolve ``argv`` against ``default`` without terminating the process.

    Option syntax is checked for the whole command line before any value is
    parsed. ``config_source`` (a YAML path or mapping) is layered between the
    default and the command-line options. The package log level is set
    from the resolved verbosity.

    Returns:
        The resolved configuration and the residual positional arguments

    Raises:
        ConfigurationError: on the first option or value failure
    """
    parser = build_arg_parser(options, prog=prog)
    matches, residual = _match_options(parser, argv)

    processor = ConfigProcessor(base=default).with_source(config_source)
    config = processor.resolve(match.to_delta() for match in matches)
    configure_logging(config.verbosity)

    for match in matches:
        logger.debug("Matched option %s %s", match.option_string, match.value or "")
    changes = processor.diff_with_defaults(config)
    if changes:
        logger.debug("Resolved configuration:\n%s", processor.format_changes(changes))
    return config, residual


def usage_text(options: Sequence[OptionDescriptor], prog: str | None = None) -> str:
    """Return the full usage text for an option table."""
    return build_arg_parser(options, prog=prog).format_help()


def print_banner(config: Config) -> None:
    note(config, config.banner if config.banner is not None else DEFAULT_BANNER)


def dispatch_exit_intent(
    config: Config,
    options: Sequence[OptionDescriptor],
    *,
    prog: str | None = None,
) -> int | None:
    """Perform the help/version actions.

    Returns:
        The exit status when the intent ends the program, otherwise None
    """
    if config.print_exit == PrintExit.HELP:
        print_banner(config)
        sys.stdout.write(usage_text(options, prog=prog))
        return 0
    if config.print_exit == PrintExit.VERSION:
        print_banner(config)
        return 0
    return None


def report_parse_error(error: ConfigurationError, prog: str) -> None:
    print_error(f"Error: {error}")
    print_error(f'Run "{prog} --help" for usage information')


def parse_args(
    default: Config,
    options: Sequence[OptionDescriptor] | None = None,
    argv: Sequence[str] | None = None,
    *,
    prog: str | None = None,
    config_source: DeltaSource = None,
) -> tuple[Config, list[str]]:
    """Parse command-line options, exiting on errors, help and version.

    Raises:
        SystemExit: 64 on any configuration error, 0 after help or version
    """
    options = default_options() if options is None else options
    argv = sys.argv[1:] if argv is None else argv
    prog = prog or os.path.basename(sys.argv[0])

    try:
        config, residual = resolve_args(
            default, options, argv, prog=prog, config_source=config_source
        )
    except ConfigurationError as exc:
        logger.debug("Configuration rejected: %s", exc)
        report_parse_error(exc, prog)
        raise SystemExit(exc.exit_code) from exc

    status = dispatch_exit_intent(config, options, prog=prog)
    if status is not None:
        raise SystemExit(status)
    return config, residual


# ---------------------------------------------------------------------------#
# Internal helpers
# ---------------------------------------------------------------------------#


def _match_options(
    parser: OptionParser,
    argv: Sequence[str],
) -> tuple[list[OptionMatch], list[str]]:
    """Collect option matches in order and the residual positional arguments."""
    namespace = argparse.Namespace(matches=[])
    namespace, extras = parser.parse_known_args(list(argv), namespace)

    residual: list[str] = []
    options_ended = False
    for token in extras:
        if options_ended:
            residual.append(token)
        elif token == "--":
            options_ended = True
        elif token.startswith("-") and token != "-":
            raise OptionError(f"unrecognized option '{token}'")
        else:
            residual.append(token)
    return list(namespace.matches), residual
