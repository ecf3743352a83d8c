"""User-facing console output."""

from __future__ import annotations

import sys
from typing import TextIO

from benchrunner.core.config import Config, Verbosity


def note(config: Config, message: str, *, stream: TextIO | None = None) -> None:
    """Print ``message`` unless the configuration asks for quiet output."""
    if config.verbosity == Verbosity.QUIET:
        return
    print(message, file=stream if stream is not None else sys.stdout)


def print_error(message: str, *, stream: TextIO | None = None) -> None:
    """Print ``message`` to stderr regardless of verbosity."""
    print(message, file=stream if stream is not None else sys.stderr)
