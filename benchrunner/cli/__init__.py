"""Helpers for parsing command-line options for benchmark executables."""

from .options import OptionDescriptor, build_arg_parser, default_options
from .runtime import dispatch_exit_intent, parse_args, resolve_args, usage_text

__all__ = [
    "OptionDescriptor",
    "build_arg_parser",
    "default_options",
    "resolve_args",
    "parse_args",
    "dispatch_exit_intent",
    "usage_text",
]
