"""Pytest configuration and shared fixtures for the benchrunner test suite."""

from collections.abc import Iterator
from typing import Any

import pytest

from benchrunner.cli.options import OptionDescriptor, default_options
from benchrunner.core.benchmark import BenchmarkTree, bench, bgroup
from benchrunner.core.config import Config, Verbosity, reset_config
from benchrunner.core.logger import configure_log_output, configure_logging


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


@pytest.fixture(autouse=True)
def _isolated_global_config() -> Iterator[None]:
    """Keep the global default Config from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def default_config() -> Config:
    """Default configuration with a banner so output is predictable."""
    return Config(banner="benchrunner test suite 0.1")


@pytest.fixture
def options() -> list[OptionDescriptor]:
    """The standard option table."""
    return default_options()


@pytest.fixture
def benchmarks() -> list[BenchmarkTree]:
    """A small benchmark tree shaped like a typical executable."""
    return [
        bgroup(
            "fib",
            [
                bench("fib 10", lambda _: None),
                bench("fib 35", lambda _: None),
            ],
        ),
        bench("sort 100", lambda _: None),
    ]


@pytest.fixture(autouse=True)
def _restore_log_level() -> Iterator[None]:
    """Undo log output and verbosity changes made by a test."""
    yield
    configure_log_output()
    configure_logging(Verbosity.NORMAL)
