"""Entry points for benchmark executables.

Example::

    from benchrunner import bench, bgroup, default_main

    def fib(n: int) -> int:
        return n if n < 2 else fib(n - 1) + fib(n - 2)

    default_main(
        [bgroup("fib", [bench("fib 10", lambda _: fib(10)), bench("fib 20", lambda _: fib(20))])],
        measure_environment=measure,
        run_and_analyse=run,
    )
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from itertools import chain
from typing import Any, Protocol

from benchrunner.cli.options import OptionDescriptor
from benchrunner.cli.output import note
from benchrunner.cli.runtime import parse_args
from benchrunner.core.benchmark import BenchmarkTree, bench_names, make_name_filter
from benchrunner.core.config import Config, PrintExit, get_config
from benchrunner.core.logger import configure_log_output, get_logger

CONFIG_PATH_ENV = "BENCHRUNNER_CONFIG"
LOG_FILE_ENV = "BENCHRUNNER_LOG_FILE"
LOG_FORMAT_ENV = "BENCHRUNNER_LOG_FORMAT"

logger = get_logger("runner")


class MeasureEnvironment(Protocol):
    """Measures clock characteristics once before any benchmark runs."""

    def __call__(self, config: Config) -> Any:
        """Return an environment description passed to every run."""


class RunAndAnalyse(Protocol):
    """Runs and analyses the selected benchmarks of one benchmark tree."""

    def __call__(
        self,
        should_run: Callable[[str], bool],
        config: Config,
        environment: Any,
        benchmark: BenchmarkTree,
    ) -> None:
        """Run every benchmark in ``benchmark`` accepted by ``should_run``."""


def default_main(
    benchmarks: Sequence[BenchmarkTree],
    *,
    measure_environment: MeasureEnvironment,
    run_and_analyse: RunAndAnalyse,
    argv: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> None:
    """Run ``benchmarks`` using the global default configuration."""
    default_main_with(
        get_config(),
        benchmarks,
        measure_environment=measure_environment,
        run_and_analyse=run_and_analyse,
        argv=argv,
        env=env,
    )


def default_main_with(
    default: Config,
    benchmarks: Sequence[BenchmarkTree],
    *,
    measure_environment: MeasureEnvironment,
    run_and_analyse: RunAndAnalyse,
    argv: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
    options: Sequence[OptionDescriptor] | None = None,
    prog: str | None = None,
) -> None:
    """Run ``benchmarks`` with configurable defaults.

    The YAML file named by ``BENCHRUNNER_CONFIG`` (if any) is layered over
    ``default`` before the command-line options are applied. Diagnostics go
    to stderr, and also to the file named by ``BENCHRUNNER_LOG_FILE``.
    ``BENCHRUNNER_LOG_FORMAT=json`` switches them to JSON lines.
    """
    env = os.environ if env is None else env
    configure_log_output(
        file_path=env.get(LOG_FILE_ENV) or None,
        structured=env.get(LOG_FORMAT_ENV, "").strip().lower() == "json",
    )
    config, patterns = parse_args(
        default,
        options,
        argv,
        prog=prog,
        config_source=env.get(CONFIG_PATH_ENV) or None,
    )

    if config.print_exit == PrintExit.LIST:
        note(config, "Benchmarks:")
        for name in sorted(chain.from_iterable(bench_names(b) for b in benchmarks)):
            note(config, f"  {name}")
        return

    environment = measure_environment(config)
    should_run = make_name_filter(patterns)
    logger.debug("Running %d benchmark trees, filters=%s", len(benchmarks), patterns or "all")
    for benchmark in benchmarks:
        run_and_analyse(should_run, config, environment, benchmark)
