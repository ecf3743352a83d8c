"""Benchmark tree boundary and benchmark name selection."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Benchmark:
    """A single named benchmark."""

    name: str
    action: Callable[[int], Any]


@dataclass(frozen=True)
class BenchmarkGroup:
    """A named group of benchmarks; member names are prefixed with ``name/``."""

    name: str
    benchmarks: tuple[Benchmark | BenchmarkGroup, ...]


type BenchmarkTree = Benchmark | BenchmarkGroup


def bench(name: str, action: Callable[[int], Any]) -> Benchmark:
    """Create a single benchmark."""
    return Benchmark(name=name, action=action)


def bgroup(name: str, benchmarks: Iterable[BenchmarkTree]) -> BenchmarkGroup:
    """Group benchmarks under a common name."""
    return BenchmarkGroup(name=name, benchmarks=tuple(benchmarks))


def bench_names(benchmark: BenchmarkTree) -> list[str]:
    """Return the fully qualified names of every benchmark in the tree."""
    if isinstance(benchmark, Benchmark):
        return [benchmark.name]
    return [
        f"{benchmark.name}/{name}"
        for member in benchmark.benchmarks
        for name in bench_names(member)
    ]


def make_name_filter(patterns: Sequence[str]) -> Callable[[str], bool]:
    """Build the predicate selecting benchmarks from residual arguments.

    With no patterns every benchmark runs; otherwise a name is selected when
    any pattern is a literal, case-sensitive prefix of it.
    """
    prefixes = tuple(patterns)

    def should_run(name: str) -> bool:
        return not prefixes or name.startswith(prefixes)

    return should_run
