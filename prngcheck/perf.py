"""Performance helpers for benchmarking and profiling the battery."""

from __future__ import annotations

import cProfile
import io
import pstats
import statistics
import timeit
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

from .analyzers import Analyzer
from .app import BatteryApp
from .config import BatteryConfig
from .generators import IntegerGenerator


def benchmark_analyzer(
    analyzer: Analyzer, generator: IntegerGenerator, *, repeat: int = 5
) -> Mapping[str, float]:
    """Time ``analyzer.run`` against ``generator``; each repeat draws afresh."""

    timer = timeit.Timer(lambda: analyzer.run(generator))
    runs = timer.repeat(repeat=repeat, number=1)
    return {
        "min": min(runs),
        "max": max(runs),
        "mean": statistics.fmean(runs),
    }


def profile_battery(config: BatteryConfig, *, limit: int = 25) -> str:
    """Profile one full run of ``config`` using :mod:`cProfile`."""

    app = BatteryApp()
    profiler = cProfile.Profile()
    profiler.runcall(app.run_config, config, stream=io.StringIO())
    return _format_stats(profiler, limit)


@contextmanager
def capture_profile() -> Iterator[Callable[[int], str]]:
    """Profile the body of the ``with`` block.

    The yielded callable stops profiling and returns a formatted summary.
    """

    profiler = cProfile.Profile()
    profiler.enable()

    def exporter(limit: int = 25) -> str:
        profiler.disable()
        return _format_stats(profiler, limit)

    try:
        yield exporter
    finally:
        profiler.disable()


def _format_stats(profiler: cProfile.Profile, limit: int) -> str:
    stream = io.StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.strip_dirs().sort_stats("cumulative").print_stats(limit)
    return stream.getvalue()


__all__ = ["benchmark_analyzer", "capture_profile", "profile_battery"]
