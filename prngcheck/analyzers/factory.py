"""Factory utilities for registering and instantiating analyzers."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping

from ..config import BatteryConfig, BatteryParameters
from ..errors import InvalidConfigurationError
from .base import Analyzer
from .statistical import (
    AutocorrelationAnalyzer,
    ChiSquareAnalyzer,
    FrequencyAnalyzer,
    IntervalAnalyzer,
    RunsAnalyzer,
)

AnalyzerFactory = Callable[[BatteryParameters], Analyzer]


def _default_registry() -> Dict[str, AnalyzerFactory]:
    return {
        "frequency": lambda p: FrequencyAnalyzer(
            p.value_range, p.sample_size, batch_size=p.batch_size
        ),
        "interval": lambda p: IntervalAnalyzer(
            p.value_range,
            p.sample_size,
            bucket_count=p.interval_buckets,
            batch_size=p.batch_size,
        ),
        "chi_square": lambda p: ChiSquareAnalyzer(
            p.value_range, p.sample_size, batch_size=p.batch_size
        ),
        "autocorrelation": lambda p: AutocorrelationAnalyzer(
            p.value_range, p.sample_size, lag=p.lag, batch_size=p.batch_size
        ),
        "runs": lambda p: RunsAnalyzer(
            p.value_range, p.sample_size, batch_size=p.batch_size
        ),
    }


DEFAULT_ANALYZERS: Mapping[str, AnalyzerFactory] = _default_registry()


def build_analyzer_suite(
    config: BatteryConfig,
    *,
    registry: Mapping[str, AnalyzerFactory] | None = None,
) -> List[Analyzer]:
    """Construct the enabled analyzers in configuration order."""

    factories = dict(registry or DEFAULT_ANALYZERS)
    suite: List[Analyzer] = []
    for name in config.tests.enabled_tests:
        factory = factories.get(name)
        if factory is None:
            raise InvalidConfigurationError(f"Unknown analyzer '{name}' in configuration.")
        suite.append(factory(config.parameters))
    return suite


__all__ = ["DEFAULT_ANALYZERS", "build_analyzer_suite"]
