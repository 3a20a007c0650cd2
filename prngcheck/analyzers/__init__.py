"""Statistical analyzers run by the battery."""

from .base import (
    Analyzer,
    AnalyzerFailure,
    AnalyzerResult,
    FrequencyTable,
    IntervalHistogram,
)
from .factory import DEFAULT_ANALYZERS, build_analyzer_suite
from .statistical import (
    AutocorrelationAnalyzer,
    ChiSquareAnalyzer,
    FrequencyAnalyzer,
    IntervalAnalyzer,
    RunsAnalyzer,
)

__all__ = [
    "Analyzer",
    "AnalyzerFailure",
    "AnalyzerResult",
    "AutocorrelationAnalyzer",
    "ChiSquareAnalyzer",
    "DEFAULT_ANALYZERS",
    "FrequencyAnalyzer",
    "FrequencyTable",
    "IntervalAnalyzer",
    "IntervalHistogram",
    "RunsAnalyzer",
    "build_analyzer_suite",
]
