"""Concrete implementations of the battery analyzers.

Each analyzer draws its own sample from the generator it is given; nothing is
shared between analyzers.  Draws are consumed in batches so that the large
default sample sizes stay tractable, but every batch is processed strictly in
draw order and the statistics are identical to a draw-by-draw evaluation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from ..config import DEFAULT_BATCH_SIZE, DEFAULT_INTERVAL_BUCKETS, DEFAULT_LAG
from ..errors import DegenerateInputError, DomainError, ZeroVarianceError
from ..generators import IntegerGenerator
from .base import Analyzer, AnalyzerResult, FrequencyTable, IntervalHistogram
from .utils import allocate, chi_square_sf, iter_draws, sample_dtype


@dataclass
class _BaseAnalyzer(Analyzer):
    name: str
    title: str
    value_range: int
    sample_size: int
    batch_size: int

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:  # pragma: no cover - abstract
        raise NotImplementedError

    def _draws(self, generator: IntegerGenerator) -> Iterator[np.ndarray]:
        return iter_draws(
            generator, self.value_range, self.sample_size, batch_size=self.batch_size
        )

    def _result(self, generator: IntegerGenerator, value, **kwargs) -> AnalyzerResult:
        return AnalyzerResult(
            name=self.name,
            title=self.title,
            label=getattr(generator, "label", type(generator).__name__),
            value=value,
            **kwargs,
        )


def count_frequencies(analyzer: _BaseAnalyzer, generator: IntegerGenerator) -> FrequencyTable:
    """Draw ``analyzer.sample_size`` values and count each one."""

    counts = allocate(max(analyzer.value_range, 0), np.int64, "frequency table")
    for values in analyzer._draws(generator):
        counts += np.bincount(values, minlength=counts.size)
    return FrequencyTable(counts)


class FrequencyAnalyzer(_BaseAnalyzer):
    def __init__(
        self, value_range: int, sample_size: int, *, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> None:
        super().__init__(
            name="frequency",
            title="Frequency Test",
            value_range=value_range,
            sample_size=sample_size,
            batch_size=batch_size,
        )

    def measure(self, generator: IntegerGenerator) -> FrequencyTable:
        return count_frequencies(self, generator)

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        return self._result(generator, self.measure(generator))


class IntervalAnalyzer(_BaseAnalyzer):
    """Histogram of the distance between repeated occurrences of a value."""

    def __init__(
        self,
        value_range: int,
        sample_size: int,
        *,
        bucket_count: int = DEFAULT_INTERVAL_BUCKETS,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        super().__init__(
            name="interval",
            title="Interval Test",
            value_range=value_range,
            sample_size=sample_size,
            batch_size=batch_size,
        )
        self.bucket_count = bucket_count

    def measure(self, generator: IntegerGenerator) -> IntervalHistogram:
        last_seen = allocate(max(self.value_range, 0), np.int64, "last-seen table", fill=-1)
        histogram = IntervalHistogram(
            allocate(max(self.bucket_count, 0), np.int64, "interval histogram")
        )
        offset = 0
        for values in self._draws(generator):
            _record_gaps(values, offset, last_seen, histogram)
            offset += values.size
        return histogram

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        return self._result(
            generator,
            self.measure(generator),
            parameters={"bucket_count": self.bucket_count},
        )


def _record_gaps(
    values: np.ndarray, offset: int, last_seen: np.ndarray, histogram: IntervalHistogram
) -> None:
    """Record the gaps of one batch and advance ``last_seen`` past it."""

    if values.size == 0:
        return
    positions = np.arange(offset, offset + values.size, dtype=np.int64)
    # A stable sort keeps the positions of equal values in draw order.
    order = np.argsort(values, kind="stable")
    ordered_values = values[order]
    ordered_positions = positions[order]
    repeat = ordered_values[1:] == ordered_values[:-1]

    histogram.record_many((ordered_positions[1:] - ordered_positions[:-1])[repeat])

    first = np.ones(values.size, dtype=bool)
    first[1:] = ~repeat
    first_values = ordered_values[first]
    previous = last_seen[first_values]
    seen = previous >= 0
    histogram.record_many(ordered_positions[first][seen] - previous[seen])

    last = np.ones(values.size, dtype=bool)
    last[:-1] = ~repeat
    last_seen[ordered_values[last]] = ordered_positions[last]


class ChiSquareAnalyzer(_BaseAnalyzer):
    def __init__(
        self, value_range: int, sample_size: int, *, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> None:
        super().__init__(
            name="chi_square",
            title="Chi-square Test",
            value_range=value_range,
            sample_size=sample_size,
            batch_size=batch_size,
        )

    def measure(self, generator: IntegerGenerator) -> float:
        if self.value_range <= 0:
            raise DegenerateInputError(
                f"Chi-square test needs a positive value range, got {self.value_range}."
            )
        if self.sample_size <= 0:
            raise DegenerateInputError(
                f"Chi-square test needs a positive sample size, got {self.sample_size}."
            )
        table = count_frequencies(self, generator)
        expected = self.sample_size / self.value_range
        deviations = table.counts - expected
        return float(np.dot(deviations, deviations) / expected)

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        statistic = self.measure(generator)
        return self._result(
            generator,
            statistic,
            p_value=chi_square_sf(statistic, self.value_range - 1),
        )


class AutocorrelationAnalyzer(_BaseAnalyzer):
    """Lag-k sample autocorrelation over a fully materialised sample.

    The numerator sums the ``S - k`` overlapping products while the
    denominator sums all ``S`` squared deviations, the usual convention for
    the sample autocorrelation estimator.
    """

    def __init__(
        self,
        value_range: int,
        sample_size: int,
        *,
        lag: int = DEFAULT_LAG,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        super().__init__(
            name="autocorrelation",
            title="Autocorrelation Test",
            value_range=value_range,
            sample_size=sample_size,
            batch_size=batch_size,
        )
        self.lag = lag

    def measure(self, generator: IntegerGenerator) -> float:
        if self.sample_size <= 0:
            raise DegenerateInputError(
                f"Autocorrelation needs a positive sample size, got {self.sample_size}."
            )
        if self.lag < 0:
            raise DegenerateInputError(f"Lag must not be negative, got {self.lag}.")

        sample = allocate(
            self.sample_size, sample_dtype(self.value_range), "sample sequence", fill=None
        )
        filled = 0
        for values in self._draws(generator):
            sample[filled : filled + values.size] = values
            filled += values.size

        mean = float(sample.mean(dtype=np.float64))
        numerator = 0.0
        denominator = 0.0
        step = self.batch_size
        overlap = max(self.sample_size - self.lag, 0)
        for start in range(0, self.sample_size, step):
            stop = min(start + step, self.sample_size)
            centred = sample[start:stop] - mean
            denominator += float(np.dot(centred, centred))
            if start < overlap:
                end = min(stop, overlap)
                shifted = sample[start + self.lag : end + self.lag] - mean
                numerator += float(np.dot(centred[: end - start], shifted))
        # Release the buffer before the next analyzer allocates its own.
        del sample

        if denominator == 0.0:
            raise ZeroVarianceError(
                "All sampled values are identical; autocorrelation is undefined."
            )
        value = numerator / denominator
        if not math.isfinite(value):
            raise DomainError(f"Autocorrelation evaluated to {value}.")
        return value

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        return self._result(
            generator, self.measure(generator), parameters={"lag": self.lag}
        )


class RunsAnalyzer(_BaseAnalyzer):
    def __init__(
        self, value_range: int, sample_size: int, *, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> None:
        super().__init__(
            name="runs",
            title="Runs Test",
            value_range=value_range,
            sample_size=sample_size,
            batch_size=batch_size,
        )

    def measure(self, generator: IntegerGenerator) -> int:
        if self.sample_size < 1:
            raise DegenerateInputError(
                f"Runs test needs at least one draw, got sample size {self.sample_size}."
            )
        runs = 1
        previous: int | None = None
        for values in self._draws(generator):
            if previous is not None and int(values[0]) != previous:
                runs += 1
            runs += int(np.count_nonzero(values[1:] != values[:-1]))
            previous = int(values[-1])
        return runs

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        return self._result(generator, self.measure(generator))


__all__ = [
    "AutocorrelationAnalyzer",
    "ChiSquareAnalyzer",
    "FrequencyAnalyzer",
    "IntervalAnalyzer",
    "RunsAnalyzer",
    "count_frequencies",
]
