"""Common interfaces and data structures for the analyzers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Protocol, Tuple, Union

import numpy as np

from ..generators import IntegerGenerator


@dataclass(frozen=True)
class FrequencyTable:
    """Occurrence count for every value in ``[0, len(counts))``."""

    counts: np.ndarray

    @property
    def value_range(self) -> int:
        return int(self.counts.size)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def items(self) -> Iterator[Tuple[int, int]]:
        for value, count in enumerate(self.counts.tolist()):
            yield value, count


class IntervalHistogram:
    """Bounded histogram of gap lengths.

    Gaps at or beyond ``bucket_count`` are discarded, not clipped into the last
    bucket; :attr:`discarded` keeps track of how many were dropped.
    """

    def __init__(self, counts: np.ndarray) -> None:
        self.counts = counts
        self.discarded = 0

    @property
    def bucket_count(self) -> int:
        return int(self.counts.size)

    @property
    def recorded(self) -> int:
        return int(self.counts.sum())

    def record(self, gap: int) -> bool:
        if 0 <= gap < self.bucket_count:
            self.counts[gap] += 1
            return True
        self.discarded += 1
        return False

    def record_many(self, gaps: np.ndarray) -> None:
        if gaps.size == 0:
            return
        kept = gaps[(gaps >= 0) & (gaps < self.bucket_count)]
        self.discarded += int(gaps.size - kept.size)
        if kept.size:
            self.counts += np.bincount(kept, minlength=self.bucket_count)

    def nonzero(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(gap, count)`` pairs with a non-zero count, ascending."""

        for gap in range(1, self.bucket_count):
            count = int(self.counts[gap])
            if count > 0:
                yield gap, count


Statistic = Union[FrequencyTable, IntervalHistogram, float, int]


@dataclass(frozen=True)
class AnalyzerResult:
    """Outcome of one analyzer run against one generator."""

    name: str
    title: str
    label: str
    value: Statistic
    parameters: Mapping[str, int] = field(default_factory=dict)
    p_value: float | None = None


@dataclass(frozen=True)
class AnalyzerFailure:
    """Diagnostic recorded in place of a result when an analyzer raises."""

    name: str
    title: str
    label: str
    error_type: str
    message: str


class Analyzer(Protocol):
    """Protocol implemented by all analyzers."""

    name: str
    title: str

    def run(self, generator: IntegerGenerator) -> AnalyzerResult:
        """Draw a fresh sample from ``generator`` and compute the statistic."""
