"""Ambient random source and the generator adapters placed under test.

The adapters expose a deliberately small capability: integer generators
provide ``draw(n)`` returning a value in ``[0, n)`` and, for throughput, an
optional vectorized ``draw_batch(n, size)``; the normal generator provides
``draw(mu, sigma)``.  Analyzers depend on nothing else, so any object with the
same methods (see :class:`ReplayGenerator`) can stand in for a real generator.
"""

from __future__ import annotations

import math
from typing import Iterable, Protocol, Sequence, Tuple

import numpy as np

from .config import MAX_RANGE_MAX
from .errors import DegenerateInputError, InvalidConfigurationError

RAND_MAX = 2**31 - 1
"""Largest integer produced by the ambient source unless configured otherwise."""


class AmbientSource:
    """Seeded source of raw integers shared by the adapters of one run."""

    def __init__(self, seed: int | None = None, *, range_max: int = RAND_MAX) -> None:
        if not 0 < range_max <= MAX_RANGE_MAX:
            raise InvalidConfigurationError(
                f"Ambient source range must be between 1 and {MAX_RANGE_MAX}."
            )
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
        self.seed = int(seed)
        self.range_max = int(range_max)
        self._rng = np.random.default_rng(self.seed)

    @property
    def range_size(self) -> int:
        """Number of distinct integers the source can produce."""

        return self.range_max + 1

    def next_integer(self) -> int:
        return int(self._rng.integers(0, self.range_max, endpoint=True))

    def next_integers(self, size: int) -> np.ndarray:
        return self._rng.integers(0, self.range_max, size=size, endpoint=True, dtype=np.int64)

    def next_unit(self) -> float:
        """Return a draw rescaled into the open interval (0, 1)."""

        return (self.next_integer() + 1.0) / (self.range_max + 2.0)

    def next_units(self, size: int) -> np.ndarray:
        return (self.next_integers(size) + 1.0) / (self.range_max + 2.0)


class IntegerGenerator(Protocol):
    """Capability consumed by every analyzer."""

    label: str

    def draw(self, n: int) -> int:
        """Return an integer intended to be uniform over ``[0, n)``."""


class NormalGenerator(Protocol):
    label: str

    def draw(self, mu: float, sigma: float) -> float:
        """Return a deviate from the normal distribution ``N(mu, sigma^2)``."""


def _check_range(n: int, source: AmbientSource) -> None:
    if n <= 0:
        raise DegenerateInputError(f"Value range must be positive, got {n}.")
    if n > source.range_size:
        raise DegenerateInputError(
            f"Value range {n} exceeds the ambient source range {source.range_size}."
        )


class ModuloGenerator:
    """Reduce raw draws modulo ``n``.

    Low values are over-represented whenever the source range is not a
    multiple of ``n``; that bias is what the battery measures.
    """

    label = "mod_rand"

    def __init__(self, source: AmbientSource) -> None:
        self._source = source

    def draw(self, n: int) -> int:
        _check_range(n, self._source)
        return self._source.next_integer() % n

    def draw_batch(self, n: int, size: int) -> np.ndarray:
        _check_range(n, self._source)
        return self._source.next_integers(size) % n


class UniformGenerator:
    """Reject the biased tail of the source range, then rescale into ``[0, n)``.

    Draws at or above ``limit`` (the largest multiple of ``n`` within the
    source range) are redrawn.  An accepted draw ``d`` maps to
    ``floor(d / limit * n)``, evaluated exactly as ``d // (limit // n)``.
    """

    label = "uniform_rand"

    def __init__(self, source: AmbientSource) -> None:
        self._source = source

    def _limit(self, n: int) -> int:
        _check_range(n, self._source)
        size = self._source.range_size
        return size - size % n

    def draw(self, n: int) -> int:
        limit = self._limit(n)
        while True:
            value = self._source.next_integer()
            if value < limit:
                return value // (limit // n)

    def draw_batch(self, n: int, size: int) -> np.ndarray:
        limit = self._limit(n)
        width = limit // n
        values = np.empty(size, dtype=np.int64)
        filled = 0
        while filled < size:
            raw = self._source.next_integers(size - filled)
            accepted = raw[raw < limit]
            values[filled : filled + accepted.size] = accepted // width
            filled += accepted.size
        return values


class BoxMullerGenerator:
    """Normal deviates via the Box-Muller transform.

    Each deviate consumes two uniform draws; the sine companion is discarded.
    """

    label = "normal_rand"

    def __init__(self, source: AmbientSource) -> None:
        self._source = source

    def draw(self, mu: float = 0.0, sigma: float = 1.0) -> float:
        # next_unit() never returns 0, so log(u1) is finite.
        u1 = self._source.next_unit()
        u2 = self._source.next_unit()
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mu + sigma * z0

    def sample(self, count: int, mu: float = 0.0, sigma: float = 1.0) -> Tuple[float, ...]:
        return tuple(self.draw(mu, sigma) for _ in range(count))


class ReplayGenerator:
    """Deterministic generator cycling through a fixed sequence of values.

    ``n`` is ignored, which makes it suitable for reproducing a known draw
    stream in tests.
    """

    def __init__(self, values: Iterable[int], label: str = "replay") -> None:
        self._values = np.asarray(tuple(values), dtype=np.int64)
        if self._values.size == 0:
            raise ValueError("ReplayGenerator requires at least one value.")
        self._position = 0
        self.label = label

    def draw(self, n: int) -> int:
        value = int(self._values[self._position])
        self._position = (self._position + 1) % self._values.size
        return value

    def draw_batch(self, n: int, size: int) -> np.ndarray:
        indices = (self._position + np.arange(size)) % self._values.size
        self._position = int((self._position + size) % self._values.size)
        return self._values[indices]


INTEGER_GENERATORS = {
    "modulo": ModuloGenerator,
    "uniform": UniformGenerator,
}


def build_integer_generators(
    source: AmbientSource, names: Sequence[str]
) -> Tuple[IntegerGenerator, ...]:
    """Instantiate the enabled integer adapters in battery order."""

    return tuple(
        factory(source) for key, factory in INTEGER_GENERATORS.items() if key in names
    )


__all__ = [
    "AmbientSource",
    "BoxMullerGenerator",
    "IntegerGenerator",
    "ModuloGenerator",
    "NormalGenerator",
    "RAND_MAX",
    "ReplayGenerator",
    "UniformGenerator",
    "build_integer_generators",
]
