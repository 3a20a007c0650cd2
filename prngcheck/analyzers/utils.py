"""Utility helpers shared by the analyzers."""

from __future__ import annotations

from typing import Iterator

import numpy as np
from scipy import stats

from ..errors import AllocationFailureError, GeneratorRangeError
from ..generators import IntegerGenerator


def allocate(size: int, dtype: np.dtype | type, what: str, *, fill: int | None = 0) -> np.ndarray:
    """Allocate a one dimensional array, translating allocation errors.

    ``fill=None`` leaves the buffer uninitialised.
    """

    try:
        if fill is None:
            return np.empty(size, dtype=dtype)
        return np.full(size, fill, dtype=dtype)
    except (MemoryError, ValueError, OverflowError) as exc:
        # numpy reports sizes beyond the platform index range as ValueError.
        raise AllocationFailureError(
            f"Could not allocate {what} of {size} entries."
        ) from exc


def iter_draws(
    generator: IntegerGenerator, n: int, count: int, *, batch_size: int
) -> Iterator[np.ndarray]:
    """Yield ``count`` draws from ``generator`` in consecutive batches.

    Generators without ``draw_batch`` are sampled one ``draw`` at a time.
    Every batch is checked to lie within ``[0, n)``.
    """

    draw_batch = getattr(generator, "draw_batch", None)
    remaining = count
    while remaining > 0:
        size = min(batch_size, remaining)
        if draw_batch is not None:
            values = np.asarray(draw_batch(n, size), dtype=np.int64)
        else:
            values = np.fromiter(
                (generator.draw(n) for _ in range(size)), dtype=np.int64, count=size
            )
        _check_bounds(values, n, generator)
        remaining -= size
        yield values


def _check_bounds(values: np.ndarray, n: int, generator: IntegerGenerator) -> None:
    if values.size == 0:
        return
    low, high = int(values.min()), int(values.max())
    if low < 0 or high >= n:
        label = getattr(generator, "label", type(generator).__name__)
        raise GeneratorRangeError(
            f"Generator '{label}' produced {low if low < 0 else high}, outside [0, {n})."
        )


def sample_dtype(n: int) -> type:
    """Smallest integer type used to buffer draws from ``[0, n)``."""

    return np.int32 if n <= np.iinfo(np.int32).max else np.int64


def chi_square_sf(statistic: float, degrees_of_freedom: int) -> float | None:
    """Upper-tail probability of the chi-square distribution."""

    if degrees_of_freedom <= 0:
        return None
    return float(stats.chi2.sf(statistic, degrees_of_freedom))
