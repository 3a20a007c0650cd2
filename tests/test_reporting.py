"""Tests for :mod:`prngcheck.reporting`."""

from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import numpy as np

from prngcheck import reporting
from prngcheck.analyzers import AnalyzerFailure, AnalyzerResult, FrequencyTable, IntervalHistogram
from prngcheck.app import NormalSample, RunResult


def _failure() -> AnalyzerFailure:
    return AnalyzerFailure(
        name="runs",
        title="Runs Test",
        label="mod_rand",
        error_type="DegenerateInputError",
        message="Runs test needs at least one draw, got sample size 0.",
    )


def _chi_square() -> AnalyzerResult:
    return AnalyzerResult(
        name="chi_square",
        title="Chi-square Test",
        label="uniform_rand",
        value=2 / 3,
        p_value=0.8812,
    )


def test_frequency_section_lists_every_value() -> None:
    result = AnalyzerResult(
        name="frequency",
        title="Frequency Test",
        label="mod_rand",
        value=FrequencyTable(np.array([3, 0, 2])),
    )

    assert reporting.format_section(result) == [
        "",
        "[Frequency Test] mod_rand",
        "Value\tFrequency",
        "0\t3",
        "1\t0",
        "2\t2",
    ]


def test_interval_section_skips_empty_gaps() -> None:
    histogram = IntervalHistogram(np.zeros(6, dtype=np.int64))
    for gap in (1, 4, 4, 9):
        histogram.record(gap)
    result = AnalyzerResult(
        name="interval", title="Interval Test", label="mod_rand", value=histogram
    )

    assert reporting.format_section(result)[1:] == [
        "[Interval Test] mod_rand",
        "Interval\tCount",
        "1\t\t1",
        "4\t\t2",
    ]


def test_scalar_sections() -> None:
    autocorrelation = AnalyzerResult(
        name="autocorrelation",
        title="Autocorrelation Test",
        label="mod_rand",
        value=-0.0001234,
        parameters={"lag": 1},
    )
    runs = AnalyzerResult(name="runs", title="Runs Test", label="mod_rand", value=11)

    assert reporting.format_section(_chi_square())[1:] == [
        "[Chi-square Test] uniform_rand",
        "Chi-square value: 0.666667",
    ]
    assert reporting.format_section(autocorrelation)[1:] == [
        "[Autocorrelation Test] mod_rand (lag 1)",
        "Autocorrelation (lag 1): -0.000123",
    ]
    assert reporting.format_section(runs)[1:] == [
        "[Runs Test] mod_rand",
        "Number of runs: 11",
    ]


def test_failure_section_replaces_numbers_with_diagnostic() -> None:
    lines = reporting.format_section(_failure())

    assert lines[1] == "[Runs Test] mod_rand"
    assert lines[2].startswith("Error (DegenerateInputError): ")
    assert len(lines) == 3


def test_normal_sample_section() -> None:
    sample = NormalSample(label="normal_rand", mu=0.0, sigma=1.0, values=(0.5, -1.25))
    buffer = io.StringIO()

    reporting.write_normal_sample(sample, buffer)

    assert buffer.getvalue() == (
        "\n[Normal Distribution Test] 2 samples (mean=0, std=1):\n0.500000 -1.250000\n"
    )


def test_print_console_summary_verbose() -> None:
    result = RunResult(
        config_path=None,
        seed=1234,
        sections=(_chi_square(), _failure()),
        normal_sample=None,
        started_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        duration=timedelta(seconds=1.5),
    )
    buffer = io.StringIO()

    reporting.print_console_summary(result, verbose=True, stream=buffer)
    output = buffer.getvalue()

    assert "Sections: 2 | Failed: 1" in output
    assert "Seed: 1234" in output
    assert "chi_square [uniform_rand]: ok (p-value 0.8812)" in output
    assert "runs [mod_rand]: DegenerateInputError" in output
    assert "Duration: 1.50 s" in output
