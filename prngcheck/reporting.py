"""Plain-text rendering of battery sections and run summaries."""

from __future__ import annotations

import sys
from typing import Callable, Dict, List, Sequence, TYPE_CHECKING, TextIO, Union

from .analyzers.base import AnalyzerFailure, AnalyzerResult

if TYPE_CHECKING:
    from datetime import timedelta
    from .app import NormalSample, RunResult

Section = Union[AnalyzerResult, AnalyzerFailure]


def format_section(section: Section) -> List[str]:
    """Return the lines of one report section, leading blank line included."""

    if isinstance(section, AnalyzerFailure):
        return [
            "",
            _header(section),
            f"Error ({section.error_type}): {section.message}",
        ]
    formatter = _FORMATTERS.get(section.name)
    if formatter is None:
        return ["", _header(section), str(section.value)]
    return ["", *formatter(section)]


def format_normal_sample(sample: "NormalSample") -> List[str]:
    return [
        "",
        f"[Normal Distribution Test] {len(sample.values)} samples "
        f"(mean={sample.mu:g}, std={sample.sigma:g}):",
        " ".join(f"{value:f}" for value in sample.values),
    ]


def write_section(section: Section, stream: TextIO | None = None) -> None:
    output = stream if stream is not None else sys.stdout
    for line in format_section(section):
        print(line, file=output)


def write_normal_sample(sample: "NormalSample", stream: TextIO | None = None) -> None:
    output = stream if stream is not None else sys.stdout
    for line in format_normal_sample(sample):
        print(line, file=output)


def print_console_summary(result: "RunResult", *, verbose: bool = False, stream: TextIO | None = None) -> None:
    """Print a short summary of the run to ``stream``."""

    output = stream if stream is not None else sys.stdout
    failures = result.failures
    print("", file=output)
    print(
        f"Sections: {len(result.sections)} | Failed: {len(failures)}",
        file=output,
    )
    if not verbose:
        return

    print(f"Seed: {result.seed}", file=output)
    for section in result.sections:
        if isinstance(section, AnalyzerFailure):
            print(f" - {section.name} [{section.label}]: {section.error_type}", file=output)
            continue
        notes = _section_notes(section)
        suffix = f" ({', '.join(notes)})" if notes else ""
        print(f" - {section.name} [{section.label}]: ok{suffix}", file=output)
    print(f"Duration: {_format_duration(result.duration)}", file=output)


# ---------------------------------------------------------------------------
# Helper formatting utilities
# ---------------------------------------------------------------------------

def _header(section: Section) -> str:
    return f"[{section.title}] {section.label}"


def _format_frequency(result: AnalyzerResult) -> Sequence[str]:
    lines = [_header(result), "Value\tFrequency"]
    lines.extend(f"{value}\t{count}" for value, count in result.value.items())
    return lines


def _format_interval(result: AnalyzerResult) -> Sequence[str]:
    lines = [_header(result), "Interval\tCount"]
    lines.extend(f"{gap}\t\t{count}" for gap, count in result.value.nonzero())
    return lines


def _format_chi_square(result: AnalyzerResult) -> Sequence[str]:
    return [_header(result), f"Chi-square value: {result.value:f}"]


def _format_autocorrelation(result: AnalyzerResult) -> Sequence[str]:
    lag = result.parameters.get("lag")
    return [
        f"{_header(result)} (lag {lag})",
        f"Autocorrelation (lag {lag}): {result.value:f}",
    ]


def _format_runs(result: AnalyzerResult) -> Sequence[str]:
    return [_header(result), f"Number of runs: {result.value}"]


_FORMATTERS: Dict[str, Callable[[AnalyzerResult], Sequence[str]]] = {
    "frequency": _format_frequency,
    "interval": _format_interval,
    "chi_square": _format_chi_square,
    "autocorrelation": _format_autocorrelation,
    "runs": _format_runs,
}


def _section_notes(result: AnalyzerResult) -> List[str]:
    notes: List[str] = []
    if result.p_value is not None:
        notes.append(f"p-value {result.p_value:.4f}")
    discarded = getattr(result.value, "discarded", None)
    if discarded:
        notes.append(f"{discarded} gaps beyond histogram")
    return notes


def _format_duration(duration: "timedelta") -> str:
    total_seconds = duration.total_seconds()
    if total_seconds < 1:
        return f"{total_seconds * 1000:.0f} ms"
    return f"{total_seconds:.2f} s"


__all__ = [
    "format_normal_sample",
    "format_section",
    "print_console_summary",
    "write_normal_sample",
    "write_section",
]
