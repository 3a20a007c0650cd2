"""Run-history log recording when the battery ran and how it went.

Only run metadata is kept; the statistics themselves are never written.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass
from datetime import timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .app import RunResult


LOG_FIELDNAMES = (
    "timestamp",
    "seed",
    "generators",
    "sections",
    "failures",
    "status",
    "duration_seconds",
)
"""Ordered field names used for CSV and JSON payloads."""

DEFAULT_LOG_PATH = Path("logs") / "run_log.jsonl"


@dataclass(frozen=True)
class RunLogRecord:
    """Structured representation of a logged battery run."""

    timestamp: str
    seed: str
    generators: str
    sections: int
    failures: int
    status: str
    duration_seconds: float

    @classmethod
    def from_run_result(cls, result: "RunResult") -> "RunLogRecord":
        return cls(
            timestamp=result.started_at.astimezone(timezone.utc).isoformat(),
            # Seeds may exceed 64 bits, so keep them as text.
            seed=str(result.seed),
            generators=";".join(result.generator_labels),
            sections=len(result.sections),
            failures=len(result.failures),
            status="OK" if result.succeeded else "FAILED",
            duration_seconds=round(result.duration.total_seconds(), 3),
        )

    def to_dict(self) -> dict[str, str | int | float]:
        return asdict(self)


def log_run_result(
    result: "RunResult",
    *,
    log_path: Path | None = None,
    fmt: str = "jsonl",
    retention: int | None = 100,
) -> Path:
    """Append ``result`` to the run log and enforce retention limits."""

    normalised_format = fmt.lower()
    if normalised_format not in {"jsonl", "csv"}:
        raise ValueError(f"Unsupported log format: {fmt}")
    record = RunLogRecord.from_run_result(result)
    target = _prepare_log_path(log_path)
    if normalised_format == "jsonl":
        with target.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
    else:
        is_new_file = not target.exists() or target.stat().st_size == 0
        with target.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=LOG_FIELDNAMES)
            if is_new_file:
                writer.writeheader()
            writer.writerow(record.to_dict())
    if retention is not None and retention > 0:
        trim_log(target, retention, fmt=normalised_format)
    return target


def trim_log(path: Path, max_entries: int, *, fmt: str = "jsonl") -> None:
    """Keep only the last ``max_entries`` records of ``path``."""

    if max_entries <= 0 or not path.exists():
        return
    with path.open("r", encoding="utf-8") as handle:
        lines = handle.readlines()
    header: list[str] = []
    if fmt == "csv" and lines:
        header, lines = lines[:1], lines[1:]
    if len(lines) <= max_entries:
        return
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.writelines(header + lines[-max_entries:])


def _prepare_log_path(path: Path | None) -> Path:
    candidate = Path(path).expanduser() if path is not None else DEFAULT_LOG_PATH
    resolved = candidate.resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


__all__ = ["RunLogRecord", "log_run_result", "trim_log"]
