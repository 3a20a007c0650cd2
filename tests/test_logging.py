from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from prngcheck.analyzers import AnalyzerFailure, AnalyzerResult
from prngcheck.app import NormalSample, RunResult
from prngcheck.logging import log_run_result


def _make_run_result(*, failed: bool = False, idx: int = 0) -> RunResult:
    started_at = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=idx)
    sections: tuple = (
        AnalyzerResult(name="runs", title="Runs Test", label="mod_rand", value=42),
    )
    if failed:
        sections += (
            AnalyzerFailure(
                name="autocorrelation",
                title="Autocorrelation Test",
                label="uniform_rand",
                error_type="ZeroVarianceError",
                message="All sampled values are identical.",
            ),
        )
    return RunResult(
        config_path=None,
        seed=2**70 + idx,
        sections=sections,
        normal_sample=NormalSample(label="normal_rand", mu=0.0, sigma=1.0, values=(0.1,)),
        started_at=started_at,
        duration=timedelta(seconds=5),
    )


def test_log_run_result_appends_jsonl(tmp_path: Path) -> None:
    log_file = log_run_result(_make_run_result(), log_path=tmp_path / "log.jsonl", fmt="jsonl")

    payload = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert len(payload) == 1
    entry = json.loads(payload[0])
    assert entry["status"] == "OK"
    assert entry["seed"] == str(2**70)
    assert entry["generators"] == "mod_rand;normal_rand"
    assert entry["sections"] == 1
    assert entry["failures"] == 0
    assert entry["duration_seconds"] == pytest.approx(5.0)


def test_log_run_result_enforces_jsonl_retention(tmp_path: Path) -> None:
    log_path = tmp_path / "history.jsonl"

    for idx in range(5):
        log_run_result(_make_run_result(idx=idx), log_path=log_path, retention=3)

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 3
    timestamps = [json.loads(line)["timestamp"] for line in lines]
    assert timestamps == sorted(timestamps)
    assert timestamps[0].startswith("2024-01-01T00:02")


def test_log_run_result_supports_csv_with_retention(tmp_path: Path) -> None:
    log_path = tmp_path / "runs.csv"

    for idx in range(4):
        log_run_result(
            _make_run_result(failed=True, idx=idx), log_path=log_path, fmt="csv", retention=2
        )

    content = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert content[0] == "timestamp,seed,generators,sections,failures,status,duration_seconds"
    assert len(content) == 3
    row = content[-1].split(",")
    assert row[4:6] == ["1", "FAILED"]


def test_log_run_result_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        log_run_result(_make_run_result(), log_path=tmp_path / "log.xml", fmt="xml")
