from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from prngcheck.__main__ import (
    EXIT_INVALID_CONFIG,
    EXIT_MISSING_FILE,
    EXIT_SUCCESS,
    EXIT_TEST_FAILURE,
    EXIT_UNEXPECTED_ERROR,
    _build_parser,
    main,
)
from prngcheck.analyzers import AnalyzerFailure
from prngcheck.app import BatteryApp
from prngcheck.generators import AmbientSource

CONFIG_TEMPLATE = """
[battery]
value_range = 20
sample_size = {sample_size}
batch_size = 64

[source]
seed = 123
""".strip()


def _write_config(tmp_path: Path, sample_size: int = 500, extra: str = "") -> Path:
    config_path = tmp_path / "battery.ini"
    config_path.write_text(
        CONFIG_TEMPLATE.format(sample_size=sample_size) + "\n" + extra, encoding="utf-8"
    )
    return config_path


def test_app_run_renders_every_section(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    buffer = io.StringIO()

    result = BatteryApp().run(config_path, stream=buffer)
    output = buffer.getvalue()

    assert result.succeeded
    assert result.seed == 123
    assert len(result.sections) == 10
    assert [s.label for s in result.sections[:5]] == ["mod_rand"] * 5
    assert [s.label for s in result.sections[5:]] == ["uniform_rand"] * 5
    assert result.normal_sample is not None
    assert len(result.normal_sample.values) == 10
    for header in (
        "[Frequency Test] mod_rand",
        "[Interval Test] uniform_rand",
        "[Chi-square Test] mod_rand",
        "[Autocorrelation Test] uniform_rand (lag 1)",
        "[Runs Test] mod_rand",
        "[Normal Distribution Test] 10 samples (mean=0, std=1):",
    ):
        assert header in output
    assert output.index("mod_rand") < output.index("uniform_rand")


def test_app_run_is_reproducible_for_a_seed(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)

    first = BatteryApp().run(config_path, stream=io.StringIO())
    second = BatteryApp().run(config_path, stream=io.StringIO())

    assert first.sections[2].value == second.sections[2].value
    assert first.normal_sample.values == second.normal_sample.values


def test_injected_source_takes_precedence(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)

    result = BatteryApp().run(config_path, source=AmbientSource(seed=7), stream=io.StringIO())

    assert result.seed == 7


def test_failed_analyzers_do_not_stop_the_run(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, sample_size=0)
    buffer = io.StringIO()

    result = BatteryApp().run(config_path, stream=buffer)
    output = buffer.getvalue()

    failed = {(f.name, f.label) for f in result.failures}
    assert failed == {
        (name, label)
        for name in ("chi_square", "autocorrelation", "runs")
        for label in ("mod_rand", "uniform_rand")
    }
    assert not isinstance(result.sections[0], AnalyzerFailure)
    assert output.count("Error (DegenerateInputError)") == 6
    assert "Chi-square value" not in output
    assert "[Normal Distribution Test]" in output


def test_allocation_failure_is_reported_and_the_run_continues(tmp_path: Path) -> None:
    config_path = tmp_path / "huge.ini"
    config_path.write_text(
        "[battery]\nvalue_range = 10000000000000000000\nsample_size = 500\n"
        "batch_size = 64\n\n[source]\nseed = 123\n",
        encoding="utf-8",
    )
    buffer = io.StringIO()

    result = BatteryApp().run(config_path, stream=buffer)
    output = buffer.getvalue()

    failed = {f.name: f.error_type for f in result.failures if f.label == "mod_rand"}
    assert failed == {
        "frequency": "AllocationFailureError",
        "interval": "AllocationFailureError",
        "chi_square": "AllocationFailureError",
        "autocorrelation": "DegenerateInputError",
        "runs": "DegenerateInputError",
    }
    assert output.count("Error (AllocationFailureError)") == 6
    assert "[Runs Test] uniform_rand" in output
    assert "[Normal Distribution Test]" in output


def test_main_exit_codes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(_write_config(tmp_path))]) == EXIT_SUCCESS

    degenerate = _write_config(tmp_path, sample_size=0)
    assert main(["-c", str(degenerate)]) == EXIT_TEST_FAILURE
    assert "Test execution failed" in capsys.readouterr().err

    assert main(["-c", str(tmp_path / "missing.ini")]) == EXIT_MISSING_FILE

    invalid = tmp_path / "invalid.ini"
    invalid.write_text("[battery]\nsample_size = lots\n", encoding="utf-8")
    assert main(["-c", str(invalid)]) == EXIT_INVALID_CONFIG

    oversized = tmp_path / "oversized.ini"
    oversized.write_text("[source]\nrange_max = 18446744073709551615\n", encoding="utf-8")
    assert main(["-c", str(oversized)]) == EXIT_INVALID_CONFIG


def test_exit_codes_are_distinct_and_ordered() -> None:
    assert [
        EXIT_SUCCESS,
        EXIT_UNEXPECTED_ERROR,
        EXIT_MISSING_FILE,
        EXIT_INVALID_CONFIG,
        EXIT_TEST_FAILURE,
    ] == [0, 1, 2, 3, 4]


def test_help_states_that_defaults_reproduce_the_battery() -> None:
    parser = _build_parser()

    assert "defaults reproduce the fixed battery" in parser.description
    assert parser.parse_args([]).config is None


def test_verbose_run_appends_summary(tmp_path: Path) -> None:
    buffer = io.StringIO()

    BatteryApp().run(_write_config(tmp_path), verbose=True, stream=buffer)

    assert "Seed: 123" in buffer.getvalue()
    assert "Sections: 10 | Failed: 0" in buffer.getvalue()


def test_run_log_is_written_when_enabled(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path, extra="\n[logging]\nenabled = true\npath = logs/history.jsonl\n"
    )

    BatteryApp().run(config_path, stream=io.StringIO())

    lines = (tmp_path / "logs" / "history.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["status"] == "OK"
    assert entry["seed"] == "123"
    assert entry["generators"] == "mod_rand;uniform_rand;normal_rand"
