"""Configuration parsing utilities for the generator test battery.

Every option is optional.  A run without a configuration file uses the fixed
constants below, which reproduce the reference battery: ten thousand distinct
values, one hundred million draws per analyzer, a gap histogram of one hundred
buckets, lag-1 autocorrelation and ten normal deviates.
"""

from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .errors import InvalidConfigurationError, MissingFileError

DEFAULT_VALUE_RANGE = 10_000
DEFAULT_SAMPLE_SIZE = 100_000_000
DEFAULT_INTERVAL_BUCKETS = 100
DEFAULT_LAG = 1
DEFAULT_NORMAL_SAMPLES = 10
DEFAULT_NORMAL_MEAN = 0.0
DEFAULT_NORMAL_SIGMA = 1.0
DEFAULT_RANGE_MAX = 2**31 - 1
MAX_RANGE_MAX = 2**63 - 2
"""Largest raw range that still leaves room for int64 draws."""
DEFAULT_BATCH_SIZE = 1 << 20

GENERATOR_NAMES: Tuple[str, ...] = ("modulo", "uniform", "normal")
"""Known generator adapters in the order the battery visits them."""

ANALYZER_NAMES: Tuple[str, ...] = (
    "frequency",
    "interval",
    "chi_square",
    "autocorrelation",
    "runs",
)
"""Known analyzers in the order they run for each generator."""


@dataclass(frozen=True)
class BatteryParameters:
    """Sizes shared by every analyzer invocation of a run."""

    value_range: int = DEFAULT_VALUE_RANGE
    sample_size: int = DEFAULT_SAMPLE_SIZE
    interval_buckets: int = DEFAULT_INTERVAL_BUCKETS
    lag: int = DEFAULT_LAG
    normal_samples: int = DEFAULT_NORMAL_SAMPLES
    normal_mean: float = DEFAULT_NORMAL_MEAN
    normal_sigma: float = DEFAULT_NORMAL_SIGMA
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass(frozen=True)
class SourceSection:
    """Settings of the ambient random source."""

    seed: int | None = None
    range_max: int = DEFAULT_RANGE_MAX


@dataclass(frozen=True)
class GeneratorsSection:
    """Generator adapters enabled for the run, in battery order."""

    enabled: Tuple[str, ...] = GENERATOR_NAMES


@dataclass(frozen=True)
class TestsSection:
    """Analyzers enabled for the run, in battery order."""

    enabled_tests: Tuple[str, ...] = ANALYZER_NAMES


@dataclass(frozen=True)
class LoggingSection:
    """Options for the optional run-history log."""

    enabled: bool = False
    path: Path = Path("logs") / "run_log.jsonl"
    format: str = "jsonl"
    retention: int | None = 100


@dataclass(frozen=True)
class BatteryConfig:
    """Aggregate configuration container returned by :func:`load_config`."""

    parameters: BatteryParameters = field(default_factory=BatteryParameters)
    source: SourceSection = field(default_factory=SourceSection)
    generators: GeneratorsSection = field(default_factory=GeneratorsSection)
    tests: TestsSection = field(default_factory=TestsSection)
    logging: LoggingSection = field(default_factory=LoggingSection)
    path: Path | None = None


def load_config(path: Path | None = None) -> BatteryConfig:
    """Load and validate an INI configuration file.

    ``None`` returns the default configuration.
    """

    if path is None:
        return BatteryConfig()

    parser = configparser.ConfigParser()
    try:
        with Path(path).open("r", encoding="utf-8") as config_file:
            parser.read_file(config_file)
    except FileNotFoundError as exc:
        raise MissingFileError(f"Configuration file not found: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read configuration file: {path}") from exc
    except configparser.Error as exc:
        raise InvalidConfigurationError(f"Configuration is not valid INI: {exc}") from exc

    resolved = Path(path).resolve()
    return BatteryConfig(
        parameters=_parse_parameters(parser),
        source=_parse_source(parser),
        generators=GeneratorsSection(
            enabled=_parse_switches(parser, "generators", GENERATOR_NAMES)
        ),
        tests=TestsSection(
            enabled_tests=_parse_switches(parser, "tests", ANALYZER_NAMES)
        ),
        logging=_parse_logging(parser, resolved.parent),
        path=resolved,
    )


def _parse_parameters(parser: configparser.ConfigParser) -> BatteryParameters:
    defaults = BatteryParameters()
    if not parser.has_section("battery"):
        return defaults
    section = parser["battery"]
    batch_size = _get_int(section, "batch_size", defaults.batch_size)
    if batch_size <= 0:
        raise InvalidConfigurationError(
            "Option 'batch_size' in [battery] must be greater than zero."
        )
    return BatteryParameters(
        value_range=_get_int(section, "value_range", defaults.value_range),
        sample_size=_get_int(section, "sample_size", defaults.sample_size),
        interval_buckets=_get_int(section, "interval_buckets", defaults.interval_buckets),
        lag=_get_int(section, "lag", defaults.lag),
        normal_samples=_get_int(section, "normal_samples", defaults.normal_samples),
        normal_mean=_get_float(section, "normal_mean", defaults.normal_mean),
        normal_sigma=_get_float(section, "normal_sigma", defaults.normal_sigma),
        batch_size=batch_size,
    )


def _parse_source(parser: configparser.ConfigParser) -> SourceSection:
    if not parser.has_section("source"):
        return SourceSection()
    section = parser["source"]
    seed: int | None = None
    raw_seed = section.get("seed", "").strip()
    if raw_seed:
        seed = _get_int(section, "seed", 0)
    range_max = _get_int(section, "range_max", DEFAULT_RANGE_MAX)
    if not 0 < range_max <= MAX_RANGE_MAX:
        raise InvalidConfigurationError(
            f"Option 'range_max' in [source] must be between 1 and {MAX_RANGE_MAX}."
        )
    return SourceSection(seed=seed, range_max=range_max)


def _parse_switches(
    parser: configparser.ConfigParser, section_name: str, known: Tuple[str, ...]
) -> Tuple[str, ...]:
    if not parser.has_section(section_name):
        return known

    switches: dict[str, bool] = {}
    for name, _ in parser.items(section_name):
        if name not in known:
            raise InvalidConfigurationError(
                f"Unknown entry '{name}' in [{section_name}] section."
            )
        try:
            switches[name] = parser.getboolean(section_name, name)
        except ValueError as exc:
            raise InvalidConfigurationError(
                f"Entry '{name}' in [{section_name}] must be a boolean value."
            ) from exc

    # Omitted entries stay enabled; order always follows ``known``.
    return tuple(name for name in known if switches.get(name, True))


def _parse_logging(parser: configparser.ConfigParser, base_dir: Path) -> LoggingSection:
    defaults = LoggingSection()
    if not parser.has_section("logging"):
        return LoggingSection(
            enabled=defaults.enabled,
            path=(base_dir / defaults.path).resolve(),
            format=defaults.format,
            retention=defaults.retention,
        )
    section = parser["logging"]

    try:
        enabled = section.getboolean("enabled", fallback=defaults.enabled)
    except ValueError as exc:
        raise InvalidConfigurationError(
            "Option 'enabled' in [logging] must be a boolean value."
        ) from exc

    log_path = base_dir / defaults.path
    raw_path = section.get("path", "").strip()
    if raw_path:
        candidate = Path(raw_path).expanduser()
        log_path = candidate if candidate.is_absolute() else base_dir / candidate

    log_format = section.get("format", defaults.format).strip().lower()
    if log_format not in {"jsonl", "csv"}:
        raise InvalidConfigurationError(
            "Option 'format' in [logging] must be either 'jsonl' or 'csv'."
        )

    retention = defaults.retention
    raw_retention = section.get("retention", "").strip()
    if raw_retention:
        parsed = _get_int(section, "retention", 0)
        retention = parsed if parsed > 0 else None

    return LoggingSection(
        enabled=enabled,
        path=log_path.resolve(),
        format=log_format,
        retention=retention,
    )


def _get_int(section: configparser.SectionProxy, key: str, default: int) -> int:
    raw = section.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw.replace("_", ""))
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section.name}] must be an integer value."
        ) from exc
    if value < 0:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section.name}] must not be negative."
        )
    return value


def _get_float(section: configparser.SectionProxy, key: str, default: float) -> float:
    raw = section.get(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section.name}] must be numeric."
        ) from exc


__all__ = [
    "ANALYZER_NAMES",
    "BatteryConfig",
    "BatteryParameters",
    "GENERATOR_NAMES",
    "GeneratorsSection",
    "LoggingSection",
    "SourceSection",
    "TestsSection",
    "load_config",
]
