"""Application orchestration for the generator test battery."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Sequence, TextIO, Tuple

from .analyzers import Analyzer, AnalyzerFailure, build_analyzer_suite
from .config import BatteryConfig, load_config
from .errors import BatteryError
from .generators import (
    AmbientSource,
    BoxMullerGenerator,
    IntegerGenerator,
    build_integer_generators,
)
from .logging import log_run_result
from .reporting import (
    Section,
    print_console_summary,
    write_normal_sample,
    write_section,
)


@dataclass(frozen=True)
class NormalSample:
    """Deviates drawn from the Box-Muller generator for display."""

    label: str
    mu: float
    sigma: float
    values: Tuple[float, ...]


@dataclass(frozen=True)
class RunResult:
    """Summary of a full battery run."""

    config_path: Path | None
    seed: int
    sections: Tuple[Section, ...]
    normal_sample: NormalSample | None
    started_at: datetime
    duration: timedelta

    @property
    def failures(self) -> Tuple[AnalyzerFailure, ...]:
        return tuple(s for s in self.sections if isinstance(s, AnalyzerFailure))

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def generator_labels(self) -> Tuple[str, ...]:
        labels: List[str] = []
        for section in self.sections:
            if section.label not in labels:
                labels.append(section.label)
        if self.normal_sample is not None:
            labels.append(self.normal_sample.label)
        return tuple(labels)


class BatteryApp:
    """High level service wiring configuration, execution, and rendering."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(
        self,
        config_path: Path | None = None,
        *,
        source: AmbientSource | None = None,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> RunResult:
        """Execute every enabled analyzer against every enabled generator."""

        config = load_config(config_path)
        return self.run_config(config, source=source, verbose=verbose, stream=stream)

    def run_config(
        self,
        config: BatteryConfig,
        *,
        source: AmbientSource | None = None,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> RunResult:
        output = stream if stream is not None else sys.stdout
        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()

        if source is None:
            source = AmbientSource(config.source.seed, range_max=config.source.range_max)
        analyzers = build_analyzer_suite(config)
        generators = build_integer_generators(source, config.generators.enabled)

        sections: List[Section] = []
        for generator in generators:
            sections.extend(self._run_generator(generator, analyzers, output))

        normal_sample = None
        if "normal" in config.generators.enabled:
            normal_sample = self._sample_normal(source, config)
            write_normal_sample(normal_sample, output)

        result = RunResult(
            config_path=config.path,
            seed=source.seed,
            sections=tuple(sections),
            normal_sample=normal_sample,
            started_at=started_at,
            duration=timedelta(seconds=time.perf_counter() - started),
        )
        if verbose:
            print_console_summary(result, verbose=True, stream=output)
        if config.logging.enabled:
            log_run_result(
                result,
                log_path=config.logging.path,
                fmt=config.logging.format,
                retention=config.logging.retention,
            )
        return result

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    def _run_generator(
        self,
        generator: IntegerGenerator,
        analyzers: Sequence[Analyzer],
        output: TextIO,
    ) -> List[Section]:
        sections: List[Section] = []
        for analyzer in analyzers:
            section: Section
            try:
                section = analyzer.run(generator)
            except BatteryError as exc:
                section = AnalyzerFailure(
                    name=analyzer.name,
                    title=analyzer.title,
                    label=generator.label,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            write_section(section, output)
            sections.append(section)
        return sections

    def _sample_normal(self, source: AmbientSource, config: BatteryConfig) -> NormalSample:
        params = config.parameters
        generator = BoxMullerGenerator(source)
        return NormalSample(
            label=generator.label,
            mu=params.normal_mean,
            sigma=params.normal_sigma,
            values=generator.sample(params.normal_samples, params.normal_mean, params.normal_sigma),
        )


__all__ = ["BatteryApp", "NormalSample", "RunResult"]
