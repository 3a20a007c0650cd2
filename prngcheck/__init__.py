"""Statistical test battery for pseudo-random number generators."""

from .app import BatteryApp, NormalSample, RunResult
from .generators import (
    AmbientSource,
    BoxMullerGenerator,
    ModuloGenerator,
    ReplayGenerator,
    UniformGenerator,
)

__all__ = [
    "AmbientSource",
    "BatteryApp",
    "BoxMullerGenerator",
    "ModuloGenerator",
    "NormalSample",
    "ReplayGenerator",
    "RunResult",
    "UniformGenerator",
]
