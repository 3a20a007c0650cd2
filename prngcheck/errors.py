"""Custom exceptions for the generator test battery."""

from __future__ import annotations


class BatteryError(Exception):
    """Base error type for application specific failures."""


class MissingFileError(BatteryError):
    """Raised when a required input file could not be located."""


class InvalidConfigurationError(BatteryError):
    """Raised when the configuration file is malformed or invalid."""


class DomainError(BatteryError):
    """Raised when a statistic is undefined for the sampled data."""


class DegenerateInputError(DomainError):
    """Raised when a sample size or value range is not strictly positive."""


class ZeroVarianceError(DomainError):
    """Raised when every sampled value is identical."""


class GeneratorRangeError(DomainError):
    """Raised when a generator emits a value outside ``[0, n)``."""


class ResourceError(BatteryError):
    """Raised when the battery cannot obtain the resources it needs."""


class AllocationFailureError(ResourceError):
    """Raised when a counting table or sample buffer cannot be allocated."""
