"""
Domain models and enums.

This module defines the core domain-level types used across the system:
- Event kinds and the ordered event severity scale
- Measurement snapshots and the threshold / validation bounds applied to them
- RetryPolicy, which parameterizes the resilient operation executor

These are designed as immutable (frozen) dataclasses so they can be shared
across layers and threads without defensive copying by every consumer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, IntEnum


class EventKind(str, Enum):
    """
    Category of an event produced by threshold evaluation.

    Members
    -------
    TEMPERATURE_CHANGED : str
        Informational temperature update (also used as the liveness fallback).
    HUMIDITY_CHANGED : str
        Humidity crossed its upper threshold.
    PRESSURE_CHANGED : str
        Pressure left its configured band.
    CRITICAL_THRESHOLD : str
        Temperature left its configured band.
    GENERIC_ALERT : str
        System-level alert not tied to a single channel.
    """

    TEMPERATURE_CHANGED = "TEMPERATURE_CHANGED"
    HUMIDITY_CHANGED = "HUMIDITY_CHANGED"
    PRESSURE_CHANGED = "PRESSURE_CHANGED"
    CRITICAL_THRESHOLD = "CRITICAL_THRESHOLD"
    GENERIC_ALERT = "GENERIC_ALERT"


class Severity(IntEnum):
    """
    Ordered severity scale: ``LOW < MEDIUM < HIGH < CRITICAL``.

    The integer base makes comparisons (``>=``, ``max``) follow the scale
    rather than the alphabetical order of the names.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Measurement:
    """
    Immutable snapshot of the monitored environment.

    Parameters
    ----------
    temperature
        Temperature in degrees Celsius (signed).
    humidity
        Relative humidity in percent (0-100).
    pressure
        Barometric pressure in hPa.
    captured_at
        Timestamp when the snapshot was taken.
    """

    temperature: float
    humidity: float
    pressure: float
    captured_at: datetime

    def copy(self) -> "Measurement":
        """Return an equal, distinct instance."""
        return replace(self)


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Bounds that make a measurement noteworthy.

    Parameters
    ----------
    temperature_min, temperature_max
        Temperature at or beyond either bound is critical.
    humidity_max
        Humidity at or above this value is high.
    pressure_min, pressure_max
        Pressure at or beyond either bound is reported.
    """

    temperature_min: float = -10.0
    temperature_max: float = 40.0
    humidity_max: float = 95.0
    pressure_min: float = 950.0
    pressure_max: float = 1050.0

    def __post_init__(self) -> None:
        if self.temperature_min >= self.temperature_max:
            raise ValueError("temperature_min must be lower than temperature_max")
        if self.pressure_min >= self.pressure_max:
            raise ValueError("pressure_min must be lower than pressure_max")


@dataclass(frozen=True)
class ValidationBounds:
    """
    Absolute (inclusive) ranges a measurement must fall in to be accepted.
    """

    temperature_min: float = -50.0
    temperature_max: float = 60.0
    humidity_min: float = 0.0
    humidity_max: float = 100.0
    pressure_min: float = 900.0
    pressure_max: float = 1100.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry-with-backoff parameters for the resilient operation executor.

    Parameters
    ----------
    max_retries
        Maximum number of re-attempts after the first attempt (>= 0).
    base_delay_s
        Delay before the first retry, in seconds (> 0).
    max_delay_s
        Cap applied to every delay, in seconds (>= base_delay_s).
    backoff_multiplier
        Growth factor between consecutive delays (>= 1).

    Raises
    ------
    ValueError
        If any parameter is out of range.
    """

    max_retries: int = 3
    base_delay_s: float = 1.0
    max_delay_s: float = 10.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        for name in ("base_delay_s", "max_delay_s", "backoff_multiplier"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be finite")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_s <= 0:
            raise ValueError("base_delay_s must be > 0")
        if self.max_delay_s < self.base_delay_s:
            raise ValueError("max_delay_s must be >= base_delay_s")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

    @property
    def max_attempts(self) -> int:
        """Total attempts allowed, first attempt included."""
        return self.max_retries + 1
