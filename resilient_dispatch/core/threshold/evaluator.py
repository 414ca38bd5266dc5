"""
Threshold evaluation.

Stateless rules turning one `Measurement` into classified `Event` objects.
Each rule is checked independently, so one update may produce several events.
If nothing is noteworthy a single LOW informational event is produced so that
downstream subscribers always observe activity for every update.
"""

from __future__ import annotations

from typing import List

from resilient_dispatch.domain.events import Event
from resilient_dispatch.domain.models import EventKind, Measurement, Severity, ThresholdConfig


def _mk_event(kind: EventKind, severity: Severity, current: Measurement) -> Event:
    return Event(kind=kind, severity=severity, snapshot=current.copy())


def evaluate(current: Measurement, config: ThresholdConfig) -> List[Event]:
    """
    Classify a measurement against fixed threshold bounds.

    Rules (in emission order)
    -------------------------
    1. temperature >= temperature_max or <= temperature_min
       -> CRITICAL_THRESHOLD / CRITICAL
    2. humidity >= humidity_max -> HUMIDITY_CHANGED / HIGH
    3. pressure <= pressure_min or >= pressure_max -> PRESSURE_CHANGED / MEDIUM
    4. none of the above -> TEMPERATURE_CHANGED / LOW (fallback)

    Parameters
    ----------
    current
        Measurement to classify.
    config
        Threshold bounds.

    Returns
    -------
    list of Event
        At least one event. Each event holds its own copy of ``current``.
    """
    events: List[Event] = []

    if current.temperature >= config.temperature_max or current.temperature <= config.temperature_min:
        events.append(_mk_event(EventKind.CRITICAL_THRESHOLD, Severity.CRITICAL, current))

    if current.humidity >= config.humidity_max:
        events.append(_mk_event(EventKind.HUMIDITY_CHANGED, Severity.HIGH, current))

    if current.pressure <= config.pressure_min or current.pressure >= config.pressure_max:
        events.append(_mk_event(EventKind.PRESSURE_CHANGED, Severity.MEDIUM, current))

    # Fallback keeps subscribers live even when nothing crossed a bound.
    if not events:
        events.append(_mk_event(EventKind.TEMPERATURE_CHANGED, Severity.LOW, current))

    return events
