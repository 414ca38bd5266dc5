"""
Unit tests for resilient_dispatch.core.threshold.evaluator.

Validates:
- each rule fires at (and beyond) its inclusive bound
- several rules may fire for one measurement, in rule order
- the LOW fallback fires exactly once when nothing else does
- events carry copies of the measurement
"""

from __future__ import annotations

from datetime import datetime

import pytest

from resilient_dispatch.core.threshold.evaluator import evaluate
from resilient_dispatch.domain.models import EventKind, Measurement, Severity, ThresholdConfig

CFG = ThresholdConfig()


def _m(t: float = 20.0, h: float = 50.0, p: float = 1013.0) -> Measurement:
    return Measurement(temperature=t, humidity=h, pressure=p, captured_at=datetime(2026, 1, 1, 12, 0, 0))


def _kinds(events):
    return [(e.kind, e.severity) for e in events]


def test_nominal_measurement_yields_single_low_fallback() -> None:
    events = evaluate(_m(), CFG)
    assert _kinds(events) == [(EventKind.TEMPERATURE_CHANGED, Severity.LOW)]


@pytest.mark.parametrize("temp", [40.0, 45.0, -10.0, -30.0])
def test_temperature_out_of_band_is_critical(temp: float) -> None:
    events = evaluate(_m(t=temp), CFG)
    assert _kinds(events) == [(EventKind.CRITICAL_THRESHOLD, Severity.CRITICAL)]


@pytest.mark.parametrize("temp", [39.99, -9.99])
def test_temperature_just_inside_band_falls_back(temp: float) -> None:
    assert _kinds(evaluate(_m(t=temp), CFG)) == [(EventKind.TEMPERATURE_CHANGED, Severity.LOW)]


def test_humidity_at_max_is_high() -> None:
    assert _kinds(evaluate(_m(h=95.0), CFG)) == [(EventKind.HUMIDITY_CHANGED, Severity.HIGH)]


@pytest.mark.parametrize("pressure", [950.0, 920.0, 1050.0, 1090.0])
def test_pressure_out_of_band_is_medium(pressure: float) -> None:
    assert _kinds(evaluate(_m(p=pressure), CFG)) == [(EventKind.PRESSURE_CHANGED, Severity.MEDIUM)]


def test_multiple_rules_fire_in_rule_order_without_fallback() -> None:
    events = evaluate(_m(t=45.0, h=99.0, p=940.0), CFG)
    assert _kinds(events) == [
        (EventKind.CRITICAL_THRESHOLD, Severity.CRITICAL),
        (EventKind.HUMIDITY_CHANGED, Severity.HIGH),
        (EventKind.PRESSURE_CHANGED, Severity.MEDIUM),
    ]


def test_custom_thresholds_are_honoured() -> None:
    cfg = ThresholdConfig(temperature_min=0.0, temperature_max=25.0, humidity_max=60.0)
    events = evaluate(_m(t=26.0, h=61.0), cfg)
    assert [e.kind for e in events] == [EventKind.CRITICAL_THRESHOLD, EventKind.HUMIDITY_CHANGED]


def test_events_hold_copies_of_the_measurement() -> None:
    current = _m(t=45.0, h=99.0)
    events = evaluate(current, CFG)
    for ev in events:
        assert ev.snapshot == current
        assert ev.snapshot is not current
    assert events[0].snapshot is not events[1].snapshot


def test_evaluate_is_deterministic() -> None:
    current = _m(t=41.0, p=1060.0)
    assert evaluate(current, CFG) == evaluate(current, CFG)
