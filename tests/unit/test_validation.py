"""
Unit tests for resilient_dispatch.core.validation and the error taxonomy.
"""

from __future__ import annotations

import math

import pytest

from resilient_dispatch.core.errors import (
    DispatchCoreError,
    ExhaustedError,
    FieldViolation,
    SubscriberDeliveryError,
    ValidationError,
)
from resilient_dispatch.core.validation import combine, raise_if_invalid, validate_numeric_range


def test_value_inside_range_has_no_violations() -> None:
    assert validate_numeric_range(10, "temperature", -50, 60) == []
    assert validate_numeric_range(-50.0, "temperature", -50, 60) == []
    assert validate_numeric_range(60.0, "temperature", -50, 60) == []


def test_value_below_and_above_range() -> None:
    low = validate_numeric_range(-51.0, "temperature", -50, 60)
    high = validate_numeric_range(61.0, "temperature", -50, 60)
    assert [v.reason for v in low] == ["must be at least -50"]
    assert [v.reason for v in high] == ["must be at most 60"]


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_values_are_rejected(value: float) -> None:
    out = validate_numeric_range(value, "humidity", 0, 100)
    assert len(out) == 1
    assert out[0].reason == "must be a finite number"


@pytest.mark.parametrize("value", ["20", None, True, [1.0]])
def test_non_real_values_are_rejected(value) -> None:
    out = validate_numeric_range(value, "pressure", 900, 1100)
    assert [v.reason for v in out] == ["must be a real number"]


def test_combine_keeps_order() -> None:
    a = [FieldViolation("a", 1, "x")]
    b = [FieldViolation("b", 2, "y"), FieldViolation("c", 3, "z")]
    assert [v.field for v in combine(a, [], b)] == ["a", "b", "c"]


def test_raise_if_invalid_lists_every_field() -> None:
    violations = [FieldViolation("temperature", 99, "must be at most 60"), FieldViolation("pressure", 1, "too low")]
    with pytest.raises(ValidationError) as ei:
        raise_if_invalid(violations, context="ctx")
    err = ei.value
    assert err.fields == ("temperature", "pressure")
    assert "ctx" in str(err)
    assert "temperature: must be at most 60" in str(err)
    assert isinstance(err, ValueError)
    assert isinstance(err, DispatchCoreError)


def test_raise_if_invalid_is_silent_without_violations() -> None:
    raise_if_invalid([], context="ctx")


def test_exhausted_error_carries_attempts_and_original_message() -> None:
    last = TimeoutError("gateway timeout")
    err = ExhaustedError("pay failed after 2 retries", attempts=3, last_error=last)
    assert err.attempts == 3
    assert err.last_error is last
    assert err.original_message == "gateway timeout"
    assert "gateway timeout" in str(err)


def test_subscriber_delivery_error_names_subscriber() -> None:
    cause = RuntimeError("boom")
    err = SubscriberDeliveryError("display", event=None, cause=cause)
    assert err.subscriber_id == "display"
    assert err.cause is cause
    assert "display" in str(err)
