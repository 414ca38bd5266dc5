"""
Input validation helpers.

Validators collect `FieldViolation` objects instead of raising on the first
problem, so callers can report every rejected field at once.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterable, List, Optional

from resilient_dispatch.core.errors import FieldViolation, ValidationError


def validate_numeric_range(
    value: Any,
    field_name: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> List[FieldViolation]:
    """
    Check that ``value`` is a finite real number inside ``[minimum, maximum]``.

    Parameters
    ----------
    value
        Value to check. ``bool`` is rejected even though it is an ``int``.
    field_name
        Name used in violation messages.
    minimum, maximum
        Optional inclusive bounds.

    Returns
    -------
    list of FieldViolation
        Empty when the value is acceptable.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return [FieldViolation(field_name, value, "must be a real number")]

    if not math.isfinite(value):
        return [FieldViolation(field_name, value, "must be a finite number")]

    out: List[FieldViolation] = []
    if minimum is not None and value < minimum:
        out.append(FieldViolation(field_name, value, f"must be at least {minimum}"))
    if maximum is not None and value > maximum:
        out.append(FieldViolation(field_name, value, f"must be at most {maximum}"))
    return out


def combine(*results: Iterable[FieldViolation]) -> List[FieldViolation]:
    """Flatten several violation lists, keeping their order."""
    return [v for r in results for v in r]


def raise_if_invalid(violations: Iterable[FieldViolation], context: str) -> None:
    """
    Raise `ValidationError` if any violation is present.

    Raises
    ------
    ValidationError
        Listing every violation.
    """
    violations = list(violations)
    if violations:
        raise ValidationError(violations, context=context)
