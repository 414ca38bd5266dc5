"""
Centralised exception definitions for the resilience and dispatch core.
All custom exceptions inherit from DispatchCoreError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple


class DispatchCoreError(Exception):
    """Base class for every custom exception raised by this project."""


@dataclass(frozen=True)
class FieldViolation:
    """
    One rejected input field.

    Parameters
    ----------
    field
        Name of the offending field (e.g. "temperature").
    value
        The rejected value, as received.
    reason
        Human-readable explanation.
    """

    field: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ValidationError(DispatchCoreError, ValueError):
    """Input outside declared bounds. Carries every violated field."""

    def __init__(self, violations: Sequence[FieldViolation], context: str = ""):
        self.violations: Tuple[FieldViolation, ...] = tuple(violations)
        self.context = context
        where = f" in {context}" if context else ""
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Validation failed{where}: {details}")

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(v.field for v in self.violations)


class ConfigurationError(DispatchCoreError, ValueError):
    """Raised when configuration files or environment variables are invalid."""


class TransientError(DispatchCoreError):
    """Failure expected to succeed if retried (timeouts, busy gateways, ...)."""


class FatalError(DispatchCoreError):
    """Failure that must never be retried."""


class ExhaustedError(DispatchCoreError):
    """
    Raised when a transient failure persists past the retry budget.

    Parameters
    ----------
    message
        Summary of the failed operation.
    attempts
        Total attempts performed, the first one included.
    last_error
        The final transient failure.
    """

    def __init__(self, message: str, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{message} (last error: {last_error})")

    @property
    def original_message(self) -> str:
        return str(self.last_error)


class RetryCancelledError(DispatchCoreError):
    """The caller cancelled an operation while it was waiting to retry."""

    def __init__(self, context: str, attempts: int, last_error: Optional[BaseException] = None):
        self.context = context
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{context} cancelled after {attempts} attempt(s)")


class SubscriberDeliveryError(DispatchCoreError):
    """
    A subscriber failed while receiving an event.

    Never raised to the dispatcher's caller; it is reported and collected.
    """

    def __init__(self, subscriber_id: str, event: object, cause: BaseException):
        self.subscriber_id = subscriber_id
        self.event = event
        self.cause = cause
        super().__init__(f"Error notifying subscriber {subscriber_id}: {cause}")
