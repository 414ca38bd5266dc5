"""
Event domain model.

An `Event` represents *what was observed* for one measurement update, while
`Measurement` (in models.py) represents *what is currently true*.

Events are typically used for:
- subscriber fan-out
- notification payloads
- logging and audit trails
"""

from __future__ import annotations

from dataclasses import dataclass

from resilient_dispatch.domain.models import EventKind, Measurement, Severity


@dataclass(frozen=True)
class Event:
    """
    Classified event produced by threshold evaluation.

    'Event' is intentionally immutable so it can be handed to many
    subscribers, logged, or queued for notification without surprises.

    Parameters
    ----------
    kind
        Category of the event.
    severity
        Severity on the ordered LOW..CRITICAL scale.
    snapshot
        Copy of the measurement that produced the event. It is never the
        dispatcher's own instance.
    """

    kind: EventKind
    severity: Severity
    snapshot: Measurement

    @property
    def is_alert(self) -> bool:
        """True for HIGH and CRITICAL events."""
        return self.severity >= Severity.HIGH
