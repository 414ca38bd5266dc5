from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass(frozen=True)
class NotificationEvent:
    """
    Notification event contract used by the notification layer.

    A 'NotificationEvent' is a message that can be sent to one or more
    notifiers. It represents *what should be communicated*, not *how* it is
    delivered.

    Parameters
    ----------
    type
        Event type identifier (e.g., "weather_alert", "status").
    payload
        Structured, JSON-ready payload (see ``notification.payload``).
    severity
        Optional severity label (e.g., "HIGH", "CRITICAL").
    source
        Optional source identifier (e.g., the alerting subscriber's name).
    ts
        Optional timestamp string describing when the event occurred.

    Notes
    -----
    The class is frozen (immutable) so events remain stable once created,
    even while they wait in a worker queue or are retried.
    """

    type: str
    payload: Dict[str, Any]
    severity: Optional[str] = None
    source: Optional[str] = None
    ts: Optional[str] = None


class Notifier(Protocol):
    """
    Protocol interface for notification delivery.

    Any notifier implementation can be used if it provides a 'notify(event)'
    method. Raising `TransientError` asks the delivery worker to retry;
    any other exception is treated as fatal for that delivery.
    """

    def notify(self, event: NotificationEvent) -> None:
        ...


class NotificationEmitter(Protocol):
    """Anything accepting notification events for asynchronous delivery."""

    def emit(self, event: NotificationEvent) -> None:
        ...
