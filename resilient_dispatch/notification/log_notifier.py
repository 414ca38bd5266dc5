from __future__ import annotations

from typing import List, Optional

from resilient_dispatch.notification.base import NotificationEvent
from resilient_dispatch.observability.sink import ObservabilitySink, Reporter


class LogNotifier:
    """
    Local notification channel that reports events to an observability sink.

    Useful as the default channel and in tests; ``history`` keeps the
    delivered events in order.

    Parameters
    ----------
    sink
        Observability sink. ``None`` logs through the ``logging`` module.
    keep_history
        Whether to retain delivered events in ``history``.
    """

    def __init__(self, sink: Optional[ObservabilitySink] = None, keep_history: bool = True):
        self._log = Reporter(sink, "LogNotifier")
        self._keep_history = keep_history
        self.history: List[NotificationEvent] = []

    def notify(self, event: NotificationEvent) -> None:
        self._log.warning(
            f"Notification: {event.type}",
            severity=event.severity,
            source=event.source,
            ts=event.ts,
            payload=event.payload,
        )
        if self._keep_history:
            self.history.append(event)
