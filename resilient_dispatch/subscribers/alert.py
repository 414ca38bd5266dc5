from __future__ import annotations

import threading
from typing import Callable, Optional

from resilient_dispatch.domain.events import Event
from resilient_dispatch.domain.models import Severity
from resilient_dispatch.notification.base import NotificationEmitter, NotificationEvent
from resilient_dispatch.notification.payload import build_event_payload
from resilient_dispatch.observability.sink import ObservabilitySink
from resilient_dispatch.subscribers.base import BaseSubscriber
from resilient_dispatch.subscribers.statistics import StatisticsSnapshot


class AlertSubscriber(BaseSubscriber):
    """
    Subscriber raising alerts for severe events.

    Events at or above ``min_severity`` are counted and, when an emitter is
    configured, forwarded as `NotificationEvent` objects. Emitting only
    enqueues; delivery (and its retries) happens on the emitter's own thread,
    so dispatch is never held up by a slow notification channel.

    Parameters
    ----------
    name
        Unique identity of the subscriber.
    emitter
        Optional destination for alert notifications.
    min_severity
        Lowest severity that triggers an alert.
    stats_provider
        Optional callable returning running totals to embed in payloads.
    sink
        Observability sink.
    """

    def __init__(
        self,
        name: str,
        emitter: Optional[NotificationEmitter] = None,
        min_severity: Severity = Severity.HIGH,
        stats_provider: Optional[Callable[[], StatisticsSnapshot]] = None,
        sink: Optional[ObservabilitySink] = None,
        active: bool = True,
    ):
        super().__init__(name, sink=sink, active=active)
        self._emitter = emitter
        self._min_severity = min_severity
        self._stats_provider = stats_provider
        self._lock = threading.Lock()
        self._alert_count = 0

    @property
    def alert_count(self) -> int:
        with self._lock:
            return self._alert_count

    def handle(self, event: Event) -> None:
        if event.severity < self._min_severity:
            return

        with self._lock:
            self._alert_count += 1
            n = self._alert_count

        self._log.warning(
            f"ALERT #{n}: {event.kind.value}",
            subscriber=self.identity(),
            severity=str(event.severity),
            temperature=event.snapshot.temperature,
        )

        if self._emitter is None:
            return

        stats = self._stats_provider() if self._stats_provider is not None else None
        self._emitter.emit(
            NotificationEvent(
                type="weather_alert",
                payload=build_event_payload(event, stats),
                severity=str(event.severity),
                source=self.identity(),
                ts=event.snapshot.captured_at.isoformat(timespec="seconds"),
            )
        )
