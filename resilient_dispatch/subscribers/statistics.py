from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from resilient_dispatch.domain.events import Event
from resilient_dispatch.observability.sink import ObservabilitySink
from resilient_dispatch.subscribers.base import BaseSubscriber


@dataclass(frozen=True)
class StatisticsSnapshot:
    """
    Running averages over every event received.

    Parameters
    ----------
    readings
        Number of events aggregated.
    avg_temperature, avg_humidity, avg_pressure
        Arithmetic means; 0.0 when nothing was received yet.
    """

    readings: int
    avg_temperature: float
    avg_humidity: float
    avg_pressure: float


class StatisticsSubscriber(BaseSubscriber):
    """
    Subscriber aggregating running averages of the measurement snapshots.

    Every received event counts once, so an update producing several events
    is weighted accordingly.
    """

    def __init__(self, name: str, sink: Optional[ObservabilitySink] = None, active: bool = True):
        super().__init__(name, sink=sink, active=active)
        self._lock = threading.Lock()
        self._temperature_sum = 0.0
        self._humidity_sum = 0.0
        self._pressure_sum = 0.0
        self._count = 0

    def handle(self, event: Event) -> None:
        snap = event.snapshot
        with self._lock:
            self._temperature_sum += snap.temperature
            self._humidity_sum += snap.humidity
            self._pressure_sum += snap.pressure
            self._count += 1
            count = self._count
        self._log.debug("Statistics updated", subscriber=self.identity(), total_readings=count)

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            n = self._count
            if n == 0:
                return StatisticsSnapshot(readings=0, avg_temperature=0.0, avg_humidity=0.0, avg_pressure=0.0)
            return StatisticsSnapshot(
                readings=n,
                avg_temperature=self._temperature_sum / n,
                avg_humidity=self._humidity_sum / n,
                avg_pressure=self._pressure_sum / n,
            )

    def reset(self) -> None:
        with self._lock:
            self._temperature_sum = self._humidity_sum = self._pressure_sum = 0.0
            self._count = 0
