from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from resilient_dispatch.domain.events import Event
from resilient_dispatch.subscribers.statistics import StatisticsSnapshot


def _iso(ts: datetime) -> str:
    """
    Convert datetime to ISO-8601 string with second precision.

    Parameters
    ----------
    ts
        Timestamp to convert.

    Returns
    -------
    str
        ISO-8601 formatted timestamp (seconds precision).
    """
    return ts.isoformat(timespec="seconds")


def build_event_payload(ev: Event, stats: Optional[StatisticsSnapshot] = None) -> Dict[str, Any]:
    """
    Build a notification payload for an event plus optional running totals.

    The payload includes:
    - "event": kind, severity and the measurement snapshot
    - "totals": running averages from a statistics subscriber (when given)

    Parameters
    ----------
    ev
        Event that triggered the notification.
    stats
        Optional statistics snapshot to attach.

    Returns
    -------
    dict
        Payload dictionary with keys "type", "event" and, optionally, "totals".
    """
    snap = ev.snapshot
    event_payload = {
        "kind": ev.kind.value,
        "severity": str(ev.severity),
        "timestamp": _iso(snap.captured_at),
        "temperature": snap.temperature,
        "humidity": snap.humidity,
        "pressure": snap.pressure,
    }

    payload: Dict[str, Any] = {
        "type": "weather_event",
        "event": event_payload,
    }

    if stats is not None:
        payload["totals"] = {
            "readings": stats.readings,
            "avg_temperature": round(stats.avg_temperature, 2),
            "avg_humidity": round(stats.avg_humidity, 2),
            "avg_pressure": round(stats.avg_pressure, 2),
        }

    return payload
