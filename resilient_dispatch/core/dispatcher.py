"""
Event dispatcher (subject).

The dispatcher owns two pieces of shared mutable state: the latest
`Measurement` and the ordered subscriber registry. Every measurement update
is validated, swapped in, evaluated against the threshold rules and fanned out
to the live subscribers, all while holding a single writer lock so no partial
update is ever observable.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

from resilient_dispatch.core.errors import SubscriberDeliveryError
from resilient_dispatch.core.subscriber import Subscriber, SubscriptionHandle
from resilient_dispatch.core.threshold.evaluator import evaluate
from resilient_dispatch.core.validation import combine, raise_if_invalid, validate_numeric_range
from resilient_dispatch.domain.events import Event
from resilient_dispatch.domain.models import Measurement, ThresholdConfig, ValidationBounds
from resilient_dispatch.observability.sink import ObservabilitySink, Reporter


@dataclass(frozen=True)
class DispatchReport:
    """
    Outcome of delivering one event.

    Parameters
    ----------
    event
        The delivered event.
    delivered
        Identities of subscribers that received the event, in delivery order.
    failures
        Delivery failures collected (and already reported) during fan-out.
    """

    event: Event
    delivered: Tuple[str, ...] = ()
    failures: Tuple[SubscriberDeliveryError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class _Subscription:
    handle: SubscriptionHandle
    subscriber: Subscriber


@dataclass(eq=False)
class EventDispatcher:
    """
    Subject that evaluates measurement updates and notifies subscribers.

    Concurrency Model
    -----------------
    All registry mutations and the whole "swap measurement + evaluate +
    notify" sequence are guarded by one re-entrant lock (`threading.RLock`).
    Subscribers may therefore call back into the dispatcher (e.g. unregister
    themselves) from ``receive`` on the same thread.

    Delivery Policy
    ---------------
    Fail-open fan-out: a subscriber raising from ``receive`` is reported to the
    observability sink and skipped; remaining subscribers still get the event.

    Parameters
    ----------
    thresholds
        Threshold bounds used to classify measurements.
    bounds
        Absolute validation ranges for incoming values.
    sink
        Observability sink. ``None`` logs through the ``logging`` module.
    clock
        Source of capture timestamps.
    initial
        Starting measurement. Defaults to 20 C / 50 % / 1013 hPa.
    """

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    bounds: ValidationBounds = field(default_factory=ValidationBounds)
    sink: Optional[ObservabilitySink] = None
    clock: Callable[[], datetime] = datetime.now
    initial: Optional[Measurement] = None

    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _subscriptions: Dict[str, _Subscription] = field(default_factory=dict, init=False, repr=False)
    _tokens: "itertools.count[int]" = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def __post_init__(self) -> None:
        self._log = Reporter(self.sink, "EventDispatcher")
        self._current = self.initial or Measurement(
            temperature=20.0,
            humidity=50.0,
            pressure=1013.0,
            captured_at=self.clock(),
        )

    # --- Registry API ---
    def register(self, subscriber: Subscriber) -> SubscriptionHandle:
        """
        Add a subscriber to the registry.

        Registration is idempotent on ``subscriber.identity()``: registering an
        identity that is already present is reported and returns the existing
        handle.

        Returns
        -------
        SubscriptionHandle
            Token to pass to `unregister`.
        """
        sid = subscriber.identity()
        with self._lock:
            existing = self._subscriptions.get(sid)
            if existing is not None:
                self._log.warning(f"Subscriber {sid} is already registered", subscriber=sid)
                return existing.handle

            handle = SubscriptionHandle(token=next(self._tokens), subscriber_id=sid)
            self._subscriptions[sid] = _Subscription(handle=handle, subscriber=subscriber)
            self._log.info(
                f"Subscriber registered: {sid}",
                subscriber=sid,
                total_subscribers=len(self._subscriptions),
            )
            return handle

    def unregister(self, target: Union[SubscriptionHandle, Subscriber]) -> bool:
        """
        Remove a subscriber if present.

        Parameters
        ----------
        target
            Handle returned by `register`, or the subscriber itself. A stale
            handle (from an earlier registration of the same identity) does
            not remove the current registration.

        Returns
        -------
        bool
            True if a registration was removed.
        """
        with self._lock:
            if isinstance(target, SubscriptionHandle):
                sub = self._subscriptions.get(target.subscriber_id)
                if sub is None or sub.handle != target:
                    return False
                sid = target.subscriber_id
            else:
                sid = target.identity()
                if sid not in self._subscriptions:
                    return False

            del self._subscriptions[sid]
            self._log.info(
                f"Subscriber removed: {sid}",
                subscriber=sid,
                total_subscribers=len(self._subscriptions),
            )
            return True

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscriber_ids(self) -> List[str]:
        """Registered identities in registration order."""
        with self._lock:
            return list(self._subscriptions)

    # --- State API ---
    def current_state(self) -> Measurement:
        """Return a copy of the latest measurement."""
        with self._lock:
            return self._current.copy()

    def update_state(self, temperature: float, humidity: float, pressure: float) -> List[DispatchReport]:
        """
        Validate, store and dispatch a new measurement.

        Parameters
        ----------
        temperature, humidity, pressure
            New readings. Each must be a finite real within `bounds`.

        Returns
        -------
        list of DispatchReport
            One report per event produced by the threshold evaluator.

        Raises
        ------
        ValidationError
            Listing every rejected field. No state changes and no
            notifications happen in that case.
        """
        b = self.bounds
        raise_if_invalid(
            combine(
                validate_numeric_range(temperature, "temperature", b.temperature_min, b.temperature_max),
                validate_numeric_range(humidity, "humidity", b.humidity_min, b.humidity_max),
                validate_numeric_range(pressure, "pressure", b.pressure_min, b.pressure_max),
            ),
            context="EventDispatcher.update_state",
        )

        with self._lock:
            self._current = Measurement(
                temperature=float(temperature),
                humidity=float(humidity),
                pressure=float(pressure),
                captured_at=self.clock(),
            )
            self._log.info(
                "Measurement updated",
                temperature=self._current.temperature,
                humidity=self._current.humidity,
                pressure=self._current.pressure,
            )

            events = evaluate(self._current, self.thresholds)
            return [self.notify(ev) for ev in events]

    def notify(self, event: Event) -> DispatchReport:
        """
        Deliver one event to every registered, active subscriber.

        Subscribers are visited in registration order. ``is_active()`` is
        evaluated at delivery time, and a subscriber unregistered by an earlier
        delivery of the same event is skipped.

        Returns
        -------
        DispatchReport
            Delivered identities and collected delivery failures.
        """
        with self._lock:
            snapshot = list(self._subscriptions.values())
            self._log.debug(
                f"Notifying up to {len(snapshot)} subscribers",
                kind=event.kind.value,
                severity=str(event.severity),
            )

            delivered: List[str] = []
            failures: List[SubscriberDeliveryError] = []

            for sub in snapshot:
                sid = sub.handle.subscriber_id
                # Skip anything removed by an earlier delivery in this loop.
                if self._subscriptions.get(sid) is not sub:
                    continue
                try:
                    if not sub.subscriber.is_active():
                        continue
                    sub.subscriber.receive(event)
                except Exception as e:
                    err = SubscriberDeliveryError(sid, event, e)
                    failures.append(err)
                    self._log.error(str(err), error=e, subscriber=sid, kind=event.kind.value)
                    continue
                delivered.append(sid)

            return DispatchReport(event=event, delivered=tuple(delivered), failures=tuple(failures))
