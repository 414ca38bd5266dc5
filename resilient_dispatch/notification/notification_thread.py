from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import List, Optional

from resilient_dispatch.core.errors import ExhaustedError, RetryCancelledError
from resilient_dispatch.core.retry.executor import Classifier, RetryExecutor, is_transient_error
from resilient_dispatch.domain.models import RetryPolicy
from resilient_dispatch.notification.base import NotificationEvent, Notifier
from resilient_dispatch.observability.sink import ObservabilitySink, Reporter

_STOP = "__stop__"


@dataclass(frozen=True)
class NotificationThreadConfig:
    max_queue: int = 2000
    poll_timeout_s: float = 0.5
    join_timeout_s: float = 2.0


class NotificationWorkerThread:
    """
    Background delivery of notification events.

    Events are queued by `emit` (never blocking, drop-newest when full) and a
    daemon thread hands each one to every notifier through a `RetryExecutor`.
    The worker's stop signal doubles as the executor's cancel signal, so
    `stop` interrupts an in-flight backoff wait instead of sleeping it out.

    Parameters
    ----------
    notifiers
        Delivery channels, tried in order for every event.
    cfg
        Queue and polling settings.
    policy
        Retry policy applied to each (event, notifier) delivery.
    is_transient
        Classifier for notifier failures.
    sink
        Observability sink.
    executor
        Pre-built executor; overrides ``policy`` and ``sink`` when given.
    """

    def __init__(
        self,
        notifiers: List[Notifier],
        cfg: NotificationThreadConfig | None = None,
        policy: Optional[RetryPolicy] = None,
        is_transient: Classifier = is_transient_error,
        sink: Optional[ObservabilitySink] = None,
        executor: Optional[RetryExecutor] = None,
    ):
        self._notifiers = list(notifiers)
        self._cfg = cfg or NotificationThreadConfig()
        self._executor = executor or RetryExecutor(policy=policy, sink=sink)
        self._is_transient = is_transient
        self._log = Reporter(sink, "NotificationWorkerThread")
        self._q: "queue.Queue[NotificationEvent]" = queue.Queue(maxsize=self._cfg.max_queue)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="notification-worker", daemon=True)
        self._delivered = 0
        self._failed = 0
        self._dropped = 0
        self._counter_lock = threading.Lock()

    def start(self) -> None:
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        try:
            self._q.put_nowait(NotificationEvent(type=_STOP, payload={}))
        except queue.Full:
            pass
        if self._thread.is_alive():
            self._thread.join(timeout=self._cfg.join_timeout_s)

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def emit(self, event: NotificationEvent) -> None:
        try:
            self._q.put_nowait(event)
        except queue.Full:
            # Drop newest if overloaded so dispatch never blocks.
            with self._counter_lock:
                self._dropped += 1
            self._log.warning("Notification queue full, dropping event", type=event.type)

    def stats(self) -> dict:
        with self._counter_lock:
            return {
                "delivered": self._delivered,
                "failed": self._failed,
                "dropped": self._dropped,
                "queued": self._q.qsize(),
            }

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                event = self._q.get(timeout=self._cfg.poll_timeout_s)
            except queue.Empty:
                continue

            if event.type == _STOP:
                break

            for notifier in self._notifiers:
                if self._stop.is_set():
                    break
                self._send_with_retries(notifier, event)

    def _send_with_retries(self, notifier: Notifier, event: NotificationEvent) -> None:
        name = type(notifier).__name__
        try:
            self._executor.run(
                lambda: notifier.notify(event),
                self._is_transient,
                context=f"{name}.notify",
                cancel=self._stop,
            )
        except RetryCancelledError:
            self._log.info(f"Delivery via {name} cancelled by shutdown", type=event.type)
            return
        except ExhaustedError as e:
            self._record_failure(f"Delivery via {name} exhausted after {e.attempts} attempts", e, event)
            return
        except Exception as e:
            self._record_failure(f"Delivery via {name} failed", e, event)
            return

        with self._counter_lock:
            self._delivered += 1

    def _record_failure(self, message: str, error: BaseException, event: NotificationEvent) -> None:
        with self._counter_lock:
            self._failed += 1
        self._log.error(message, error=error, type=event.type, source=event.source)
