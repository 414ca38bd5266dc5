from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from resilient_dispatch.config.logging_config import configure as configure_logging
from resilient_dispatch.core.config.yaml_config import AppConfig, load_app_config
from resilient_dispatch.core.dispatcher import EventDispatcher
from resilient_dispatch.core.retry.executor import RetryExecutor
from resilient_dispatch.notification.base import Notifier
from resilient_dispatch.notification.log_notifier import LogNotifier
from resilient_dispatch.notification.notification_thread import NotificationThreadConfig, NotificationWorkerThread
from resilient_dispatch.observability.sink import ObservabilitySink
from resilient_dispatch.subscribers.alert import AlertSubscriber
from resilient_dispatch.subscribers.statistics import StatisticsSubscriber


@dataclass(frozen=True)
class SystemWiring:
    """Everything a caller needs to drive the dispatch core."""
    config: AppConfig
    dispatcher: EventDispatcher
    executor: RetryExecutor
    notifier: NotificationWorkerThread
    statistics: StatisticsSubscriber
    alerts: AlertSubscriber

    def shutdown(self) -> None:
        self.notifier.stop()


def build_notifier(
    cfg: AppConfig,
    notifiers: Sequence[Notifier],
    sink: Optional[ObservabilitySink] = None,
) -> NotificationWorkerThread:
    return NotificationWorkerThread(
        notifiers=list(notifiers),
        cfg=NotificationThreadConfig(
            max_queue=cfg.notification.max_queue,
            poll_timeout_s=cfg.notification.poll_timeout_s,
        ),
        policy=cfg.notification.retry,
        sink=sink,
    )


def build_system(
    config_path: Optional[str] = None,
    config: Optional[AppConfig] = None,
    notifiers: Optional[List[Notifier]] = None,
    sink: Optional[ObservabilitySink] = None,
    setup_logging: bool = True,
    start: bool = True,
) -> SystemWiring:
    cfg = config or load_app_config(config_path)

    if setup_logging:
        configure_logging(cfg.logging.level, rich=cfg.logging.rich)

    # --- NOTIFICATIONS ---
    notifier = build_notifier(cfg, notifiers if notifiers is not None else [LogNotifier(sink)], sink)
    if start:
        notifier.start()

    # --- DISPATCH ---
    dispatcher = EventDispatcher(thresholds=cfg.thresholds, bounds=cfg.bounds, sink=sink)
    statistics = StatisticsSubscriber("statistics", sink=sink)
    alerts = AlertSubscriber("alerts", emitter=notifier, stats_provider=statistics.snapshot, sink=sink)
    dispatcher.register(statistics)
    dispatcher.register(alerts)

    # --- RETRY ---
    executor = RetryExecutor(policy=cfg.retry, sink=sink)

    return SystemWiring(
        config=cfg,
        dispatcher=dispatcher,
        executor=executor,
        notifier=notifier,
        statistics=statistics,
        alerts=alerts,
    )
