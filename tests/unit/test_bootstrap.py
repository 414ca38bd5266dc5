"""
Unit tests for resilient_dispatch.bootstrap.

The system is built from an in-memory AppConfig with logging setup disabled,
so the test does not touch global logging handlers.
"""

from __future__ import annotations

import time

from resilient_dispatch.bootstrap import build_system
from resilient_dispatch.core.config.yaml_config import AppConfig, NotificationConfig
from resilient_dispatch.domain.models import RetryPolicy
from resilient_dispatch.notification.log_notifier import LogNotifier


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_build_system_wires_subscribers_and_notifications(sink) -> None:
    channel = LogNotifier(sink)
    cfg = AppConfig(notification=NotificationConfig(retry=RetryPolicy(base_delay_s=0.001, max_delay_s=0.01)))
    system = build_system(config=cfg, notifiers=[channel], sink=sink, setup_logging=False)
    try:
        assert system.dispatcher.subscriber_ids() == ["statistics", "alerts"]
        assert system.notifier.is_running

        system.dispatcher.update_state(20.0, 50.0, 1013.0)
        system.dispatcher.update_state(45.0, 50.0, 1013.0)

        assert system.statistics.snapshot().readings == 2
        assert system.alerts.alert_count == 1
        assert _wait_until(lambda: len(channel.history) == 1)
        assert channel.history[0].payload["totals"]["readings"] == 2
    finally:
        system.shutdown()

    assert not system.notifier.is_running


def test_build_system_uses_configured_retry_policy(sink) -> None:
    cfg = AppConfig(retry=RetryPolicy(max_retries=1))
    system = build_system(config=cfg, notifiers=[], sink=sink, setup_logging=False, start=False)
    assert system.executor.policy.max_retries == 1
    assert not system.notifier.is_running
