"""
Shared pytest fixtures.

`RecordingSink` captures observability records in memory so tests can assert
on what the core reported without configuring logging handlers.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

import pytest

from resilient_dispatch.observability.sink import ObservabilityRecord


class RecordingSink:
    """In-memory ObservabilitySink."""

    def __init__(self) -> None:
        self.records: List[ObservabilityRecord] = []

    def report(self, record: ObservabilityRecord) -> None:
        self.records.append(record)

    def at(self, level: int) -> List[ObservabilityRecord]:
        return [r for r in self.records if r.level == level]

    @property
    def errors(self) -> List[ObservabilityRecord]:
        return self.at(logging.ERROR)

    @property
    def warnings(self) -> List[ObservabilityRecord]:
        return self.at(logging.WARNING)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fixed_clock():
    t0 = datetime(2026, 1, 1, 10, 0, 0)
    return lambda: t0
