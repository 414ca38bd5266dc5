"""
Subscriber contracts.

This module defines the contract between the `EventDispatcher` and the objects
it fans events out to:

- `Subscriber`: duck-typed capability (no inheritance required)
- `SubscriptionHandle`: explicit token returned by registration and accepted by
  unregistration, so callers do not rely on object identity
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from resilient_dispatch.domain.events import Event


@runtime_checkable
class Subscriber(Protocol):
    """
    Protocol interface for event subscribers.

    Methods
    -------
    receive(event)
        Handle one event. May raise; the dispatcher isolates the failure.
    identity()
        Stable, unique name of this subscriber.
    is_active()
        Whether the subscriber currently wants events. Checked for every event.
    """

    def receive(self, event: Event) -> None:
        ...

    def identity(self) -> str:
        ...

    def is_active(self) -> bool:
        ...


@dataclass(frozen=True)
class SubscriptionHandle:
    """
    Registration token.

    Parameters
    ----------
    token
        Dispatcher-local sequence number, unique per registration.
    subscriber_id
        Identity of the registered subscriber.
    """

    token: int
    subscriber_id: str
