from __future__ import annotations

from typing import Optional

from resilient_dispatch.domain.events import Event
from resilient_dispatch.observability.sink import ObservabilitySink, Reporter


class BaseSubscriber:
    """
    Convenience base for subscribers with a name and an on/off switch.

    Subclasses implement `handle`. Inheritance is optional: the dispatcher
    only needs the `Subscriber` protocol methods.

    Parameters
    ----------
    name
        Unique identity of the subscriber.
    sink
        Observability sink. ``None`` logs through the ``logging`` module.
    active
        Initial activation state.
    """

    def __init__(self, name: str, sink: Optional[ObservabilitySink] = None, active: bool = True):
        if not name or not name.strip():
            raise ValueError("subscriber name cannot be empty")
        self._name = name
        self._active = active
        self._log = Reporter(sink, type(self).__name__)

    def identity(self) -> str:
        return self._name

    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        self._active = active
        self._log.info(
            f"{self._name} {'activated' if active else 'deactivated'}",
            subscriber=self._name,
        )

    def receive(self, event: Event) -> None:
        self.handle(event)

    def handle(self, event: Event) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, active={self._active})"
