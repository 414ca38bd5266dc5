"""
Observability sink contracts.

Core components never reach for a process-wide logger. They receive an
`ObservabilitySink` and report structured `ObservabilityRecord` objects to it.
The default `LoggingSink` forwards records to the standard ``logging`` module,
so whatever handlers the application configures (see
``resilient_dispatch.config.logging_config``) receive them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol

ROOT_LOGGER = "resilient_dispatch"


@dataclass(frozen=True)
class ObservabilityRecord:
    """
    One structured observation.

    Parameters
    ----------
    level
        Standard ``logging`` level (``logging.INFO``, ``logging.WARNING``, ...).
    message
        Human-readable summary.
    context
        Component that produced the record (e.g. "EventDispatcher").
    fields
        Structured key/value details.
    error
        Exception associated with the record, if any.
    """

    level: int
    message: str
    context: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None


class ObservabilitySink(Protocol):
    """
    Protocol interface for reporting structured observations.

    Any object providing ``report(record)`` can be injected, which makes it easy
    to capture records in tests or forward them to another backend.
    """

    def report(self, record: ObservabilityRecord) -> None:
        ...


class LoggingSink:
    """
    Sink that writes records through the standard ``logging`` module.

    Each record is logged on ``resilient_dispatch.<context>`` and the structured
    fields travel in ``extra={"fields": ...}`` as well as in the message text.
    """

    def __init__(self, root: str = ROOT_LOGGER):
        self._root = root
        self._loggers: Dict[str, logging.Logger] = {}

    def _logger(self, context: str) -> logging.Logger:
        lg = self._loggers.get(context)
        if lg is None:
            name = f"{self._root}.{context}" if context else self._root
            lg = logging.getLogger(name)
            self._loggers[context] = lg
        return lg

    def report(self, record: ObservabilityRecord) -> None:
        msg = record.message
        if record.fields:
            details = " ".join(f"{k}={v!r}" for k, v in record.fields.items())
            msg = f"{msg} [{details}]"
        exc_info = None
        if record.error is not None:
            exc_info = (type(record.error), record.error, record.error.__traceback__)
        self._logger(record.context).log(
            record.level,
            msg,
            exc_info=exc_info,
            extra={"fields": dict(record.fields)},
        )


class NullSink:
    """Sink that discards everything."""

    def report(self, record: ObservabilityRecord) -> None:
        return None


class Reporter:
    """
    Small convenience wrapper binding a sink to a fixed context.

    Parameters
    ----------
    sink
        Destination sink. ``None`` selects a `LoggingSink`.
    context
        Component name stamped on every record.
    """

    def __init__(self, sink: Optional[ObservabilitySink], context: str):
        self.sink: ObservabilitySink = sink if sink is not None else LoggingSink()
        self.context = context

    def _emit(self, level: int, message: str, error: Optional[BaseException], fields: Dict[str, Any]) -> None:
        self.sink.report(
            ObservabilityRecord(
                level=level,
                message=message,
                context=self.context,
                fields=fields,
                error=error,
            )
        )

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, message, None, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(logging.INFO, message, None, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(logging.WARNING, message, None, fields)

    def error(self, message: str, error: Optional[BaseException] = None, **fields: Any) -> None:
        self._emit(logging.ERROR, message, error, fields)
