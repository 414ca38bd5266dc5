"""Rich-handler logging preset."""
from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s │ %(name)-38s │ %(levelname)-8s │ %(message)s"


def configure(level: str = "INFO", rich: bool = True) -> None:
    """
    Configure root logging for applications embedding the core.

    Parameters
    ----------
    level
        Level name ("DEBUG", "INFO", ...).
    rich
        Use a ``RichHandler``; otherwise a plain ``StreamHandler``.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")

    handler: logging.Handler = RichHandler(rich_tracebacks=True, markup=False) if rich else logging.StreamHandler()
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT if not rich else "%(message)s",
        datefmt="%H:%M:%S",
        handlers=[handler],
        force=True,
    )
