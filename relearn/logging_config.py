"""
Structured logging configuration.

Training code attaches an episode number, a subsystem, an event type and
latencies to its records. ``configure_logging`` installs a console
handler and, with a log directory, rotating human-readable and JSON files.

The structured fields travel through the standard ``extra`` mechanism,
so any logger created by ``logging.getLogger`` (or by ``dictConfig``)
can be wrapped with ``get_logger``.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

_FIELDS = ("subsystem", "episode", "event_type", "latency_ms")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data["event" if name == "event_type" else name] = value
        log_data.update(getattr(record, "extra_data", None) or {})
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """``HH:MM:SS.mmm LEVL [subsystem] ep=N: message (latency)``"""

    def __init__(self):
        super().__init__(
            "%(asctime)s.%(msecs)03d %(levelname).4s%(context)s: %(message)s%(timing)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        context = ""
        if getattr(record, "subsystem", None):
            context += f" [{record.subsystem}]"
        if getattr(record, "episode", None) is not None:
            context += f" ep={record.episode}"
        record.context = context

        latency = getattr(record, "latency_ms", None)
        record.timing = f" ({latency:.1f}ms)" if latency is not None else ""
        return super().format(record)


class StructuredLogger(logging.LoggerAdapter):
    """
    Wraps a plain logger with ``event`` and ``latency`` helpers.

    Example:
        >>> logger = get_logger("relearn.gridworld")
        >>> logger.event("episode", "explored 12 links", episode=0, subsystem="gridworld")
    """

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def _log_structured(
        self,
        level: int,
        msg: str,
        episode: Optional[int] = None,
        subsystem: Optional[str] = None,
        event_type: Optional[str] = None,
        latency_ms: Optional[float] = None,
        **extra_data: Any,
    ) -> None:
        # LoggerAdapter.process would replace ``extra``, so go to the logger directly
        self.logger.log(level, msg, extra={
            "episode": episode,
            "subsystem": subsystem,
            "event_type": event_type,
            "latency_ms": latency_ms,
            "extra_data": extra_data,
        })

    def event(self, event_type: str, msg: str, **kwargs: Any) -> None:
        self._log_structured(logging.INFO, msg, event_type=event_type, **kwargs)

    def latency(self, operation: str, latency_ms: float, **kwargs: Any) -> None:
        """Log at DEBUG that ``operation`` took ``latency_ms``."""
        self._log_structured(
            logging.DEBUG, f"{operation} completed", latency_ms=latency_ms, **kwargs
        )


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Replace the root handlers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: If given, also write relearn.log and relearn.json.log here
        max_bytes: Size at which a log file rotates
        backup_count: Rotated files kept per log
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HumanFormatter())
    root_logger.addHandler(console)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    for filename, formatter in (
        ("relearn.log", HumanFormatter()),
        ("relearn.json.log", JSONFormatter()),
    ):
        handler = RotatingFileHandler(
            os.path.join(log_dir, filename),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name))
