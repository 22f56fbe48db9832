"""Process-wide logging facade.

Lines are rendered by ``structlog`` through a single stdlib handler on the root
logger, so records from this package and from foreign stdlib loggers share the
same format::

    [2016-09-06T10:00:00.000000Z] [INFO] [hostname] [service-name] - message
"""

from __future__ import annotations

import logging
import socket
import sys
from enum import IntEnum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from typing import TextIO

    from structlog.typing import EventDict, Processor, WrappedLogger

import structlog


__all__ = ["Level", "configure", "configure_defaults", "current_level", "get_logger", "log"]

_LOGGER_NAME = "kv_storage"
_HANDLER_NAME = "kv_storage.console"
_LEVEL_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}
_LEVEL_LABELS = {"warning": "WARN", "critical": "FATAL", "exception": "ERROR"}

_configured_level: Level | None = None


class Level(IntEnum):
    """Ordered log levels mapped onto stdlib numeric levels."""

    ALL = 1
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL
    OFF = logging.CRITICAL + 10

    @classmethod
    def parse(cls, value: str | int) -> Level:
        """Return the level for a case-insensitive name or a numeric value."""
        if isinstance(value, int):
            return cls(value)
        name = value.strip().upper()
        name = _LEVEL_ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError as error:
            msg = f"unknown log level: {value!r}"
            raise ValueError(msg) from error


logging.addLevelName(Level.TRACE, "TRACE")


class _ServiceInfo:
    """Add host and service name to every event."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.host = socket.gethostname()

    def __call__(self, _logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
        _ = event_dict.setdefault("host", self.host)
        _ = event_dict.setdefault("service", self.service_name)
        return event_dict


def _render_line(_logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> str:
    timestamp = event_dict.pop("timestamp", "")
    level = str(event_dict.pop("level", "")).lower()
    label = _LEVEL_LABELS.get(level, level.upper())
    host = event_dict.pop("host", "")
    service = event_dict.pop("service", "")
    event = event_dict.pop("event", "")
    exception = event_dict.pop("exception", None)

    line = f"[{timestamp}] [{label}] [{host}] [{service}] - {event}"
    if event_dict:
        line += " " + " ".join(f"{key}={value!r}" for key, value in sorted(event_dict.items()))
    if exception:
        line += f"\n{exception}"
    return line


def _configure_structlog(processors: list[Processor]) -> None:
    structlog.configure(
        processors=[structlog.stdlib.filter_by_level, *processors],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=False,
    )


def configure_defaults() -> None:
    """Route structlog events through stdlib logging without installing a sink.

    Until :func:`configure` runs, events follow the stdlib root threshold like
    records emitted with :func:`log`.
    """
    _configure_structlog([structlog.stdlib.PositionalArgumentsFormatter(), structlog.stdlib.render_to_log_kwargs])


def configure(service_name: str, level: str | int = Level.INFO, stream: TextIO | None = None) -> None:
    """Install the single console sink and set the process-wide level.

    Parameters
    ----------
    service_name
        Name printed in every line.
    level
        Threshold, one of ``ALL TRACE DEBUG INFO WARN ERROR FATAL OFF``.
    stream
        Output stream, ``sys.stdout`` when omitted.
    """
    global _configured_level  # noqa: PLW0603

    threshold = Level.parse(level)
    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _ServiceInfo(service_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    _configure_structlog([*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter])

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _render_line,
            ],
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(threshold)
    _configured_level = threshold


def current_level() -> Level | None:
    """Return the configured threshold, or None before ``configure`` ran."""
    return _configured_level


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger bound to ``name`` (package logger by default)."""
    return structlog.get_logger(name or _LOGGER_NAME)


def log(level: str | int, message: str) -> None:
    """Emit ``message`` when ``level`` is at or above the configured level."""
    parsed = Level.parse(level)
    if parsed in (Level.ALL, Level.OFF):
        return
    logging.getLogger(_LOGGER_NAME).log(parsed, message)


configure_defaults()
