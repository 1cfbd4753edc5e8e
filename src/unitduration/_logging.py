"""Structured JSON log formatter and logging configuration.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed by applications (and by the ``unitduration`` CLI) through
:func:`configure_logging`.

:class:`JsonFormatter` emits one JSON object per log record on a single
line (JSON Lines / NDJSON).  Records produced by the timing wrapper carry
the measured :class:`~unitduration._duration.Duration` in
``extra={"duration": ...}``; the formatter renders it both canonically
(``"duration"``) and as an integer (``"duration_ns"``) so aggregators can
filter numerically.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from typing import Any

from unitduration._duration import Duration
from unitduration._settings import LoggingSettings

_BYTES_PER_MB = 1024 * 1024

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One-line JSON rendering of log records.

    Always present: ``timestamp`` (UTC, ISO 8601), ``level``, ``logger``,
    ``message`` and ``service``.  ``version`` is added when non-empty;
    ``duration``/``duration_ns`` when the record carries a
    :class:`Duration`; ``exception`` and ``stack_info`` when the record
    has them.  Non-ASCII text such as ``µs`` is written as-is.

    Args:
        service: Name stamped on every line.
        version: Version stamped on every line, if given.
    """

    def __init__(
        self,
        *,
        service: str = "",
        version: str = "",
    ) -> None:
        super().__init__()
        self._service = service
        self._version = version

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self._service,
        }
        if self._version:
            entry["version"] = self._version
        entry.update(self._optional_fields(record))
        return json.dumps(entry, default=str, ensure_ascii=False)

    def _optional_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        duration = getattr(record, "duration", None)
        if isinstance(duration, Duration):
            fields["duration"] = str(duration)
            fields["duration_ns"] = duration.nanos
        if record.exc_info and record.exc_info[0] is not None:
            fields["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            fields["stack_info"] = self.formatStack(record.stack_info)
        return fields


def _build_formatter(
    settings: LoggingSettings,
    service: str,
    version: str,
) -> logging.Formatter:
    if settings.format == "json":
        return JsonFormatter(service=service, version=version)
    return logging.Formatter(_TEXT_FORMAT)


def configure_logging(
    settings: LoggingSettings,
    *,
    service: str,
    version: str = "",
) -> None:
    """Replace the root logger's handlers according to *settings*.

    Output always goes to ``stderr``.  With ``settings.file`` set, a
    size-rotated UTF-8 file receives the same lines.

    Args:
        settings: Level, format and optional file target.
        service: Service name for JSON lines.
        version: Version for JSON lines; omitted when empty.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    formatter = _build_formatter(settings, service, version)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file is not None:
        handlers.append(
            RotatingFileHandler(
                settings.file,
                maxBytes=settings.max_file_size_mb * _BYTES_PER_MB,
                backupCount=settings.backup_count,
                encoding="utf-8",
            ),
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(settings.level)
