"""Application configuration via pydantic-settings.

Configuration is loaded from environment variables and/or ``.env``
files.  All variables carry the ``UNITDURATION_`` prefix and nested
models use ``__`` as the delimiter, e.g.
``UNITDURATION_LOGGING__LEVEL=DEBUG``.

The schema covers the two ambient concerns of the package:

* **Logging**: level, format, optional file sink, rotation.
* **Timing**: how the elapsed-time wrapper reports measurements.

Durations are written as canonical duration strings, e.g.
``UNITDURATION_TIMING__SLOW_THRESHOLD="1s 500ms"``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from unitduration._duration import Duration

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings; nested via composition)
# -------------------------------------------------------------------


class LoggingSettings(BaseModel):
    """Logging configuration.

    When ``file`` is set, logs are also written to a rotating file
    (size-based rotation, ``backup_count`` generations kept).  When
    ``None``, logs go to stderr only.

    The ``format`` field selects the output format:

    - ``"text"`` (default): human-readable timestamped lines for
      terminal use.
    - ``"json"``: structured JSON lines for log aggregators.
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description=(
            "Log output format. "
            "'json' emits structured JSON lines; "
            "'text' emits human-readable timestamped lines."
        ),
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description=(
            "Maximum log file size in megabytes before rotation. "
            "Only applies when ``file`` is set."
        ),
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


class TimingSettings(BaseModel):
    """Elapsed-time reporting used by :func:`unitduration.timed`.

    Environment variables (with ``__`` nesting)::

        UNITDURATION_TIMING__LABEL="Elapsed time"
        UNITDURATION_TIMING__LEVEL=INFO
        UNITDURATION_TIMING__SLOW_THRESHOLD="2s"
    """

    label: str = Field(
        default="Elapsed time",
        description="Prefix of every elapsed-time log line.",
    )
    level: LogLevel = Field(
        default="INFO",
        description="Log level of elapsed-time lines.",
    )
    slow_threshold: Duration | None = Field(
        default=None,
        description=(
            "When set, measurements longer than this are logged at "
            "WARNING regardless of ``level``."
        ),
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for unitduration.

    Loaded from ``UNITDURATION_``-prefixed environment variables with
    the nested delimiter ``__`` and an optional ``.env`` file in the
    working directory.

    Example ``.env``::

        UNITDURATION_LOGGING__LEVEL=DEBUG
        UNITDURATION_LOGGING__FORMAT=json
        UNITDURATION_TIMING__SLOW_THRESHOLD="500ms"
    """

    model_config = SettingsConfigDict(
        env_prefix="UNITDURATION_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
    timing: TimingSettings = Field(
        default_factory=TimingSettings,
        description="Elapsed-time reporting.",
    )
