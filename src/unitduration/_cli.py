"""Command-line interface (Typer-based).

Provides :func:`build_cli`, which constructs the ``unitduration`` Typer
app, and :func:`main`, the console-script entry point.

Commands::

    unitduration parse "1D 10h 17m 36s"        # → 123456000000000
    unitduration format 1234567 --unit ms      # → 20m 34s 567ms
    unitduration normalize 90s                 # → 1m 30s
    unitduration normalize --document cfg.edn  # canonicalise literals
    unitduration literal 123ms                 # → #unit/duration "123ms"
    unitduration time -- sleep 1               # logs "Elapsed time: 1s 2ms ..."

Framework-level options (``--version``, ``--log-level``,
``--log-format``, ``--env-file``, ``--json``) go before the command.
With ``--json`` every result is one JSON object per line and failures
are printed as :class:`~unitduration._errors.ErrorPayload` objects.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn, get_args

import typer
from pydantic import ValidationError

from unitduration._codec import normalize_duration, parse_duration
from unitduration._duration import Duration
from unitduration._errors import DurationError, build_error_payload
from unitduration._literal import replace_literals, to_literal
from unitduration._logging import configure_logging
from unitduration._settings import LoggingSettings, Settings
from unitduration._timing import Timer

logger = logging.getLogger(__name__)

SERVICE_NAME = "unitduration"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INPUT_ERROR = 2
EXIT_RUNTIME_ERROR = 3

# ---------------------------------------------------------------------------
# Allowed values (extracted from LoggingSettings Literal types)
# ---------------------------------------------------------------------------

_VALID_LOG_LEVELS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["level"].annotation,
)
_VALID_LOG_FORMATS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["format"].annotation,
)


class CountUnit(str, Enum):
    """Unit of the raw counts given to ``format``."""

    NS = "ns"
    MS = "ms"


@dataclass(frozen=True)
class CliState:
    """Per-invocation state shared by all commands via ``ctx.obj``."""

    settings: Settings
    json_output: bool


def _package_version() -> str:
    from unitduration import __version__

    return __version__


def _emit(state: CliState, text: str, record: dict[str, object]) -> None:
    if state.json_output:
        typer.echo(json.dumps(record, ensure_ascii=False))
    else:
        typer.echo(text)


def _fail(state: CliState, error: Exception, code: int = EXIT_INPUT_ERROR) -> NoReturn:
    if state.json_output:
        typer.echo(build_error_payload(error).to_json())
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=code)


def build_cli() -> typer.Typer:
    """Construct the ``unitduration`` Typer CLI.

    Returns:
        A configured :class:`typer.Typer` ready to invoke.
    """
    cli = typer.Typer(
        help="Canonical human-readable durations: parse, format and time.",
        no_args_is_help=True,
    )

    # -- global options -----------------------------------------------------

    @cli.callback(invoke_without_command=True)
    def main(
        ctx: typer.Context,
        version_flag: Annotated[
            bool | None,
            typer.Option(
                "--version",
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Override log level."),
        ] = None,
        log_format: Annotated[
            str | None,
            typer.Option("--log-format", help="Override log format."),
        ] = None,
        env_file: Annotated[
            str,
            typer.Option("--env-file", help="Path to .env file."),
        ] = ".env",
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Emit one JSON object per result."),
        ] = False,
    ) -> None:
        # -- version ---------------------------------------------------------
        if version_flag:
            typer.echo(f"{SERVICE_NAME} v{_package_version()}")
            raise typer.Exit()

        # -- validate enum-like options -------------------------------------
        if log_level is not None and log_level.upper() not in _VALID_LOG_LEVELS:
            raise typer.BadParameter(
                f"Invalid log level '{log_level}'. "
                f"Choose from: {', '.join(_VALID_LOG_LEVELS)}",
                param_hint="'--log-level'",
            )

        if log_format is not None and log_format.lower() not in _VALID_LOG_FORMATS:
            raise typer.BadParameter(
                f"Invalid log format '{log_format}'. "
                f"Choose from: {', '.join(_VALID_LOG_FORMATS)}",
                param_hint="'--log-format'",
            )

        # -- build settings -------------------------------------------------
        try:
            settings = Settings(_env_file=env_file)  # type: ignore[call-arg]
        except ValidationError as exc:
            typer.echo(f"Configuration error: {exc}", err=True)
            raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc

        # -- apply CLI overrides --------------------------------------------
        if log_level is not None:
            settings.logging = settings.logging.model_copy(
                update={"level": log_level.upper()},
            )

        if log_format is not None:
            settings.logging = settings.logging.model_copy(
                update={"format": log_format.lower()},
            )

        configure_logging(
            settings.logging,
            service=SERVICE_NAME,
            version=_package_version(),
        )
        ctx.obj = CliState(settings=settings, json_output=json_output)

        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    # -- codec commands -----------------------------------------------------

    @cli.command("parse")
    def parse_command(
        ctx: typer.Context,
        texts: Annotated[list[str], typer.Argument(help="Duration strings.")],
    ) -> None:
        """Print the nanosecond count of each duration string."""
        state: CliState = ctx.obj
        for text in texts:
            try:
                duration = parse_duration(text)
            except DurationError as exc:
                _fail(state, exc)
            _emit(
                state,
                str(duration.nanos),
                {"input": text, "nanos": duration.nanos, "canonical": str(duration)},
            )

    @cli.command("format")
    def format_command(
        ctx: typer.Context,
        counts: Annotated[list[int], typer.Argument(help="Raw counts.")],
        unit: Annotated[
            CountUnit,
            typer.Option("--unit", help="Unit of the raw counts."),
        ] = CountUnit.NS,
    ) -> None:
        """Print the canonical string of each raw count."""
        state: CliState = ctx.obj
        constructor = Duration.of_millis if unit is CountUnit.MS else Duration.of_nanos
        for count in counts:
            try:
                duration = constructor(count)
            except (DurationError, ValueError) as exc:
                _fail(state, exc)
            _emit(
                state,
                str(duration),
                {"input": count, "nanos": duration.nanos, "canonical": str(duration)},
            )

    @cli.command("normalize")
    def normalize_command(
        ctx: typer.Context,
        texts: Annotated[
            list[str] | None,
            typer.Argument(help="Duration strings."),
        ] = None,
        document: Annotated[
            Path | None,
            typer.Option(
                "--document",
                exists=True,
                dir_okay=False,
                readable=True,
                help="Rewrite every tagged literal in this file.",
            ),
        ] = None,
    ) -> None:
        """Print the canonical form of durations or of a whole document."""
        state: CliState = ctx.obj
        if document is not None:
            try:
                rewritten = replace_literals(document.read_text(encoding="utf-8"))
            except DurationError as exc:
                _fail(state, exc)
            typer.echo(rewritten, nl=False)
            return
        if not texts:
            raise typer.BadParameter(
                "Give at least one duration string or --document.",
                param_hint="'TEXTS...'",
            )
        for text in texts:
            try:
                canonical = normalize_duration(text)
            except DurationError as exc:
                _fail(state, exc)
            _emit(state, canonical, {"input": text, "canonical": canonical})

    @cli.command("literal")
    def literal_command(
        ctx: typer.Context,
        texts: Annotated[list[str], typer.Argument(help="Duration strings.")],
    ) -> None:
        """Print each duration as a ``#unit/duration`` tagged literal."""
        state: CliState = ctx.obj
        for text in texts:
            try:
                literal = to_literal(parse_duration(text))
            except DurationError as exc:
                _fail(state, exc)
            _emit(state, literal, {"input": text, "literal": literal})

    # -- timing -------------------------------------------------------------

    @cli.command(
        "time",
        context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    )
    def time_command(
        ctx: typer.Context,
        command: Annotated[list[str], typer.Argument(help="Command to run.")],
    ) -> None:
        """Run COMMAND and log its elapsed time."""
        state: CliState = ctx.obj
        timer = Timer(settings=state.settings.timing)
        try:
            with timer:
                completed = subprocess.run(command, check=False)  # noqa: S603
        except OSError as exc:
            logger.error("Runtime error: %s", exc)
            _fail(state, exc, EXIT_RUNTIME_ERROR)
        if state.json_output:
            typer.echo(
                json.dumps(
                    {
                        "command": command,
                        "returncode": completed.returncode,
                        "elapsed": str(timer.elapsed),
                        "elapsed_ns": timer.elapsed.nanos,
                    },
                    ensure_ascii=False,
                ),
            )
        raise typer.Exit(code=completed.returncode)

    return cli


def main() -> None:
    """Console-script entry point."""
    build_cli()(prog_name=SERVICE_NAME)
