"""Shared CLI plumbing: invocation context, common options and error mapping."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import click

from .config import AppConfig, load_config
from .exceptions import (
    ConfigurationError,
    LineSourceError,
    ParseError,
    ReportCliError,
    SequenceError,
)
from .logging import Logger, get_logger

F = TypeVar("F", bound=Callable[..., Any])

# First match wins, so subclasses precede their bases.
_ERROR_LABELS: tuple[tuple[type[ReportCliError], str], ...] = (
    (ConfigurationError, "Configuration error"),
    (LineSourceError, "Input error"),
    (ParseError, "Parse error"),
    (SequenceError, "Pipeline error"),
)


@dataclass(slots=True)
class CLIContext:
    """Per-invocation state handed to report-parse commands."""

    config: AppConfig
    dry_run: bool
    verbose: bool
    logger: Logger

    @property
    def config_path(self) -> Path:
        return self.config.source_path

    @classmethod
    def create(cls, config_path: str | None, *, dry_run: bool, verbose: bool) -> CLIContext:
        try:
            config = load_config(config_path)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc
        return cls(config=config, dry_run=dry_run, verbose=verbose, logger=get_logger(verbose=verbose))


def common_cli_options(func: F) -> F:
    """Add ``--config``, ``--dry-run`` and ``--verbose``; pass the context as ``cli_ctx``."""

    @click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=str),
        help="Path to a YAML config file.",
    )
    @click.option("--dry-run", is_flag=True, help="Parse and count records without writing them.")
    @click.option("--verbose", is_flag=True, help="Show debug output, including pipeline diagnostics.")
    @click.pass_context
    @functools.wraps(func)
    def wrapper(
        ctx: click.Context,
        *args: Any,
        config_path: str | None = None,
        dry_run: bool = False,
        verbose: bool = False,
        **kwargs: Any,
    ) -> Any:
        cli_ctx = CLIContext.create(config_path, dry_run=dry_run, verbose=verbose)
        ctx.obj = cli_ctx
        cli_ctx.logger.debug(f"Configuration: {cli_ctx.config_path}")
        return func(*args, cli_ctx=cli_ctx, **kwargs)

    return wrapper  # type: ignore[return-value]


def handle_cli_errors(func: F) -> F:
    """Turn project exceptions into ``click.ClickException`` labelled by category."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except ReportCliError as exc:
            raise click.ClickException(f"{_error_label(exc)}: {exc}") from exc
        except Exception as exc:  # pragma: no cover - safety net for unexpected errors
            raise click.ClickException(f"Unexpected error: {exc}") from exc

    return wrapper  # type: ignore[return-value]


def _error_label(exc: ReportCliError) -> str:
    for kind, label in _ERROR_LABELS:
        if isinstance(exc, kind):
            return label
    return "Error"
