"""Console output for report-parse.

Parsed records go to stdout. Messages, statistics tables and diagnostics from
library modules (which log through :mod:`logging`) all go to stderr.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rich.console import Console
from rich.theme import Theme
from rich.traceback import install

install(show_locals=False)

LIBRARY_LOGGER = "report_cli"

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "debug": "dim",
    }
)

_LEVEL_STYLES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}

# Highlighting stays off so report codes and account numbers print without ANSI noise.
_records_console = Console(theme=_THEME, highlight=False)
_messages_console = Console(stderr=True, theme=_THEME, highlight=False)


@dataclass(slots=True)
class Logger:
    """Styled stderr messages; ``debug`` only prints in verbose mode."""

    verbose: bool = False

    @property
    def console(self) -> Console:
        return _records_console

    @property
    def err_console(self) -> Console:
        return _messages_console

    def info(self, message: str) -> None:
        self._emit(message, "info")

    def success(self, message: str) -> None:
        self._emit(message, "success")

    def warning(self, message: str) -> None:
        self._emit(message, "warning")

    def error(self, message: str) -> None:
        self._emit(message, "error")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit(message, "debug")

    def _emit(self, message: str, style: str) -> None:
        _messages_console.print(message, style=style, markup=False)


class ConsoleLogHandler(logging.Handler):
    """Print records of the ``report_cli`` loggers on the stderr console."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:  # pragma: no cover - formatting errors are reported by logging
            self.handleError(record)
            return
        _messages_console.print(message, style=_LEVEL_STYLES.get(record.levelno, "info"), markup=False)


def configure_library_logging(verbose: bool) -> logging.Logger:
    """Route ``report_cli.*`` records to stderr: debug when verbose, warnings otherwise."""

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    if not any(isinstance(handler, ConsoleLogHandler) for handler in library_logger.handlers):
        handler = ConsoleLogHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        library_logger.addHandler(handler)
    library_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return library_logger


def get_logger(verbose: bool = False) -> Logger:
    """Return a Logger and align library log routing with ``verbose``."""
    configure_library_logging(verbose)
    return Logger(verbose=verbose)
