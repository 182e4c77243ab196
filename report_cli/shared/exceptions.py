"""Project-wide custom exceptions."""

from __future__ import annotations


class ReportCliError(Exception):
    """Base exception for the report parsing suite."""


class ConfigurationError(ReportCliError):
    """Raised when configuration loading or validation fails."""


class LineSourceError(ReportCliError):
    """Raised when the raw report input cannot be opened or read."""


class ParseError(ReportCliError):
    """Raised when a report record cannot be built from its lines."""


class MalformedFieldError(ParseError):
    """Raised when a required fixed-column field fails to parse."""

    def __init__(self, kind: str, value: str, message: str | None = None) -> None:
        self.kind = kind
        self.value = value
        super().__init__(message or f"Cannot parse {kind} from '{value}'.")


class SequenceError(ReportCliError):
    """Raised when a lazy sequence is driven outside of its contract."""


class NonIdempotentSequenceError(SequenceError):
    """Raised when a source yields fewer items on a new pass than on a previous one."""


class GroupReplayError(SequenceError):
    """Raised when a visited group must be replayed from a single-pass source."""
