"""Base classes and registry for report handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..types import Page
from ..utils import (
    DATE_FORMATS,
    DEFAULT_NUMBER_FORMAT,
    NumberFormat,
    parse_date,
    parse_decimal,
    text,
    try_date,
    try_decimal,
    visual_to_logical,
)
from ..utils.fields import MAX_LENGTH

if TYPE_CHECKING:  # pragma: no cover - import only for typing
    from report_cli.sequences import Tracer


class ReportHandler(ABC):
    """Abstract base for report-code specific parsers."""

    report_number: int = 0

    def __init__(
        self,
        *,
        number_format: NumberFormat = DEFAULT_NUMBER_FORMAT,
        date_formats: Sequence[str] = DATE_FORMATS,
        bidi: Callable[[str], str] = visual_to_logical,
    ) -> None:
        self.number_format = number_format
        self.date_formats = tuple(date_formats)
        self.bidi = bidi

    @abstractmethod
    def parse(self, pages: Iterable[Page], tracer: Tracer | None = None) -> Iterable[object]:
        """Turn the pages of one report into output records."""

    def text(
        self,
        value: str | None,
        start: int = 0,
        length: int = MAX_LENGTH,
        *,
        rtl: bool = False,
    ) -> str | None:
        return text(value, start, length, bidi=self.bidi if rtl else None)

    def decimal(self, value: str | None, start: int = 0, length: int = MAX_LENGTH) -> Decimal:
        return parse_decimal(value, start, length, self.number_format)

    def try_decimal(
        self, value: str | None, start: int = 0, length: int = MAX_LENGTH
    ) -> Decimal | None:
        return try_decimal(value, start, length, self.number_format)

    def date(self, value: str | None, start: int = 0, length: int = MAX_LENGTH) -> date:
        return parse_date(value, start, length, self.date_formats)

    def try_date(self, value: str | None, start: int = 0, length: int = MAX_LENGTH) -> date | None:
        return try_date(value, start, length, self.date_formats)


class HandlerRegistry:
    """Closed mapping of report codes to handlers, built once at startup."""

    def __init__(self, handlers: Iterable[ReportHandler]) -> None:
        entries: dict[int, ReportHandler] = {}
        for handler in handlers:
            code = handler.report_number
            if code in entries:
                raise ValueError(f"Report {code} has more than one handler.")
            entries[code] = handler
        self._handlers: Mapping[int, ReportHandler] = MappingProxyType(entries)

    def get(self, report: int) -> ReportHandler | None:
        """Return the handler for ``report`` or ``None`` when it is not registered."""
        return self._handlers.get(report)

    def __contains__(self, report: object) -> bool:
        return report in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def codes(self) -> tuple[int, ...]:
        return tuple(self._handlers)

    def restricted_to(self, codes: Iterable[int]) -> HandlerRegistry:
        """Return a registry keeping only ``codes``; an empty selection keeps all."""
        allowed = set(codes)
        if not allowed:
            return self
        return HandlerRegistry(
            handler for code, handler in self._handlers.items() if code in allowed
        )
