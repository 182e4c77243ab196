"""Dataclasses describing framed report input."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from typing import NamedTuple

from .utils import parse_date, parse_int, text


class ReportKey(NamedTuple):
    """Composite key shared by every page of one report instance."""

    report: int
    correctness_date: date
    destination_branch: int
    recipient_type: str | None
    recipient_number: int


@dataclass(frozen=True, slots=True)
class Page:
    """A run of lines opened by a new-page line, with its header fields."""

    page: int
    report: int
    correctness_date: date
    destination_branch: int
    recipient_type: str | None
    recipient_number: int
    lines: tuple[str, ...]

    @property
    def key(self) -> ReportKey:
        return ReportKey(
            self.report,
            self.correctness_date,
            self.destination_branch,
            self.recipient_type,
            self.recipient_number,
        )

    @classmethod
    def from_lines(cls, lines: Sequence[str], page: int) -> Page:
        """Build a page reading the header from its first two lines."""

        first_line = lines[0] if lines else ""
        second_line = lines[1] if len(lines) > 1 else ""
        return cls(
            page=page,
            report=parse_int(second_line, 92, 7),
            correctness_date=parse_date(second_line, 16, 8),
            destination_branch=parse_int(first_line, 34, 3),
            recipient_type=text(first_line, 32, 1),
            recipient_number=parse_int(first_line, 37, 2),
            lines=tuple(lines),
        )


@dataclass(frozen=True, slots=True)
class ReportGroup:
    """The pages of one logical report, in input order.

    ``pages`` is the lazy run produced by the report framing stage; it follows the
    single live cursor contract of ``group_adjacent`` and is consumed once.
    """

    key: ReportKey
    pages: Iterable[Page]

    @property
    def report(self) -> int:
        return self.key.report

    def __iter__(self) -> Iterator[Page]:
        return iter(self.pages)
