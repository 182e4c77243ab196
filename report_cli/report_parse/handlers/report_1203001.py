"""Report 1203001: account alerts with their transactions and card operations.

Each page carries three header lines and five footer lines around the content.
Content rows are classified by the marker printed at the end of column header
rows. Accounts are separated by a horizontal rule; within an account, a row with
a marker opens a section that runs until the next marked row:

* info: header row, then one data row with the account fields;
* transactions: header row, column title row, then one row per transaction,
  possibly followed by a "detail follows" row;
* operations: header row, column title row, then one row per operation;
* comment: a single row carrying the free text.

Markers and RTL fields are stored in visual order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from functools import reduce
from itertools import islice
from typing import TYPE_CHECKING

from report_cli.sequences import (
    Group,
    first,
    group_adjacent,
    select,
    select_many,
    skip,
    trace,
    where,
)
from report_cli.shared.exceptions import MalformedFieldError

from ..types import Page
from ..utils import parse_int, try_int, try_long
from .base import ReportHandler

if TYPE_CHECKING:  # pragma: no cover - import only for typing
    from report_cli.sequences import Tracer

HEADER_LINES = 3
FOOTER_LINES = 5
MIN_PAGE_LINES = 9

NO_DATA_BANNER = "*****     ! ! ! ! !   ה ז   ף י נ ס ל   ם ו י ה   ת ו ע ו נ ת   ן י א     *****"
RULE = " " + "-" * 132
INFO_MARKER = "|ןח .סמ"
TRANSACTION_MARKER = "| רוקמ"
COMMENT_MARKER = ":תורעה"
OPERATION_MARKER = "|  עוציב .ת"
DETAIL_FOLLOWS_MARKER = ":טרופמ רואת  "


class RowKind(Enum):
    EMPTY = "E"
    INFO = "I"
    TRANSACTION = "T"
    COMMENT = "C"
    OPERATION = "O"
    OTHER = " "


def classify(text: str) -> RowKind:
    """Return the kind of a content row from its markers."""

    if text.startswith("0") or not text.strip():
        return RowKind.EMPTY
    if text.endswith(INFO_MARKER):
        return RowKind.INFO
    if text.endswith(TRANSACTION_MARKER):
        return RowKind.TRANSACTION
    if text.endswith(COMMENT_MARKER):
        return RowKind.COMMENT
    if text.endswith(OPERATION_MARKER):
        return RowKind.OPERATION
    return RowKind.OTHER


@dataclass(frozen=True, slots=True)
class ClassifiedRow:
    page: Page
    row: int
    text: str
    kind: RowKind


@dataclass(slots=True)
class Transaction:
    page: int
    row: int
    origin: str | None = None
    description: str | None = None
    date: date | None = None
    action_type: int | None = None
    activity_type: int | None = None
    reference: int | None = None
    currency: str | None = None
    amount: Decimal | None = None
    shekel_amount: Decimal | None = None
    employee_id: int | None = None
    employee_code: int | None = None
    station: int | None = None


@dataclass(slots=True)
class Operation:
    page: int
    row: int
    date: date | None = None
    card_name: str | None = None
    client_id: int | None = None
    card_id: int | None = None
    comment: str | None = None
    amount: Decimal | None = None
    employee_id: int | None = None


@dataclass(slots=True)
class Account:
    report: int
    correctness_date: date
    destination_branch: int
    recipient_type: str | None
    recipient_number: int
    page: int
    row: int
    alert_date: date | None = None
    account_number: int | None = None
    account_name: str | None = None
    recipient: str | None = None
    alert_type: int | None = None
    id_type: str | None = None
    alert_comment: str | None = None
    comment: str | None = None
    transactions: list[Transaction] = field(default_factory=list)
    operations: list[Operation] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AccountBuilder:
    """Immutable accumulator folded over the sections of one account."""

    report: int
    correctness_date: date
    destination_branch: int
    recipient_type: str | None
    recipient_number: int
    page: int
    row: int
    alert_date: date | None = None
    account_number: int | None = None
    account_name: str | None = None
    recipient: str | None = None
    alert_type: int | None = None
    id_type: str | None = None
    alert_comment: str | None = None
    comment: str | None = None
    transactions: tuple[Transaction, ...] = ()
    operations: tuple[Operation, ...] = ()

    @classmethod
    def start(cls, page: Page) -> AccountBuilder:
        """Seed from the report header; page and row stay 0 until an info row is seen."""
        return cls(
            report=page.report,
            correctness_date=page.correctness_date,
            destination_branch=page.destination_branch,
            recipient_type=page.recipient_type,
            recipient_number=page.recipient_number,
            page=0,
            row=0,
        )

    def build(self) -> Account:
        return Account(
            report=self.report,
            correctness_date=self.correctness_date,
            destination_branch=self.destination_branch,
            recipient_type=self.recipient_type,
            recipient_number=self.recipient_number,
            page=self.page,
            row=self.row,
            alert_date=self.alert_date,
            account_number=self.account_number,
            account_name=self.account_name,
            recipient=self.recipient,
            alert_type=self.alert_type,
            id_type=self.id_type,
            alert_comment=self.alert_comment,
            comment=self.comment,
            transactions=list(self.transactions),
            operations=list(self.operations),
        )


class Report1203001(ReportHandler):
    report_number = 1203001

    def parse(self, pages: Iterable[Page], tracer: Tracer | None = None) -> Iterable[Account]:
        """``pages`` is read twice; the pipeline's lookahead serves the head page from its buffer."""
        head = first(pages, None)
        if head is None:
            return ()
        rows = trace(
            select_many(where(pages, _has_content), self.classify_page),
            "ReportPages/ReportRow",
            tracer,
        )
        runs = trace(
            group_adjacent(rows, starts_at=lambda row: RULE in row.text),
            "ReportRow/AccountRows",
            tracer,
        )
        accounts = select(runs, lambda run: self.build_account(run, head, tracer))
        return trace(accounts, "Section/Account", tracer)

    def classify_page(self, page: Page) -> Iterator[ClassifiedRow]:
        """Yield the non-empty content rows of ``page``."""

        content = page.lines[HEADER_LINES : len(page.lines) - FOOTER_LINES]
        for index, line in enumerate(content):
            kind = classify(line)
            if kind is RowKind.EMPTY:
                continue
            yield ClassifiedRow(page=page, row=index + HEADER_LINES + 1, text=line, kind=kind)

    def build_account(
        self, run: Group[ClassifiedRow], head: Page, tracer: Tracer | None = None
    ) -> Account:
        """Fold the sections of one account run, seeded from the report's ``head`` page.

        Every run after the first opens with the account rule. Rows printed before
        the first rule form a run of their own and are folded the same way.
        """

        rows = skip(run, 1) if RULE in run.first().text else run
        sections = trace(
            group_adjacent(rows, starts_at=lambda row: row.kind is not RowKind.OTHER),
            "AccountRows/Section",
            tracer,
        )
        builder = reduce(
            lambda current, section: self.apply_section(current, section, tracer),
            sections,
            AccountBuilder.start(head),
        )
        return builder.build()

    def apply_section(
        self,
        builder: AccountBuilder,
        section: Group[ClassifiedRow],
        tracer: Tracer | None = None,
    ) -> AccountBuilder:
        head = section.first()
        if head.kind is RowKind.INFO:
            row = section.element_at(1, None)
            if row is None:
                raise MalformedFieldError(
                    "account info",
                    head.text.strip(),
                    f"Info section at page {head.page.page} row {head.row} has no data row.",
                )
            return self.apply_info(builder, row)
        if head.kind is RowKind.TRANSACTION:
            rows = trace(
                (row for row in islice(section, 2, None) if not row.text.endswith(DETAIL_FOLLOWS_MARKER)),
                "Section/Transactions",
                tracer,
            )
            return self.apply_transactions(builder, rows)
        if head.kind is RowKind.OPERATION:
            rows = trace(islice(section, 2, None), "Section/Operations", tracer)
            return self.apply_operations(builder, rows)
        if head.kind is RowKind.COMMENT:
            return self.apply_comment(builder, head)
        return builder

    def apply_info(self, builder: AccountBuilder, row: ClassifiedRow) -> AccountBuilder:
        line = row.text
        return replace(
            builder,
            report=row.page.report,
            correctness_date=row.page.correctness_date,
            destination_branch=row.page.destination_branch,
            recipient_type=row.page.recipient_type,
            recipient_number=row.page.recipient_number,
            page=row.page.page,
            row=row.row,
            alert_date=self.try_date(line, 67, 8),
            account_number=parse_int(line, 127, 6),
            account_name=self.text(line, 86, 36, rtl=True),
            recipient=self.text(line, 123, 3),
            alert_type=parse_int(line, 81, 4),
            id_type=self.text(line, 76, 4, rtl=True),
            alert_comment=self.text(line, 1, 65, rtl=True),
        )

    def apply_transactions(
        self, builder: AccountBuilder, rows: Iterable[ClassifiedRow]
    ) -> AccountBuilder:
        parsed = tuple(self.parse_transaction(row) for row in rows)
        return replace(builder, transactions=builder.transactions + parsed)

    def apply_operations(
        self, builder: AccountBuilder, rows: Iterable[ClassifiedRow]
    ) -> AccountBuilder:
        parsed = tuple(self.parse_operation(row) for row in rows)
        return replace(builder, operations=builder.operations + parsed)

    def apply_comment(self, builder: AccountBuilder, head: ClassifiedRow) -> AccountBuilder:
        return replace(builder, comment=self.text(head.text, 1, 125, rtl=True))

    def parse_transaction(self, row: ClassifiedRow) -> Transaction:
        line = row.text
        return Transaction(
            page=row.page.page,
            row=row.row,
            origin=self.text(line, 128, 5, rtl=True),
            description=self.text(line, 113, 14, rtl=True),
            date=self.try_date(line, 102, 10),
            action_type=try_int(line, 97, 4),
            activity_type=try_int(line, 91, 5),
            reference=try_long(line, 77, 13),
            currency=self.text(line, 72, 4, rtl=True),
            amount=self.try_decimal(line, 51, 20),
            shekel_amount=self.try_decimal(line, 30, 20),
            employee_id=try_long(line, 13, 17),
            employee_code=try_int(line, 7, 5),
            station=try_int(line, 1, 4),
        )

    def parse_operation(self, row: ClassifiedRow) -> Operation:
        line = row.text
        return Operation(
            page=row.page.page,
            row=row.row,
            date=self.try_date(line, 123, 10),
            card_name=self.text(line, 97, 25, rtl=True),
            client_id=try_long(line, 87, 9),
            card_id=try_long(line, 75, 11),
            comment=self.text(line, 44, 30, rtl=True),
            amount=self.try_decimal(line, 23, 20),
            employee_id=try_long(line, 6, 16),
        )


def _has_content(page: Page) -> bool:
    return len(page.lines) >= MIN_PAGE_LINES and NO_DATA_BANNER not in page.lines[4]
