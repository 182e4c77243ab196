"""Builders for fixed-column report 1203001 pages.

Lines are assembled by placing values at absolute columns, the way the legacy
printer lays them out. Hebrew values are written in visual order.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from report_cli.report_parse.handlers.report_1203001 import (
    COMMENT_MARKER,
    DETAIL_FOLLOWS_MARKER,
    FOOTER_LINES,
    INFO_MARKER,
    NO_DATA_BANNER,
    OPERATION_MARKER,
    RULE,
    TRANSACTION_MARKER,
)

WIDTH = 133


class ReportBuilder:
    width = WIDTH

    def place(self, *fields: tuple[int, str], width: int = WIDTH) -> str:
        buffer = [" "] * width
        for column, value in fields:
            end = column + len(value)
            if end > len(buffer):
                buffer.extend(" " * (end - len(buffer)))
            buffer[column:end] = list(value)
        return "".join(buffer)

    def marked(self, marker: str, label: str = "HEADER") -> str:
        return self.place((1, label), width=WIDTH - len(marker)) + marker

    def header(
        self,
        *,
        report: str = "1203001",
        when: str = "15/03/24",
        branch: str = "123",
        recipient_type: str = "B",
        recipient_number: str = "07",
    ) -> list[str]:
        return [
            self.place((0, "1"), (32, recipient_type), (34, branch), (37, recipient_number)),
            self.place((16, when), (92, report)),
            self.place((1, "BRANCH ALERTS")),
        ]

    def footer(self) -> list[str]:
        return [self.place((1, f"FOOTER {index}")) for index in range(FOOTER_LINES)]

    def title(self) -> str:
        return self.place((1, "COLUMN TITLES"))

    def empty(self) -> str:
        return self.place((0, "0"))

    def info_row(
        self,
        account_number: str = "456789",
        account_name: str = "ןהכ יבא",
        alert_type: str = "12",
    ) -> str:
        return self.place(
            (1, "הקידב"),
            (67, "14/03/24"),
            (76, "ז.ת"),
            (81, alert_type),
            (86, account_name),
            (123, "ABC"),
            (127, account_number),
        )

    def transaction_row(self, reference: str = "9876543210", amount: str = "1,234.50") -> str:
        return self.place(
            (1, "7"),
            (7, "42"),
            (13, "123456789"),
            (30, "1,234.50-"),
            (51, amount),
            (72, "ILS"),
            (77, reference),
            (91, "345"),
            (97, "12"),
            (102, "01/03/2024"),
            (113, "םולש"),
            (128, "ABC"),
        )

    def operation_row(self) -> str:
        return self.place(
            (6, "5555"),
            (23, "99.90"),
            (44, "OK"),
            (75, "44455566677"),
            (87, "111222333"),
            (97, "XYZ"),
            (123, "02/03/2024"),
        )

    def comment_row(self, comment: str = "ןיקת") -> str:
        return self.marked(COMMENT_MARKER, comment)

    def page_one(self, **header: str) -> list[str]:
        """Account 456789: info and two transactions, one with a detail row."""

        return (
            self.header(**header)
            + [
                RULE,
                self.marked(INFO_MARKER, "ACCOUNT"),
                self.info_row(),
                self.marked(TRANSACTION_MARKER, "TRANSACTIONS"),
                self.title(),
                self.transaction_row("9876543210", "1,234.50"),
                self.marked(DETAIL_FOLLOWS_MARKER, "DETAIL"),
                self.transaction_row("1111111111", "10.00"),
                self.empty(),
            ]
            + self.footer()
        )

    def page_two(self, **header: str) -> list[str]:
        """Operations and comment of account 456789, then account 654321."""

        return (
            self.header(**header)
            + [
                self.marked(OPERATION_MARKER, "OPERATIONS"),
                self.title(),
                self.operation_row(),
                self.comment_row(),
                RULE,
                self.marked(INFO_MARKER, "ACCOUNT"),
                self.info_row("654321", "יול הנד", "3"),
            ]
            + self.footer()
        )

    def no_data_page(self, **header: str) -> list[str]:
        return (
            self.header(**header)
            + [self.title(), self.place((10, NO_DATA_BANNER))]
            + self.footer()
        )

    def sample_lines(self) -> list[str]:
        return self.page_one() + self.page_two()


@pytest.fixture()
def builder() -> ReportBuilder:
    return ReportBuilder()


@pytest.fixture()
def sample_lines(builder: ReportBuilder) -> list[str]:
    return builder.sample_lines()


@pytest.fixture()
def sample_file(tmp_path: Path, sample_lines: list[str]) -> Path:
    path = tmp_path / "report.txt"
    path.write_text("\n".join(sample_lines) + "\n", encoding="utf-8")
    return path
