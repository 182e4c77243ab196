"""Output rendering helpers for report-parse."""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from decimal import Decimal
from typing import IO, Any, Iterable, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from report_cli.sequences import Statistics

RECORD_TYPE_FIELD = "record"


def record_to_dict(record: Any) -> dict[str, Any]:
    """Convert a handler record into a JSON-ready mapping tagged with its type."""

    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        payload = _plain(record)
    elif isinstance(record, dict):
        payload = {key: _plain(value) for key, value in record.items()}
    else:
        raise TypeError(f"Cannot serialise record of type {type(record).__name__}.")
    return {RECORD_TYPE_FIELD: type(record).__name__, **payload}


def records_to_jsonl(records: Iterable[Any], stream: IO[str]) -> int:
    """Write ``records`` as JSON Lines to ``stream``; return the number written."""

    count = 0
    for record in records:
        stream.write(json.dumps(record_to_dict(record), ensure_ascii=False))
        stream.write("\n")
        count += 1
    return count


def render_statistics(statistics: Sequence[Statistics], *, console: Console) -> None:
    """Print tracer statistics as a table ordered by resolved path."""

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Action")
    table.add_column("Count", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Path", style="bold")
    for item in statistics:
        table.add_row(
            item.action or "",
            str(item.count),
            f"{item.average * 1000:.2f}",
            f"{item.duration * 1000:.2f}",
            item.name or "",
        )
    console.print(table)


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {item.name: _plain(getattr(value, item.name)) for item in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value
