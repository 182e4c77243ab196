"""Fixed-column field extraction and typed parsing helpers.

Report layouts read columns by position and routinely reach past the end of a
short line, so :func:`substring` clamps instead of raising and every accessor is
built on it. Each typed parser comes in two forms: ``parse_*`` raises
``MalformedFieldError`` for required columns, ``try_*`` returns ``None`` for
optional ones.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from report_cli.shared.exceptions import MalformedFieldError

MAX_LENGTH = sys.maxsize

DATE_FORMATS: tuple[str, ...] = ("%d/%m/%Y", "%d/%m/%y", "%d.%m.%Y", "%d.%m.%y", "%Y-%m-%d")

_SPACES_RE = re.compile(r"\s+")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True, slots=True)
class NumberFormat:
    """Separators used by decimal columns, independent of the host locale."""

    decimal_separator: str = "."
    group_separator: str = ","


DEFAULT_NUMBER_FORMAT = NumberFormat()


def substring(value: str | None, start: int, length: int = MAX_LENGTH) -> str:
    """Return ``value[start:start + length]`` clamped to the bounds of ``value``.

    A negative ``start`` shortens ``length`` by the same amount and starts at 0.
    Never raises; out of range requests yield ``""``.
    """

    if value is None:
        return ""
    if start < 0:
        length += start
        start = 0
    if start >= len(value):
        return ""
    if length > len(value) - start:
        length = len(value) - start
    if length <= 0:
        return ""
    return value[start : start + length]


def normalize(value: str | None) -> str:
    """Collapse whitespace runs into single spaces and trim."""

    if value is None:
        return ""
    return _SPACES_RE.sub(" ", value).strip()


def null_if_empty(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def text(
    value: str | None,
    start: int = 0,
    length: int = MAX_LENGTH,
    *,
    normalize: bool = True,
    trim: bool = True,
    bidi: Callable[[str], str] | None = None,
    null_if_empty: bool = True,
) -> str | None:
    """Extract a text column.

    The column is whitespace-normalized (or only trimmed), turned into ``None``
    when blank, and finally passed through ``bidi`` for right-to-left fields.
    """

    result = substring(value, start, length)
    if normalize:
        result = _SPACES_RE.sub(" ", result).strip()
    elif trim:
        result = result.strip()
    if null_if_empty and not result.strip():
        return None
    if bidi is not None:
        result = bidi(result)
    return result


def parse_int(value: str | None, start: int = 0, length: int = MAX_LENGTH) -> int:
    raw = substring(value, start, length)
    result = _to_int(raw)
    if result is None:
        raise MalformedFieldError("integer", raw)
    return result


def try_int(value: str | None, start: int = 0, length: int = MAX_LENGTH) -> int | None:
    return _to_int(substring(value, start, length))


# Python integers are unbounded; long columns differ from int ones only in width.
parse_long = parse_int
try_long = try_int


def parse_decimal(
    value: str | None,
    start: int = 0,
    length: int = MAX_LENGTH,
    number_format: NumberFormat = DEFAULT_NUMBER_FORMAT,
) -> Decimal:
    raw = substring(value, start, length)
    result = _to_decimal(raw, number_format)
    if result is None:
        raise MalformedFieldError("decimal", raw)
    return result


def try_decimal(
    value: str | None,
    start: int = 0,
    length: int = MAX_LENGTH,
    number_format: NumberFormat = DEFAULT_NUMBER_FORMAT,
) -> Decimal | None:
    return _to_decimal(substring(value, start, length), number_format)


def parse_date(
    value: str | None,
    start: int = 0,
    length: int = MAX_LENGTH,
    formats: Sequence[str] | None = None,
) -> date:
    raw = substring(value, start, length)
    result = _to_date(raw, formats or DATE_FORMATS)
    if result is None:
        raise MalformedFieldError("date", raw)
    return result


def try_date(
    value: str | None,
    start: int = 0,
    length: int = MAX_LENGTH,
    formats: Sequence[str] | None = None,
) -> date | None:
    return _to_date(substring(value, start, length), formats or DATE_FORMATS)


def _to_int(raw: str) -> int | None:
    cleaned = raw.strip()
    if not _INTEGER_RE.match(cleaned):
        return None
    return int(cleaned)


def _to_decimal(raw: str, number_format: NumberFormat) -> Decimal | None:
    """Parse amounts such as ``1,234.56``, ``-12.5``, ``12.50-`` or ``(12.50)``."""

    cleaned = raw.strip()
    if not cleaned:
        return None
    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1].strip()
    if cleaned.endswith("-"):
        negative = not negative
        cleaned = cleaned[:-1].strip()
    elif cleaned.endswith("+"):
        cleaned = cleaned[:-1].strip()
    if cleaned.startswith("-"):
        negative = not negative
        cleaned = cleaned[1:].strip()
    elif cleaned.startswith("+"):
        cleaned = cleaned[1:].strip()

    if number_format.group_separator:
        cleaned = cleaned.replace(number_format.group_separator, "")
    if number_format.decimal_separator != ".":
        cleaned = cleaned.replace(number_format.decimal_separator, ".")
    if not cleaned or not re.fullmatch(r"\d*\.?\d*", cleaned) or cleaned == ".":
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    return -amount if negative else amount


def _to_date(raw: str, formats: Sequence[str]) -> date | None:
    cleaned = raw.strip()
    if not cleaned:
        return None
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None
