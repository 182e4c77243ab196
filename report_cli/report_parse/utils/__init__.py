"""Shared utilities for report handlers."""

from __future__ import annotations

from .bidi import visual_to_logical
from .fields import (
    DATE_FORMATS,
    DEFAULT_NUMBER_FORMAT,
    NumberFormat,
    normalize,
    null_if_empty,
    parse_date,
    parse_decimal,
    parse_int,
    parse_long,
    substring,
    text,
    try_date,
    try_decimal,
    try_int,
    try_long,
)

__all__ = [
    "DATE_FORMATS",
    "DEFAULT_NUMBER_FORMAT",
    "NumberFormat",
    "normalize",
    "null_if_empty",
    "parse_date",
    "parse_decimal",
    "parse_int",
    "parse_long",
    "substring",
    "text",
    "try_date",
    "try_decimal",
    "try_int",
    "try_long",
    "visual_to_logical",
]
