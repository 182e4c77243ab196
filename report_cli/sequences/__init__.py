"""Lazy sequence combinators and the tracer used by the report pipeline."""

from __future__ import annotations

from .adjacent import Group, RankedGroup, group_adjacent, group_ranked, rank_adjacent, remove_rank
from .base import (
    LazySequence,
    close_resource,
    element_at,
    first,
    is_replayable,
    select,
    select_indexed,
    select_many,
    skip,
    where,
)
from .lookahead import Lookahead, lookahead
from .tracer import Statistics, Traced, TracedSequence, Tracer, TracerScope, trace
from .window import BufferSpan, window

__all__ = [
    "BufferSpan",
    "Group",
    "LazySequence",
    "Lookahead",
    "RankedGroup",
    "Statistics",
    "Traced",
    "TracedSequence",
    "Tracer",
    "TracerScope",
    "close_resource",
    "element_at",
    "first",
    "group_adjacent",
    "group_ranked",
    "is_replayable",
    "lookahead",
    "rank_adjacent",
    "remove_rank",
    "select",
    "select_indexed",
    "select_many",
    "skip",
    "trace",
    "where",
    "window",
]
