"""Lookahead combinator: peekable view over a lazily produced sequence."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from report_cli.shared.exceptions import NonIdempotentSequenceError

from .base import _MISSING, close_resource, element_at, first, is_replayable

T = TypeVar("T")

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _Cursor(Generic[T]):
    """Independent forward position into the source."""

    iterator: Iterator[T]
    index: int
    version: int


class Lookahead(Generic[T]):
    """Sequence with the same content as ``source`` that can be peeked cheaply.

    The first ``depth`` items are buffered once and served to every consumer.
    Items past the buffer come from a pool of at most ``enumerators`` cursors over
    the source. A request reuses the cursor positioned closest at-or-before the
    wanted index; when none fits and the pool is full, the least recently
    advanced cursor is closed and replaced by a fresh one.

    Opening a fresh cursor re-iterates ``source``, so anything past the buffer
    requires a source that yields the same items on every pass. A source that
    comes up short on a later pass raises ``NonIdempotentSequenceError``.

    Cursors stay open between iterations so the next consumer can resume them.
    They are closed on eviction, on reaching the end of the source, and by
    ``close()``; use the instance as a context manager or hand it to a tracer
    scope to guarantee that.
    """

    def __init__(self, source: Iterable[T], depth: int = 1, enumerators: int = 1) -> None:
        if depth < 0:
            raise ValueError("depth must not be negative.")
        self._source = source
        self._depth = depth
        self._enumerators = enumerators if enumerators > 0 else 1
        self._buffer: list[T] = []
        self._cursors: list[_Cursor[T]] = []
        self._version = 0
        self._has_more: bool | None = None

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def buffered(self) -> tuple[T, ...]:
        return tuple(self._buffer)

    @property
    def open_cursors(self) -> int:
        return len(self._cursors)

    @property
    def replayable(self) -> bool:
        return is_replayable(self._source)

    def __iter__(self) -> Iterator[T]:
        index = 0
        while True:
            if index < len(self._buffer):
                yield self._buffer[index]
                index += 1
                continue
            if self._has_more is False:
                return

            cursor = self._acquire(index)
            try:
                current = next(cursor.iterator)
            except StopIteration:
                if index == len(self._buffer):
                    self._has_more = False
                self._discard(cursor)
                self._version += 1
                return

            if index == len(self._buffer):
                if index < self._depth:
                    self._buffer.append(current)
                else:
                    self._has_more = True

            index += 1
            self._version += 1
            cursor.index = index
            cursor.version = self._version
            yield current

    def first(self, default: Any = _MISSING) -> T:
        return first(self, default)

    def element_at(self, index: int, default: Any = _MISSING) -> T:
        return element_at(self, index, default)

    def close(self) -> None:
        """Close every pooled cursor."""
        cursors, self._cursors = self._cursors, []
        for cursor in cursors:
            close_resource(cursor.iterator)

    def __enter__(self) -> Lookahead[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _acquire(self, index: int) -> _Cursor[T]:
        """Return a cursor positioned exactly at ``index``."""

        cursor: _Cursor[T] | None = None
        for candidate in self._cursors:
            if candidate.index <= index and (cursor is None or cursor.index < candidate.index):
                cursor = candidate

        if cursor is None:
            if len(self._cursors) >= self._enumerators:
                stale = min(self._cursors, key=lambda item: item.version)
                _LOGGER.debug(
                    "Evicting lookahead cursor at index %d (version %d).", stale.index, stale.version
                )
                self._discard(stale)
            cursor = _Cursor(iterator=iter(self._source), index=0, version=self._version)
            self._cursors.append(cursor)

        while cursor.index < index:
            try:
                next(cursor.iterator)
            except StopIteration:
                self._discard(cursor)
                raise NonIdempotentSequenceError(
                    f"Source ended at index {cursor.index} while seeking index {index}; "
                    "it cannot be driven to the same position twice."
                ) from None
            cursor.index += 1

        return cursor

    def _discard(self, cursor: _Cursor[T]) -> None:
        self._cursors.remove(cursor)
        close_resource(cursor.iterator)


def lookahead(source: Iterable[T], depth: int = 1, enumerators: int = 1) -> Lookahead[T]:
    """Wrap ``source`` into a :class:`Lookahead` view."""
    return Lookahead(source, depth=depth, enumerators=enumerators)
