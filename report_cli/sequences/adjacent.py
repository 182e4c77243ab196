"""Rank and group runs of adjacent items in a lazy sequence.

``rank_adjacent`` tags every item with a run number. ``group_ranked`` turns the
ranked stream into a lazy sequence of lazy groups, one per run, and
``group_adjacent`` composes the two and strips the ranks again.

Groups share a single live cursor over the ranked stream:

* consume each group before asking for the next one and the whole pass costs O(n);
* the head of a group is cached, so ``first(group)`` may be called any number of
  times without moving the cursor;
* iterating a group after the cursor has left its start (a second full pass, or a
  visit after a partial read) takes the replay path, which re-enumerates the
  ranked stream from the beginning and skips to the group. That only works for
  replayable sources; a single-pass source raises ``GroupReplayError`` there.

Never interleave iteration of sibling groups. Groups are not materialized, so
memory stays bounded on arbitrarily long reports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Iterator
from itertools import islice
from typing import Any, Generic, TypeVar

from report_cli.shared.exceptions import GroupReplayError

from .base import _MISSING, LazySequence, close_resource, element_at, is_replayable

T = TypeVar("T")

Ranked = tuple[int, T]

_LOGGER = logging.getLogger(__name__)


def rank_adjacent(
    source: Iterable[T],
    key: Callable[[T], Hashable] | None = None,
    *,
    equals: Callable[[T, T], bool] | None = None,
    starts_at: Callable[[T], bool] | None = None,
    ends_at: Callable[[T], bool] | None = None,
) -> LazySequence[tuple[int, T]]:
    """Assign an increasing run number to each item of ``source``.

    The rank grows on the first item and whenever ``key`` changes, ``equals``
    reports the item differs from its predecessor, ``starts_at`` holds for the
    item, or ``ends_at`` held for the previous item.
    """

    def _rank() -> Iterator[tuple[int, T]]:
        rank = 0
        previous: Any = _MISSING
        previous_key: Any = _MISSING
        for item in source:
            current_key = key(item) if key is not None else None
            if (
                rank == 0
                or (key is not None and current_key != previous_key)
                or (equals is not None and not equals(previous, item))
                or (starts_at is not None and starts_at(item))
                or (ends_at is not None and ends_at(previous))
            ):
                rank += 1
            yield rank, item
            previous = item
            previous_key = current_key

    return LazySequence(_rank, source)


class _LiveCursor(Generic[T]):
    """The one forward position over a ranked stream shared by all its groups."""

    __slots__ = ("iterator", "current", "index", "has_more")

    def __init__(self, iterator: Iterator[Ranked[T]], current: Ranked[T]) -> None:
        self.iterator = iterator
        self.current = current
        self.index = 0
        self.has_more = True

    def advance(self) -> None:
        self.index += 1
        try:
            self.current = next(self.iterator)
        except StopIteration:
            self.has_more = False

    def at_group_start(self, group_index: int) -> bool:
        return self.index == group_index


class RankedGroup(Generic[T]):
    """Lazy run of ranked items; see the module docstring for its usage contract."""

    __slots__ = ("_source", "_cursor", "_head", "_start")

    def __init__(
        self,
        source: Iterable[Ranked[T]],
        cursor: _LiveCursor[T],
        head: Ranked[T],
        start: int,
    ) -> None:
        self._source = source
        self._cursor = cursor
        self._head = head
        self._start = start

    @property
    def rank(self) -> int:
        return self._head[0]

    @property
    def head(self) -> Ranked[T]:
        return self._head

    @property
    def replayable(self) -> bool:
        return is_replayable(self._source)

    def __iter__(self) -> Iterator[Ranked[T]]:
        yield self._head
        cursor = self._cursor
        if cursor.at_group_start(self._start):
            cursor.advance()
            while cursor.has_more and cursor.current[0] == self._head[0]:
                yield cursor.current
                cursor.advance()
        else:
            yield from self._replay_group()

    def first(self, default: Any = _MISSING) -> Ranked[T]:
        return self._head

    def element_at(self, index: int, default: Any = _MISSING) -> Ranked[T]:
        return element_at(self, index, default)

    def _replay_group(self) -> Iterator[Ranked[T]]:
        """Slow path: re-enumerate the ranked source and skip to this group."""

        if not is_replayable(self._source):
            raise GroupReplayError(
                f"Group {self.rank} was revisited after the shared cursor moved past its start, "
                "but its source is single-pass and cannot be replayed."
            )
        _LOGGER.debug("Replaying group %d from its source (start index %d).", self.rank, self._start)
        iterator = iter(self._source)
        try:
            for item in islice(iterator, self._start + 1, None):
                if item[0] != self._head[0]:
                    break
                yield item
        finally:
            close_resource(iterator)


def group_ranked(ranked: Iterable[Ranked[T]]) -> LazySequence[RankedGroup[T]]:
    """Split a ranked stream into lazy groups of equal rank."""

    def _groups() -> Iterator[RankedGroup[T]]:
        iterator = iter(ranked)
        try:
            try:
                head = next(iterator)
            except StopIteration:
                return
            cursor: _LiveCursor[T] = _LiveCursor(iterator, head)
            while cursor.has_more:
                head = cursor.current
                yield RankedGroup(ranked, cursor, head, cursor.index)
                # Skip whatever the consumer left unread in this group.
                while cursor.has_more and cursor.current[0] == head[0]:
                    cursor.advance()
        finally:
            close_resource(iterator)

    return LazySequence(_groups, ranked)


class Group(Generic[T]):
    """A ranked group seen through its items only."""

    __slots__ = ("_group",)

    def __init__(self, group: RankedGroup[T]) -> None:
        self._group = group

    @property
    def replayable(self) -> bool:
        return self._group.replayable

    def __iter__(self) -> Iterator[T]:
        for _, item in self._group:
            yield item

    def first(self, default: Any = _MISSING) -> T:
        return self._group.head[1]

    def element_at(self, index: int, default: Any = _MISSING) -> T:
        return element_at(self, index, default)


def remove_rank(groups: Iterable[RankedGroup[T]]) -> LazySequence[Group[T]]:
    """Strip ranks from every group of ``groups``."""

    return LazySequence(lambda: (Group(group) for group in groups), groups)


def group_adjacent(
    source: Iterable[T],
    key: Callable[[T], Hashable] | None = None,
    *,
    equals: Callable[[T, T], bool] | None = None,
    starts_at: Callable[[T], bool] | None = None,
    ends_at: Callable[[T], bool] | None = None,
) -> LazySequence[Group[T]]:
    """Group maximal runs of adjacent items.

    Exactly one way of splitting is normally given: ``key``, ``equals``, or the
    ``starts_at`` / ``ends_at`` pair. See :func:`rank_adjacent` for how they combine.
    """

    ranked = rank_adjacent(source, key, equals=equals, starts_at=starts_at, ends_at=ends_at)
    return remove_rank(group_ranked(ranked))


__all__ = [
    "Group",
    "RankedGroup",
    "group_adjacent",
    "group_ranked",
    "rank_adjacent",
    "remove_rank",
]
