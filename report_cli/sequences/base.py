"""Common building blocks for the lazy sequence combinators."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from itertools import islice
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

_MISSING: Any = object()


def close_resource(resource: object) -> None:
    """Close an iterator or any other object exposing ``close()``."""

    close = getattr(resource, "close", None)
    if callable(close):
        close()


def is_replayable(source: object) -> bool:
    """Return True when iterating ``source`` again restarts it from the beginning.

    Iterators (generators, file handles, ``map`` objects) are single-pass. Lazy
    sequences report what their own sources support.
    """

    replayable = getattr(source, "replayable", None)
    if isinstance(replayable, bool):
        return replayable
    return not isinstance(source, Iterator)


def first(source: Iterable[T], default: Any = _MISSING) -> T:
    """Return the first item of ``source`` and close the iterator used to get it."""

    iterator = iter(source)
    try:
        return next(iterator)
    except StopIteration:
        if default is _MISSING:
            raise ValueError("Sequence contains no elements.") from None
        return default
    finally:
        if iterator is not source:
            close_resource(iterator)


def element_at(source: Iterable[T], index: int, default: Any = _MISSING) -> T:
    """Return the item at ``index`` pulling no further than that position."""

    if index < 0:
        raise IndexError(f"Index {index} is negative.")
    iterator = iter(source)
    try:
        for position, item in enumerate(iterator):
            if position == index:
                return item
    finally:
        if iterator is not source:
            close_resource(iterator)
    if default is _MISSING:
        raise IndexError(f"Index {index} is out of range.")
    return default


class LazySequence(Generic[T]):
    """Re-iterable view whose every iteration restarts from its sources.

    ``factory`` builds a fresh iterator per ``iter()`` call; ``sources`` are the
    upstream iterables, used only to tell whether the view can be replayed.
    """

    __slots__ = ("_factory", "_sources")

    def __init__(self, factory: Callable[[], Iterator[T]], *sources: object) -> None:
        self._factory = factory
        self._sources = sources

    def __iter__(self) -> Iterator[T]:
        return self._factory()

    @property
    def replayable(self) -> bool:
        return all(is_replayable(source) for source in self._sources)

    def first(self, default: Any = _MISSING) -> T:
        return first(self, default)

    def element_at(self, index: int, default: Any = _MISSING) -> T:
        return element_at(self, index, default)


def select(source: Iterable[T], selector: Callable[[T], U]) -> LazySequence[U]:
    """Lazily map ``selector`` over ``source`` keeping it re-iterable."""

    return LazySequence(lambda: (selector(item) for item in source), source)


def select_indexed(
    source: Iterable[T], selector: Callable[[T, int], U], start: int = 0
) -> LazySequence[U]:
    """Lazily map ``selector(item, index)`` over ``source``."""

    return LazySequence(
        lambda: (selector(item, index) for index, item in enumerate(source, start)),
        source,
    )


def where(source: Iterable[T], predicate: Callable[[T], bool]) -> LazySequence[T]:
    """Lazily filter ``source`` keeping it re-iterable."""

    return LazySequence(lambda: (item for item in source if predicate(item)), source)


def select_many(
    source: Iterable[T], selector: Callable[[T], Iterable[U]]
) -> LazySequence[U]:
    """Lazily flatten the iterables produced by ``selector``."""

    def _flatten() -> Iterator[U]:
        for item in source:
            yield from selector(item)

    return LazySequence(_flatten, source)


def skip(source: Iterable[T], count: int) -> LazySequence[T]:
    """Lazily drop the first ``count`` items of ``source``."""

    return LazySequence(lambda: islice(source, count, None), source)
