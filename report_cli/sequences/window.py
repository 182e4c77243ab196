"""Sliding window combinator over a fixed-size ring buffer."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Generic, TypeVar, overload

from .base import LazySequence

T = TypeVar("T")


class BufferSpan(Sequence[T], Generic[T]):
    """Read-only view of ``count`` ring buffer slots starting at ``start``.

    The view does not copy: it reflects the ring buffer as it is when read, so it
    is only valid until the window advances. Call :meth:`to_list` for a snapshot.
    """

    __slots__ = ("_items", "_start", "_count")

    def __init__(self, items: list[T], start: int, count: int) -> None:
        self._items = items
        self._start = start
        self._count = count

    def __len__(self) -> int:
        return self._count

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        if isinstance(index, slice):
            return [self[position] for position in range(*index.indices(self._count))]
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError(f"Window index {index} out of range.")
        return self._items[(self._start + index) % len(self._items)]

    def __iter__(self) -> Iterator[T]:
        size = len(self._items)
        for offset in range(self._count):
            yield self._items[(self._start + offset) % size]

    def to_list(self) -> list[T]:
        return list(self)

    def __repr__(self) -> str:
        return f"BufferSpan({self.to_list()!r})"


def window(
    source: Iterable[T],
    size: int,
    *,
    lookbehind: bool = False,
    lookahead: bool = False,
) -> LazySequence[BufferSpan[T]]:
    """Project ``size``-long windows of ``source``.

    Full windows are produced for every position. ``lookbehind`` adds the partial
    windows growing from the first item while the buffer fills; ``lookahead``
    adds the partial windows shrinking towards the last item after the source
    ends.
    """

    if size < 1:
        raise ValueError("Window size must be at least 1.")

    def _windows() -> Iterator[BufferSpan[T]]:
        buffer: list[T] = []
        index = 0
        count = 0
        for value in source:
            if count < size:
                buffer.append(value)
                count += 1
                if lookbehind or count == size:
                    yield BufferSpan(buffer, 0, count)
            else:
                buffer[index] = value
                index = 0 if index + 1 == size else index + 1
                yield BufferSpan(buffer, index, count)

        if lookahead:
            while count > 1:
                count -= 1
                index = 0 if index + 1 == len(buffer) else index + 1
                yield BufferSpan(buffer, index, count)

    return LazySequence(_windows, source)
