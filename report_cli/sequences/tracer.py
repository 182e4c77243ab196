"""Statistics collection and resource ownership for lazy pipelines.

A :class:`Tracer` counts how often named operations run and how long they take.
Because the pipeline is lazy, the point where an iteration really ends is decided
by whoever consumes it, not by the code that started it. A traced pass therefore
registers the iterator it opens with the scope of its consumer, the scope that
is running when the pass starts. If the consumer walks away early, closing that
scope still closes the iterator. A pass that finishes normally closes the
iterator itself and releases it so nothing is closed twice.

A traced pass is *open* from its first pull until it ends, but it is *running*
only while one of its pulls executes. Ownership follows running scopes, so a
stream that ends never closes iterators sitting further down the call stack.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .base import _MISSING, close_resource, first, is_replayable

T = TypeVar("T")

PATH_SEPARATOR = "/"


@dataclass(slots=True)
class Statistics:
    """Aggregated counters for one ``(name, action)`` pair."""

    name: str | None
    action: str | None
    count: int = 0
    duration: float = 0.0  # seconds

    @property
    def average(self) -> float:
        return self.duration / self.count if self.count else 0.0


class _ResourcePool:
    """Identity set of objects awaiting ``close()``."""

    __slots__ = ("_resources",)

    def __init__(self) -> None:
        self._resources: dict[int, object] = {}

    def add(self, resource: object) -> None:
        self._resources[id(resource)] = resource

    def release(self, resource: object) -> None:
        self._resources.pop(id(resource), None)

    def __len__(self) -> int:
        return len(self._resources)

    def dispose(self) -> None:
        # Newest first: nested iterators close before the ones they read from.
        resources = list(self._resources.values())
        self._resources.clear()
        for resource in reversed(resources):
            close_resource(resource)


def _remove(stack: list[TracerScope], scope: TracerScope) -> None:
    for position in range(len(stack) - 1, -1, -1):
        if stack[position] is scope:
            del stack[position]
            return


class TracerScope:
    """A timed, resource-owning region opened by :meth:`Tracer.scope`."""

    __slots__ = ("_tracer", "_statistics", "_started", "_resources", "_closed")

    def __init__(self, tracer: Tracer, statistics: Statistics) -> None:
        self._tracer = tracer
        self._statistics = statistics
        self._started = time.perf_counter()
        self._resources = _ResourcePool()
        self._closed = False

    @property
    def name(self) -> str | None:
        return self._statistics.name

    @property
    def action(self) -> str | None:
        return self._statistics.action

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of registered resources not yet released."""
        return len(self._resources)

    def add(self, resource: object) -> None:
        """Take ownership of ``resource`` until it is released or the scope closes."""
        if self._closed:
            close_resource(resource)
            return
        self._resources.add(resource)

    def release(self, resource: object) -> None:
        """Drop ownership of ``resource``; its owner has closed it."""
        self._resources.release(resource)

    def suspend(self) -> None:
        """Stop being the running scope without closing."""
        _remove(self._tracer._running, self)

    def resume(self) -> None:
        """Become the running scope again."""
        if not self._closed:
            self._tracer._running.append(self)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        _remove(self._tracer._running, self)
        _remove(self._tracer._open, self)
        self._resources.dispose()
        self._statistics.count += 1
        self._statistics.duration += time.perf_counter() - self._started

    def __enter__(self) -> TracerScope:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Tracer:
    """Process-scoped collector of per-operation statistics."""

    def __init__(self) -> None:
        self._statistics: dict[tuple[str | None, str | None], Statistics] = {}
        self._open: list[TracerScope] = []
        self._running: list[TracerScope] = []
        self._resources = _ResourcePool()

    @property
    def current(self) -> TracerScope | None:
        """Innermost running scope."""
        return self._running[-1] if self._running else None

    @property
    def open_scopes(self) -> int:
        return len(self._open)

    def scope(self, name: str | None, action: str | None) -> TracerScope:
        """Open a running scope; closing it records one call of ``(name, action)``."""
        key = (name, action)
        statistics = self._statistics.get(key)
        if statistics is None:
            statistics = self._statistics[key] = Statistics(name=name, action=action)
        scope = TracerScope(self, statistics)
        self._open.append(scope)
        self._running.append(scope)
        return scope

    def add(self, resource: object) -> None:
        """Register ``resource`` with the running scope, or with the tracer itself."""
        owner = self.current
        if owner is not None:
            owner.add(resource)
        else:
            self._resources.add(resource)

    def release(self, resource: object) -> None:
        self._resources.release(resource)
        for scope in self._open:
            scope.release(resource)

    def collected_statistics(self) -> list[Statistics]:
        return list(self._statistics.values())

    def statistics(self, name: str | None, action: str | None) -> Statistics | None:
        return self._statistics.get((name, action))

    def statistics_by_path(self) -> list[Statistics]:
        """Return copies of the statistics with names resolved to caller paths.

        Names are recorded as ``"Caller/Name"``. A name is expanded by prefixing
        the full name of another entry that ends with ``"/Caller"``, repeated until
        nothing changes. Names already starting with ``"/"`` are resolved roots.
        """

        items = [
            Statistics(name=item.name, action=item.action, count=item.count, duration=item.duration)
            for item in self._statistics.values()
        ]

        # Each pass resolves at least one more level; acyclic names settle within len(items).
        for _ in range(len(items) + 1):
            changed = False
            for item in items:
                name = item.name
                if name is None or name.startswith(PATH_SEPARATOR):
                    continue
                separator = name.find(PATH_SEPARATOR)
                if separator == -1:
                    continue
                suffix = PATH_SEPARATOR + name[:separator]
                path = next(
                    (
                        other.name
                        for other in items
                        if other is not item and other.name is not None and other.name.endswith(suffix)
                    ),
                    None,
                )
                if path is not None:
                    item.name = path + name[separator:]
                    changed = True
            if not changed:
                break

        items.sort(key=lambda item: (item.name is not None, item.name or "", item.action or ""))
        return items

    def close(self) -> None:
        """Close scopes left open by abandoned passes and dispose owned resources."""
        for scope in reversed(list(self._open)):
            scope.close()
        self._resources.dispose()

    def __enter__(self) -> Tracer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Traced(Generic[T]):
    """Iterable wrapper timing every pass over ``source``."""

    __slots__ = ("name", "tracer", "source")

    def __init__(self, source: Iterable[T], name: str, tracer: Tracer) -> None:
        self.source = source
        self.name = name
        self.tracer = tracer

    @property
    def replayable(self) -> bool:
        return is_replayable(self.source)

    def __iter__(self) -> Iterator[T]:
        tracer = self.tracer
        owner: TracerScope | Tracer = tracer.current or tracer
        iterator = iter(self.source)
        owned = iterator is not self.source
        if owned:
            owner.add(iterator)
        scope = tracer.scope(self.name, "iter")
        try:
            while True:
                try:
                    item = next(iterator)
                except StopIteration:
                    return
                finally:
                    scope.suspend()
                yield item
                scope.resume()
        finally:
            scope.close()
            if owned:
                close_resource(iterator)
                owner.release(iterator)

    def first(self, default: Any = _MISSING) -> T:
        return first(self, default)


class TracedSequence(Traced[T], Sequence[T]):
    """Traced wrapper that also times ``len``, indexing and membership tests."""

    __slots__ = ()

    def __len__(self) -> int:
        with self.tracer.scope(self.name, "len"):
            return len(self.source)  # type: ignore[arg-type]

    def __getitem__(self, index):  # type: ignore[override]
        with self.tracer.scope(self.name, "index"):
            return self.source[index]  # type: ignore[index]

    def __contains__(self, item: object) -> bool:
        with self.tracer.scope(self.name, "contains"):
            return item in self.source  # type: ignore[operator]


def trace(source: Iterable[T], name: str, tracer: Tracer | None) -> Iterable[T]:
    """Wrap ``source`` so each pass over it is recorded by ``tracer``.

    Without a tracer the source is returned unchanged.
    """

    if tracer is None:
        return source
    if isinstance(source, Sequence) and not isinstance(source, str):
        return TracedSequence(source, name, tracer)
    return Traced(source, name, tracer)
