"""Report pipeline: lines → pages → report groups → handler records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from report_cli.sequences import (
    Lookahead,
    Tracer,
    group_adjacent,
    select,
    select_indexed,
    select_many,
    trace,
)

from .handlers import REGISTRY, HandlerRegistry
from .types import Page, ReportGroup

_LOGGER = logging.getLogger(__name__)

NEW_PAGE_MARKER = "1"

ReportHandlerFunc = Callable[[Iterable[Page], "Tracer | None"], Iterable[object]]


def is_new_page(line: str) -> bool:
    return line.startswith(NEW_PAGE_MARKER)


def frame_pages(lines: Iterable[str], tracer: Tracer | None = None) -> Iterable[Page]:
    """Split raw lines into numbered pages.

    Each page's lines are materialized (pages are small); the stream of pages
    itself stays lazy.
    """

    groups = group_adjacent(trace(lines, "/Line", tracer), starts_at=is_new_page)
    pages = select_indexed(groups, lambda group, index: Page.from_lines(tuple(group), index), start=1)
    return trace(pages, "Line/Page", tracer)


def frame_reports(pages: Iterable[Page], tracer: Tracer | None = None) -> Iterable[ReportGroup]:
    """Group adjacent pages sharing a report key into lazy report groups."""

    groups = group_adjacent(pages, key=lambda page: page.key)
    reports = select(groups, lambda group: ReportGroup(key=group.first().key, pages=group))
    return trace(reports, "Page/ReportPages", tracer)


def dispatch(
    report: ReportGroup,
    *,
    registry: HandlerRegistry = REGISTRY,
    tracer: Tracer | None = None,
    lookahead_depth: int = 1,
    lookahead_enumerators: int = 1,
) -> Iterator[object]:
    """Run the handler registered for ``report``; unknown codes yield nothing."""

    handler = registry.get(report.report)
    if handler is None:
        _LOGGER.debug("No handler registered for report %s; skipping.", report.report)
        return
    yield from _run_handler(
        handler.parse,
        report,
        tracer=tracer,
        lookahead_depth=lookahead_depth,
        lookahead_enumerators=lookahead_enumerators,
    )


def parse_report(
    lines: Iterable[str],
    *,
    registry: HandlerRegistry | None = None,
    tracer: Tracer | None = None,
    handler: ReportHandlerFunc | None = None,
    lookahead_depth: int = 1,
    lookahead_enumerators: int = 1,
) -> Iterable[object]:
    """Parse raw report lines into output records.

    Records come from the handler registered for each report's code; ``handler``
    replaces registry dispatch for every report. Evaluation is lazy: nothing is
    read until the result is iterated, and iteration must run to completion (or
    be abandoned) before the line source is reused.
    """

    active_registry = registry if registry is not None else REGISTRY
    reports = frame_reports(frame_pages(lines, tracer), tracer)

    def _records(report: ReportGroup) -> Iterable[object]:
        if handler is not None:
            return _run_handler(
                handler,
                report,
                tracer=tracer,
                lookahead_depth=lookahead_depth,
                lookahead_enumerators=lookahead_enumerators,
            )
        return dispatch(
            report,
            registry=active_registry,
            tracer=tracer,
            lookahead_depth=lookahead_depth,
            lookahead_enumerators=lookahead_enumerators,
        )

    return trace(select_many(reports, _records), "ReportPages/Report", tracer)


def _run_handler(
    handler: ReportHandlerFunc,
    report: ReportGroup,
    *,
    tracer: Tracer | None,
    lookahead_depth: int,
    lookahead_enumerators: int,
) -> Iterator[object]:
    pages = Lookahead(report.pages, depth=lookahead_depth, enumerators=lookahead_enumerators)
    if tracer is not None:
        tracer.add(pages)
    try:
        for record in handler(pages, tracer):
            if record is not None:
                yield record
    finally:
        pages.close()
        if tracer is not None:
            tracer.release(pages)
