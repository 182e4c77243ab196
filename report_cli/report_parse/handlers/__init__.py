"""Report handler registry."""

from __future__ import annotations

from .base import HandlerRegistry, ReportHandler
from .report_1203001 import Report1203001

REGISTRY = HandlerRegistry([Report1203001()])

__all__ = (
    "REGISTRY",
    "HandlerRegistry",
    "Report1203001",
    "ReportHandler",
    "get_handler",
)


def get_handler(report: int) -> ReportHandler | None:
    """Return the registered handler for ``report``, if any."""

    return REGISTRY.get(report)
