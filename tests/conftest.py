"""Fixtures shared by the sequence and pipeline tests."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import pytest

from report_cli.shared import paths


class TrackingIterable:
    """Re-iterable source counting passes, pulled items and closed passes.

    ``shrink`` drops that many trailing items from every pass after the first,
    which makes the source deliberately non-idempotent.
    """

    def __init__(self, items: Iterable[object], *, shrink: int = 0) -> None:
        self.items = list(items)
        self.shrink = shrink
        self.opened = 0
        self.pulled = 0
        self.closed = 0

    def __iter__(self) -> Iterator[object]:
        self.opened += 1
        items = self.items
        if self.opened > 1 and self.shrink:
            items = items[: max(0, len(items) - self.shrink)]
        try:
            for item in items:
                self.pulled += 1
                yield item
        finally:
            self.closed += 1


@pytest.fixture()
def tracking() -> Callable[..., TrackingIterable]:
    """Return a factory building :class:`TrackingIterable` sources."""

    return TrackingIterable


@pytest.fixture()
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config discovery at an empty temp directory and clear overrides."""

    config_dir = tmp_path / "config"
    monkeypatch.setenv(paths.CONFIG_DIR_ENV, str(config_dir))
    monkeypatch.delenv(paths.CONFIG_FILE_ENV, raising=False)
    for name in (
        "REPORTCLI_SOURCE_ENCODING",
        "REPORTCLI_SOURCE_SKIP_TOP_EMPTY_LINES",
        "REPORTCLI_SOURCE_WIDTH",
        "REPORTCLI_LOOKAHEAD_DEPTH",
        "REPORTCLI_LOOKAHEAD_ENUMERATORS",
        "REPORTCLI_ENABLED_REPORTS",
        "REPORTCLI_TRACE_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    return config_dir
