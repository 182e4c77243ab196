"""Readers turning report files into a re-iterable stream of lines."""

from __future__ import annotations

import gzip
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import IO
from xml.etree import ElementTree

from report_cli.shared.exceptions import LineSourceError

_log = logging.getLogger(__name__)

RAW_ELEMENT = "raw"


class LineSource:
    """Lines of a report file, read afresh on every iteration.

    The format is chosen from the file name:

    * ``.xml.gz`` / ``.xml-gz``: gzip-compressed XML, text of ``<raw>`` elements;
    * ``.gz``: gzip-compressed text;
    * ``.xml``: XML, text of ``<raw>`` elements;
    * anything else: plain text.

    With ``width`` set, text content is split into fixed-width records instead of
    newline-terminated lines. ``skip_top_empty_lines`` drops the blank lines
    preceding the first non-blank one.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        encoding: str = "utf-8",
        skip_top_empty_lines: bool = False,
        width: int | None = None,
    ) -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.skip_top_empty_lines = skip_top_empty_lines
        self.width = width

    @property
    def replayable(self) -> bool:
        return True

    @property
    def format(self) -> str:
        name = self.path.name.lower()
        if name.endswith(".xml.gz") or name.endswith(".xml-gz"):
            return "xml-gz"
        if name.endswith(".gz"):
            return "gz"
        if name.endswith(".xml"):
            return "xml"
        return "text"

    def __iter__(self) -> Iterator[str]:
        if not self.path.exists():
            raise LineSourceError(f"Input file not found: {self.path}")
        fmt = self.format
        _log.debug("Reading %s as %s", self.path, fmt)
        if fmt == "xml-gz":
            with gzip.open(self.path, "rb") as stream:
                yield from self._skip_top(_xml_lines(stream, self.path))
        elif fmt == "xml":
            with self.path.open("rb") as stream:
                yield from self._skip_top(_xml_lines(stream, self.path))
        elif fmt == "gz":
            with gzip.open(self.path, "rt", encoding=self.encoding, newline=self._newline) as stream:
                yield from self._skip_top(self._text_lines(stream))
        else:
            with self.path.open("r", encoding=self.encoding, newline=self._newline) as stream:
                yield from self._skip_top(self._text_lines(stream))

    @property
    def _newline(self) -> str | None:
        # Fixed-width records may span line terminators; keep them verbatim.
        return "" if self.width else None

    def _text_lines(self, stream: IO[str]) -> Iterator[str]:
        if self.width:
            while True:
                chunk = stream.read(self.width)
                if not chunk:
                    return
                yield chunk
        else:
            for line in stream:
                yield line.rstrip("\r\n")

    def _skip_top(self, lines: Iterable[str]) -> Iterator[str]:
        top = self.skip_top_empty_lines
        for line in lines:
            if top and not line.strip():
                continue
            top = False
            yield line


def _xml_lines(stream: IO[bytes], path: Path) -> Iterator[str]:
    has_data = False
    try:
        for _, element in ElementTree.iterparse(stream, events=("end",)):
            if _local_name(element.tag) != RAW_ELEMENT:
                continue
            for line in (element.text or "").splitlines():
                has_data = True
                yield line
            element.clear()
    except ElementTree.ParseError as exc:
        raise LineSourceError(f"Malformed XML in {path}: {exc}") from exc
    if not has_data:
        raise LineSourceError(f"No data is found in {path}.")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
