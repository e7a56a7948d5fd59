"""Input-format loaders producing ``Issue`` records.

Each loader turns a file into a lazy, one-pass iterator of
:class:`~ghissues.models.Issue`. Loaders are registered by extension in
``LOADERS``; ``get_loader`` selects one at runtime and reports a missing
implementation as :class:`~ghissues.errors.UnsupportedFormat` without
touching the input path.

Only CSV is implemented. The header row names the columns; ``title``,
``assignee`` and ``body`` are mandatory, ``label`` and ``milestone`` may
be blank or absent altogether. Unknown columns are ignored.
"""

from __future__ import annotations

import csv
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Protocol, TextIO

from .errors import FileError, ParseError, UnsupportedFormat
from .models import Issue

REQUIRED_COLUMNS = ("title", "assignee", "body")


class IssueLoader(Protocol):
    def load(self, path: str | Path) -> Iterator[Issue]: ...


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class CsvLoader:
    """Header-mapped CSV loader.

    ``load`` opens the file eagerly so an unreadable path fails with
    ``FileError`` before any row is produced; rows are then read lazily
    and the handle is closed once iteration completes or errors.
    """

    encoding = "utf-8-sig"

    def load(self, path: str | Path) -> Iterator[Issue]:
        p = Path(path)
        try:
            handle = p.open("r", encoding=self.encoding, newline="")
        except OSError as exc:
            raise FileError(p, exc.strerror or str(exc)) from exc
        return self._iter_rows(handle)

    def _iter_rows(self, handle: TextIO) -> Iterator[Issue]:
        with handle:
            reader = csv.reader(handle)
            columns = self._read_header(reader)
            index: dict[str, int] = {}
            for pos, name in enumerate(columns):
                index.setdefault(name, pos)
            row = 0
            while True:
                try:
                    fields = next(reader)
                except StopIteration:
                    return
                except (csv.Error, UnicodeDecodeError) as exc:
                    raise ParseError(f"unreadable record: {exc}", row=row + 1, line=reader.line_num) from exc
                if not fields:
                    continue  # blank line
                row += 1
                if len(fields) != len(columns):
                    raise ParseError(
                        f"found {len(fields)} fields, header has {len(columns)}",
                        row=row,
                        line=reader.line_num,
                    )
                yield self._build_issue(fields, index, row, reader.line_num)

    @staticmethod
    def _read_header(reader: Iterator[list[str]]) -> list[str]:
        header: list[str] | None = []
        try:
            # leading blank lines are skipped like blank data lines
            while header == []:
                header = next(reader, None)
        except (csv.Error, UnicodeDecodeError) as exc:
            raise ParseError(f"unreadable header: {exc}", line=1) from exc
        if not header:
            raise ParseError("input is empty; expected a header row", line=1)
        columns = [name.strip().lower() for name in header]
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise ParseError(f"header is missing required column(s): {', '.join(missing)}", line=1)
        return columns

    @staticmethod
    def _build_issue(fields: list[str], index: dict[str, int], row: int, line: int) -> Issue:
        def get(name: str) -> str | None:
            pos = index.get(name)
            return fields[pos] if pos is not None else None

        title = (get("title") or "").strip()
        if not title:
            raise ParseError("title must not be blank", row=row, line=line)
        assignee = (get("assignee") or "").strip()
        if not assignee:
            raise ParseError("assignee must not be blank", row=row, line=line)
        return Issue(
            title=title,
            assignee=assignee,
            body=get("body") or "",
            label=_optional(get("label")),
            milestone=_optional(get("milestone")),
            row=row,
        )


LOADERS: dict[str, Callable[[], IssueLoader]] = {
    "csv": CsvLoader,
}


def normalize_ext(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def supported_formats() -> list[str]:
    return sorted(LOADERS)


def get_loader(ext: str) -> IssueLoader:
    factory = LOADERS.get(normalize_ext(ext))
    if factory is None:
        raise UnsupportedFormat(ext, supported_formats())
    return factory()


def load_issues(path: str | Path, ext: str = "csv") -> Iterator[Issue]:
    """Select the loader for ``ext`` and return its lazy record iterator."""
    return get_loader(ext).load(path)


__all__ = [
    "IssueLoader",
    "CsvLoader",
    "LOADERS",
    "REQUIRED_COLUMNS",
    "get_loader",
    "load_issues",
    "normalize_ext",
    "supported_formats",
    "ParseError",
]
