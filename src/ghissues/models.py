from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Issue:
    """One row of the input file.

    ``label`` and ``milestone`` are ``None`` when the column is blank or
    absent. ``row`` is the 1-based record position (header excluded) and
    is only used to name the record in logs and errors.
    """

    title: str
    assignee: str
    body: str
    label: str | None = None
    milestone: str | None = None
    row: int = 0


__all__ = ["Issue"]
