"""Sequential per-record dispatch and run summary.

``Dispatcher.run`` walks the full (lazy) record sequence once, in input
order, invoking ``gh issue create`` for every record and waiting for
each process before reading the next row. Loader errors (``ParseError``)
always propagate; dispatch failures follow the configured
``FailurePolicy``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, TypedDict

from .config import FailurePolicy
from .errors import DispatchFailure
from .gh import DispatchResult, IssuesClient
from .logging import StructuredLogger, get_logger
from .models import Issue


class Totals(TypedDict):
    parsed: int
    created: int
    failed: int


def _empty_totals() -> Totals:
    return {"parsed": 0, "created": 0, "failed": 0}


@dataclass
class DispatchSummary:
    totals: Totals = field(default_factory=_empty_totals)
    results: list[DispatchResult] = field(default_factory=list)
    failures: list[DispatchFailure] = field(default_factory=list)
    aborted: bool = False
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.aborted

    def to_dict(self) -> dict[str, Any]:
        return {
            "totals": dict(self.totals),
            "dry_run": self.dry_run,
            "aborted": self.aborted,
            "failed_rows": [f.row for f in self.failures],
            "created": [
                {"row": r.row, "number": r.number} for r in self.results if r.succeeded
            ],
        }


class Dispatcher:
    def __init__(
        self,
        client: IssuesClient,
        *,
        policy: FailurePolicy = FailurePolicy.ABORT,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.client = client
        self.policy = policy
        self._logger = logger or get_logger()

    def run(self, issues: Iterable[Issue]) -> DispatchSummary:
        dry_run = self.client.cfg.dry_run
        summary = DispatchSummary(dry_run=dry_run)
        try:
            for issue in issues:
                summary.totals["parsed"] += 1
                self._logger.debug(f"dispatch row {issue.row}: {issue.title}", row=issue.row)
                try:
                    result = self.client.create_issue(issue)
                except DispatchFailure as exc:
                    self._record_failure(summary, exc)
                    if self.policy is FailurePolicy.ABORT:
                        summary.aborted = True
                        raise
                    continue
                summary.totals["created"] += 1
                summary.results.append(result)
                self._logger.log_issue_action(
                    "create", issue.row, issue_number=result.number, dry_run=dry_run
                )
        finally:
            # release the loader's input handle on abort as well
            close = getattr(issues, "close", None)
            if close is not None:
                close()
        self._logger.info(
            f"dispatched {summary.totals['parsed']} rows", totals=dict(summary.totals)
        )
        return summary

    def _record_failure(self, summary: DispatchSummary, exc: DispatchFailure) -> None:
        summary.totals["failed"] += 1
        summary.failures.append(exc)
        summary.results.append(
            DispatchResult(
                row=exc.row,
                command=exc.command,
                returncode=exc.returncode,
                stderr=exc.stderr,
            )
        )
        self._logger.log_error(
            f"issue create failed row {exc.row}",
            error=str(exc),
            row=exc.row,
            returncode=exc.returncode,
        )


__all__ = ["Dispatcher", "DispatchSummary", "Totals"]
