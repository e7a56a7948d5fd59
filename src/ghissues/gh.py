"""GitHub CLI (``gh``) issue creation.

Encapsulates the one external interaction gh-issues performs: running
``gh issue create`` for a single record.

 - Each flag and its value are separate argv tokens; no shell involved
 - Unset optional fields (label / milestone) are omitted, never rendered
 - Non-zero exit status raises ``DispatchFailure`` carrying the row
 - Dry-run prints the planned command and does not execute
 - Mock mode prints ``MOCK <command>`` and fabricates issue numbers
 - Repository scoping via ``-R owner/repo`` when a repo is configured

gh prints the created issue URL on stdout; the issue number is parsed
from it when present (pattern: ``/issues/<number>``).
"""

from __future__ import annotations

import re
import shlex
import shutil
import subprocess  # nosec B404 - subprocess is required for GitHub CLI invocation
import sys
from dataclasses import dataclass, field

from .errors import DispatchFailure, redact
from .models import Issue

NUMBER_PATTERN = re.compile(r"/issues/(\d+)")


@dataclass
class IssuesClientConfig:
    repo: str | None = None  # owner/repo; if None gh defaults to current directory remote
    gh_path: str | None = None
    mock: bool = False
    dry_run: bool = False


@dataclass
class DispatchResult:
    row: int
    command: list[str] = field(default_factory=list)
    returncode: int | None = 0
    stdout: str = ""
    stderr: str = ""
    number: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class IssuesClient:
    """Thin wrapper around ``gh issue create``.

    ``create_issue`` raises ``DispatchFailure`` when gh cannot be run or
    exits non-zero. In mock and dry-run modes it never shells out.
    """

    def __init__(self, cfg: IssuesClientConfig):
        self.cfg = cfg
        # fabricated issue numbers in mock mode start at 1001 for each client
        self._mock_counter = 1000
        self._gh_path = cfg.gh_path or shutil.which("gh") or "gh"

    def build_create_command(self, issue: Issue) -> list[str]:
        cmd = [
            self._gh_path,
            "issue",
            "create",
            "--title",
            issue.title,
            "--body",
            issue.body,
            "--assignee",
            issue.assignee,
        ]
        if issue.label:
            cmd.extend(["--label", issue.label])
        if issue.milestone:
            cmd.extend(["--milestone", issue.milestone])
        if self.cfg.repo:
            cmd.extend(["-R", self.cfg.repo])
        return cmd

    def create_issue(self, issue: Issue) -> DispatchResult:
        cmd = self.build_create_command(issue)
        if self.cfg.mock:
            print("MOCK", shlex.join(cmd))
            if self.cfg.dry_run:
                return DispatchResult(row=issue.row, command=cmd)
            self._mock_counter += 1
            return DispatchResult(row=issue.row, command=cmd, number=self._mock_counter)
        if self.cfg.dry_run:
            print("DRY-RUN", shlex.join(cmd))
            return DispatchResult(row=issue.row, command=cmd)
        try:
            proc = subprocess.run(  # nosec B603 - argv list, no shell
                cmd, capture_output=True, text=True, check=False
            )
        except OSError as exc:
            raise DispatchFailure(issue.row, None, str(exc), command=cmd) from exc
        out = proc.stdout or ""
        err = proc.stderr or ""
        if out:
            sys.stdout.write(out)
        if err:
            sys.stderr.write(redact(err))
        if proc.returncode != 0:
            raise DispatchFailure(issue.row, proc.returncode, err, command=cmd)
        match = NUMBER_PATTERN.search(out)
        return DispatchResult(
            row=issue.row,
            command=cmd,
            returncode=proc.returncode,
            stdout=out,
            stderr=err,
            number=int(match.group(1)) if match else None,
        )


__all__ = [
    "DispatchResult",
    "IssuesClientConfig",
    "IssuesClient",
    "NUMBER_PATTERN",
]
