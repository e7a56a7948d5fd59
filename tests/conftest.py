"""Pytest configuration for gh-issues tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`), and provides a
`gh_calls` fixture that replaces `subprocess.run` with a recorder so no
real GitHub CLI is ever invoked.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocesses started by tests (`python -m ghissues`) need the same path.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

_GHISSUES_ENV = (
    "GHISSUES_CONFIG",
    "GHISSUES_MOCK",
    "GHISSUES_QUIET",
    "GHISSUES_REPO",
    "GHISSUES_GH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _GHISSUES_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    # Drop the shared logger so it binds to this test's captured stderr.
    from ghissues import logging as gh_logging  # noqa: PLC0415

    monkeypatch.setattr(gh_logging, "_GLOBAL", None)


class GhRecorder:
    """Stand-in for ``subprocess.run`` recording every gh invocation.

    ``fail_on`` maps a 1-based call number to the exit status that call
    should report; successful calls print an issue URL numbered after
    the call.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.kwargs: list[dict[str, Any]] = []
        self.fail_on: dict[int, int] = {}
        self.fail_stderr = "GraphQL: could not assign user"

    def __call__(self, cmd: list[str], *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        n = len(self.calls)
        rc = self.fail_on.get(n, 0)
        if rc:
            return subprocess.CompletedProcess(cmd, rc, stdout="", stderr=self.fail_stderr)
        return subprocess.CompletedProcess(
            cmd, 0, stdout=f"https://github.com/octo/repo/issues/{n}\n", stderr=""
        )

    def values(self, flag: str) -> list[str | None]:
        """Return the token following ``flag`` in each recorded call."""
        out: list[str | None] = []
        for cmd in self.calls:
            out.append(cmd[cmd.index(flag) + 1] if flag in cmd else None)
        return out


@pytest.fixture
def gh_calls(monkeypatch: pytest.MonkeyPatch) -> GhRecorder:
    recorder = GhRecorder()
    monkeypatch.setattr(subprocess, "run", recorder)
    return recorder
