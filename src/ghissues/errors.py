"""Error taxonomy & redaction helpers.

Every failure the CLI reports derives from :class:`GhIssuesError` so the
runtime can surface it uniformly (structured log record + one-line
message + exit code 1). ``classify_error`` turns an exception into a
small ``ErrorInfo`` record for logging; ``redact`` strips GitHub tokens
from any gh output before it is echoed or logged.

Public API:
- GhIssuesError and subclasses
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"gh[osu]_[A-Za-z0-9]{20,40}"),  # OAuth / server / user tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
]

_REDACTION_PLACEHOLDER = "<redacted>"


class GhIssuesError(Exception):
    """Base class for every error the CLI reports with exit code 1."""

    category = "generic"


class ArgumentError(GhIssuesError):
    category = "usage"

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.usage = usage


class ConfigError(GhIssuesError):
    category = "config"


class FileError(GhIssuesError):
    category = "file"

    def __init__(self, path: Any, reason: str) -> None:
        super().__init__(f"cannot open input file {path}: {reason}")
        self.path = path
        self.reason = reason


class ParseError(GhIssuesError):
    category = "parse"

    def __init__(self, message: str, row: int | None = None, line: int | None = None) -> None:
        location = ""
        if row is not None:
            location = f"row {row}"
            if line is not None:
                location += f" (line {line})"
            location += ": "
        elif line is not None:
            location = f"line {line}: "
        super().__init__(location + message)
        self.row = row
        self.line = line


class UnsupportedFormat(GhIssuesError):
    category = "format"

    def __init__(self, ext: str, supported: list[str] | None = None) -> None:
        msg = f"unsupported input format '{ext}'"
        if supported:
            msg += f" (supported: {', '.join(supported)})"
        super().__init__(msg)
        self.ext = ext
        self.supported = list(supported or [])


class DispatchFailure(GhIssuesError):
    category = "dispatch"

    def __init__(
        self,
        row: int,
        returncode: int | None,
        stderr: str = "",
        command: list[str] | None = None,
    ) -> None:
        detail = redact(stderr.strip())
        status = "gh not found" if returncode is None else f"gh exited with status {returncode}"
        msg = f"row {row}: issue creation failed ({status})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.row = row
        self.returncode = returncode
        self.stderr = detail
        self.command = list(command or [])


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace GitHub token patterns in ``text`` with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    Known ``GhIssuesError`` subclasses carry their own category. Dispatch
    failures are refined from gh's stderr (rate limit / auth); anything
    else falls back to ``generic``.
    """
    msg = redact(str(exc) if exc else "")
    low = msg.lower()
    if isinstance(exc, DispatchFailure):
        details: dict[str, Any] = {"row": exc.row, "returncode": exc.returncode}
        if "rate limit" in low or "secondary rate" in low:
            return ErrorInfo("dispatch.rate_limit", msg, exc.__class__.__name__, details)
        if any(k in low for k in ("gh auth login", "authentication", "http 401", "bad credentials")):
            return ErrorInfo("dispatch.auth", msg, exc.__class__.__name__, details)
        return ErrorInfo("dispatch", msg, exc.__class__.__name__, details)
    if isinstance(exc, ParseError):
        return ErrorInfo("parse", msg, exc.__class__.__name__, {"row": exc.row, "line": exc.line})
    if isinstance(exc, GhIssuesError):
        return ErrorInfo(exc.category, msg, exc.__class__.__name__)
    return ErrorInfo("generic", msg, exc.__class__.__name__)


__all__ = [
    "GhIssuesError",
    "ArgumentError",
    "ConfigError",
    "FileError",
    "ParseError",
    "UnsupportedFormat",
    "DispatchFailure",
    "ErrorInfo",
    "classify_error",
    "redact",
]
