"""Runtime helpers for gh-issues CLI orchestration."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

from ghissues.config import CONFIG_ENV, FailurePolicy, FileSettings, RunConfig, load_settings
from ghissues.errors import GhIssuesError, classify_error
from ghissues.logging import StructuredLogger, level_for_verbosity
from ghissues.ux import print_error


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    value = env.get(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is None:
        return None
    return value.strip() or None


def prepare_config(
    args: Any,
    *,
    env: Mapping[str, str] | None = None,
    loader: Callable[[str], FileSettings] = load_settings,
) -> RunConfig:
    """Resolve a RunConfig from argparse namespace, environment and config file.

    Precedence: command line, then ``GHISSUES_*`` variables, then the
    YAML config file, then built-in defaults.
    """
    env = os.environ if env is None else env
    config_path = getattr(args, "config", None) or _env_str(env, CONFIG_ENV)
    settings = loader(config_path) if config_path else FileSettings()

    verbosity = int(getattr(args, "debug", 0) or 0)
    quiet = bool(getattr(args, "quiet", False)) or _env_flag(env, "GHISSUES_QUIET")
    if getattr(args, "keep_going", False):
        on_failure = FailurePolicy.CONTINUE
    else:
        on_failure = settings.on_failure or FailurePolicy.ABORT

    return RunConfig(
        input=Path(args.input),
        ext=args.ext,
        verbosity=verbosity,
        quiet=quiet,
        repo=getattr(args, "repo", None) or _env_str(env, "GHISSUES_REPO") or settings.repo,
        gh_path=getattr(args, "gh", None) or _env_str(env, "GHISSUES_GH") or settings.gh_path,
        dry_run=bool(getattr(args, "dry_run", False)) or bool(settings.dry_run),
        mock=_env_flag(env, "GHISSUES_MOCK") or bool(settings.mock),
        on_failure=on_failure,
        json_logging=bool(getattr(args, "json_logs", False)) or bool(settings.json_logging),
        log_level=level_for_verbosity(verbosity, quiet, default=settings.log_level or "INFO"),
    )


def execute_command(handler: _HandlerCallable, logger: StructuredLogger, command: str) -> int:
    """Run a command handler, turning reported errors into exit code 1."""
    start = time.monotonic()
    try:
        result = handler()
    except GhIssuesError as exc:
        info = classify_error(exc)
        logger.debug(
            f"{command} aborted",
            category=info.category,
            error_type=info.original_type,
            details=info.details,
        )
        print_error(f"error running {command}: {info.message}")
        return 1
    exit_code = int(result) if result is not None else 0
    logger.debug(
        f"{command} finished",
        exit_code=exit_code,
        duration_ms=round((time.monotonic() - start) * 1000, 2),
    )
    return exit_code


__all__ = ["prepare_config", "execute_command"]
