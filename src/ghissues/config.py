from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import ConfigError

CONFIG_ENV = "GHISSUES_CONFIG"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class FailurePolicy(str, Enum):
    """What the dispatcher does after a row fails to create."""

    ABORT = "abort"
    CONTINUE = "continue"


def parse_failure_policy(value: Any) -> FailurePolicy:
    try:
        return FailurePolicy(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in FailurePolicy)
        raise ConfigError(f"invalid on_failure value {value!r} (expected one of: {choices})") from exc


@dataclass(frozen=True)
class FileSettings:
    """Settings read from the optional YAML config file.

    ``None`` means "not set here"; the runtime falls back to environment
    variables and built-in defaults.
    """

    repo: str | None = None
    gh_path: str | None = None
    on_failure: FailurePolicy | None = None
    dry_run: bool | None = None
    mock: bool | None = None
    json_logging: bool | None = None
    log_level: str | None = None


@dataclass(frozen=True)
class RunConfig:
    """Everything one ``create`` run needs, resolved once up front."""

    input: Path
    ext: str = "csv"
    verbosity: int = 0
    quiet: bool = False
    repo: str | None = None
    gh_path: str | None = None
    dry_run: bool = False
    mock: bool = False
    on_failure: FailurePolicy = FailurePolicy.ABORT
    json_logging: bool = False
    log_level: str = "INFO"


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section '{key}' must be a mapping")
    return cast(dict[str, Any], value)


def _opt_bool(section: dict[str, Any], key: str) -> bool | None:
    if key not in section or section[key] is None:
        return None
    return bool(section[key])


def _opt_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def load_settings(path: str | Path) -> FileSettings:
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        raw_any = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(raw_any, dict):
        raise ConfigError(f"Config root in {p} must be a mapping")
    raw = cast(dict[str, Any], raw_any)
    gh = _section(raw, "github")
    behavior = _section(raw, "behavior")
    logging_config = _section(raw, "logging")

    on_failure_raw = behavior.get("on_failure")
    log_level = _opt_str(logging_config, "level")
    if log_level is not None:
        log_level = log_level.upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigError(f"invalid logging level {log_level!r} in {p}")

    return FileSettings(
        repo=_opt_str(gh, "repo"),
        gh_path=_opt_str(gh, "gh_path"),
        on_failure=parse_failure_policy(on_failure_raw) if on_failure_raw is not None else None,
        dry_run=_opt_bool(behavior, "dry_run"),
        mock=_opt_bool(behavior, "mock"),
        json_logging=_opt_bool(logging_config, "json_enabled"),
        log_level=log_level,
    )


__all__ = [
    "CONFIG_ENV",
    "FailurePolicy",
    "FileSettings",
    "RunConfig",
    "load_settings",
    "parse_failure_policy",
]
