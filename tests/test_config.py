from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

import pytest

from ghissues.cli import main
from ghissues.config import FailurePolicy, FileSettings, load_settings, parse_failure_policy
from ghissues.errors import ConfigError
from ghissues.runtime import prepare_config

FULL_CONFIG = """
github:
  repo: octo/repo
  gh_path: /opt/bin/gh
behavior:
  on_failure: continue
  dry_run: true
  mock: false
logging:
  json_enabled: true
  level: warning
"""


def _args(**overrides: Any) -> argparse.Namespace:
    base: dict[str, Any] = {
        'cmd': 'create',
        'input': 'issues.csv',
        'ext': 'csv',
        'debug': 0,
        'quiet': False,
        'json_logs': False,
        'config': None,
        'repo': None,
        'gh': None,
        'dry_run': False,
        'keep_going': False,
    }
    base.update(overrides)
    return argparse.Namespace(**base)


def test_load_settings_full(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'gh-issues.yaml'
    cfg_path.write_text(FULL_CONFIG)
    settings = load_settings(cfg_path)
    assert settings.repo == 'octo/repo'
    assert settings.gh_path == '/opt/bin/gh'
    assert settings.on_failure is FailurePolicy.CONTINUE
    assert settings.dry_run is True
    assert settings.mock is False
    assert settings.json_logging is True
    assert settings.log_level == 'WARNING'


def test_load_settings_empty_file_is_defaults(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'empty.yaml'
    cfg_path.write_text('')
    assert load_settings(cfg_path) == FileSettings()


@pytest.mark.parametrize(
    'content',
    [
        '- just\n- a list\n',
        'behavior:\n  on_failure: sometimes\n',
        'logging:\n  level: LOUD\n',
        'github: [1, 2]\n',
        'github: {repo: [unterminated\n',
    ],
)
def test_load_settings_rejects_invalid(tmp_path: Path, content: str) -> None:
    cfg_path = tmp_path / 'bad.yaml'
    cfg_path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(cfg_path)


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match='not found'):
        load_settings(tmp_path / 'absent.yaml')


def test_parse_failure_policy() -> None:
    assert parse_failure_policy(' ABORT ') is FailurePolicy.ABORT
    assert parse_failure_policy('continue') is FailurePolicy.CONTINUE


def test_prepare_config_defaults() -> None:
    cfg = prepare_config(_args(), env={})
    assert cfg.input == Path('issues.csv')
    assert cfg.ext == 'csv'
    assert cfg.on_failure is FailurePolicy.ABORT
    assert cfg.log_level == 'INFO'
    assert cfg.repo is None
    assert cfg.mock is False


def test_prepare_config_precedence(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'gh-issues.yaml'
    cfg_path.write_text(FULL_CONFIG)
    env = {'GHISSUES_CONFIG': str(cfg_path), 'GHISSUES_REPO': 'env/repo', 'GHISSUES_MOCK': '1'}

    cfg = prepare_config(_args(), env=env)
    assert cfg.repo == 'env/repo'  # env beats file
    assert cfg.gh_path == '/opt/bin/gh'  # file beats default
    assert cfg.mock is True
    assert cfg.dry_run is True
    assert cfg.on_failure is FailurePolicy.CONTINUE
    assert cfg.json_logging is True
    assert cfg.log_level == 'WARNING'

    cfg = prepare_config(_args(repo='cli/repo', debug=1), env=env)
    assert cfg.repo == 'cli/repo'  # command line beats env
    assert cfg.log_level == 'DEBUG'
    assert cfg.verbosity == 1


def test_keep_going_overrides_file_policy(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'gh-issues.yaml'
    cfg_path.write_text('behavior:\n  on_failure: abort\n')
    cfg = prepare_config(_args(config=str(cfg_path), keep_going=True), env={})
    assert cfg.on_failure is FailurePolicy.CONTINUE


def test_quiet_from_env() -> None:
    cfg = prepare_config(_args(), env={'GHISSUES_QUIET': 'true'})
    assert cfg.quiet is True
    assert cfg.log_level == 'WARNING'


def test_cli_reports_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(['--config', str(tmp_path / 'absent.yaml'), 'create', '-i', 'issues.csv'])
    assert rc == 1
    assert 'Configuration file not found' in capsys.readouterr().err
