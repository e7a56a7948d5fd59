"""gh-issues CLI.

Subcommands:
  create  -> read an input file (CSV) and run ``gh issue create`` once per row

Global options (before the subcommand):
  -d/--debug   repeatable; any count switches logging to DEBUG
  --quiet      only warnings and errors; compact totals line
  --json-logs  JSON lines on stderr instead of plain text
  --config     optional YAML config file (env: GHISSUES_CONFIG)
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, NoReturn

from ghissues import __version__
from ghissues.config import RunConfig
from ghissues.dispatch import Dispatcher, DispatchSummary
from ghissues.errors import ArgumentError, GhIssuesError
from ghissues.gh import IssuesClient, IssuesClientConfig
from ghissues.loaders import load_issues, supported_formats
from ghissues.logging import StructuredLogger, configure_logging
from ghissues.runtime import execute_command, prepare_config
from ghissues.ux import print_error, print_summary_box

PROG = "gh-issues"

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(message, usage=self.format_usage())


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(prog=PROG, description="Create GitHub issues from an input file")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="Turn debugging information on (repeatable)",
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: GHISSUES_QUIET=1)",
    )
    p.add_argument("--json-logs", action="store_true", help="Emit JSON log lines on stderr")
    p.add_argument("--config", help="YAML config file (env: GHISSUES_CONFIG)")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pc = sub.add_parser("create", help="Create gh issues based on input file")
    pc.add_argument(
        "-e",
        "--ext",
        default="csv",
        help=f"Input file extension, options: {', '.join(supported_formats())} (default: csv)",
    )
    pc.add_argument("-i", "--input", required=True, help="Input filepath")
    pc.add_argument("--repo", help="Target repository (owner/repo), passed to gh as -R")
    pc.add_argument("--gh", help="Path to the gh executable (env: GHISSUES_GH)")
    pc.add_argument("--dry-run", action="store_true", help="Print gh commands without running them")
    pc.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with remaining rows after a failed issue creation",
    )
    return p


def _emit_summary(summary: DispatchSummary, cfg: RunConfig) -> None:
    totals = summary.totals
    if cfg.quiet:
        print("[create] totals", json.dumps(dict(totals)))
        return
    items: list[tuple[str, str | int]] = [
        ("Parsed rows", totals["parsed"]),
        ("Created", totals["created"]),
        ("Failed", totals["failed"]),
        ("Dry run", "yes" if summary.dry_run else "no"),
    ]
    if summary.failures:
        items.append(("Failed rows", ", ".join(str(f.row) for f in summary.failures)))
    print_summary_box("Create Summary", items)


def _cmd_create(cfg: RunConfig, logger: StructuredLogger) -> int:
    logger.debug(f"debug level: {cfg.verbosity}")
    logger.debug(f"cmd: {PROG} create --input {cfg.input} --ext {cfg.ext}")
    issues = load_issues(cfg.input, cfg.ext)
    client = IssuesClient(
        IssuesClientConfig(
            repo=cfg.repo,
            gh_path=cfg.gh_path,
            mock=cfg.mock,
            dry_run=cfg.dry_run,
        )
    )
    dispatcher = Dispatcher(client, policy=cfg.on_failure, logger=logger)
    with logger.timed_operation("create", input=str(cfg.input), dry_run=cfg.dry_run):
        summary = dispatcher.run(issues)
    _emit_summary(summary, cfg)
    return 0 if summary.ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except ArgumentError as exc:
        sys.stderr.write(exc.usage or parser.format_usage())
        print(f"{PROG}: error: {exc}", file=sys.stderr)
        return 2
    try:
        cfg = prepare_config(args)
    except GhIssuesError as exc:
        print_error(f"error: {exc}")
        return 1
    logger = configure_logging(json_logging=cfg.json_logging, level=cfg.log_level)
    handlers = {
        "create": lambda: _cmd_create(cfg, logger),
    }
    handler = handlers.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 2
    return execute_command(handler, logger, args.cmd)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
