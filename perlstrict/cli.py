"""CLI entrypoints for perlstrict checks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .checks import StrictChecker
from .config import ConfigError, StrictConfig, check_threshold, load_config
from .logging import configure_logging
from .reporting import PlanError, TapReporter

EXIT_CONFIG = 2


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Log subprocess commands and skipped paths to stderr.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perlstrict",
        description="Check Perl syntax, use strict, use warnings and test coverage, reporting TAP.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .perlstrict.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--plan",
        type=int,
        default=None,
        help="Declare the expected number of results up front.",
    )
    parser.add_argument("--perl", default=None, help="Perl interpreter to run.")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("syntax", "Run perl -c on each file or module."),
        ("strict", "Require 'use strict;' in each file or module."),
        ("warnings", "Require 'use warnings' (or a -w shebang) in each file or module."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        _add_verbose_option(sub, suppress_default=True)
        sub.add_argument("files", nargs="+", help="File paths or My::Module names.")

    files_parser = subparsers.add_parser(
        "files",
        help="Syntax and strict checks for every perl file below the given directories.",
    )
    _add_verbose_option(files_parser, suppress_default=True)
    files_parser.add_argument(
        "--warnings",
        action="store_true",
        help="Also require use warnings in every file.",
    )
    files_parser.add_argument("dirs", nargs="*", help="Directories to search (defaults to '.').")

    cover_parser = subparsers.add_parser(
        "cover",
        help="Run test scripts under Devel::Cover and enforce a minimum total coverage.",
    )
    _add_verbose_option(cover_parser, suppress_default=True)
    cover_parser.add_argument("--threshold", type=float, default=None, help="Minimum total coverage percentage.")
    cover_parser.add_argument("--cover", default=None, help="Path to the cover binary.")
    cover_parser.add_argument("dirs", nargs="*", help="Directories holding test scripts (defaults to '.').")

    return parser


def _load(args: argparse.Namespace) -> StrictConfig:
    config = load_config(Path(args.config))
    if args.perl:
        config.perl = args.perl
    if getattr(args, "cover", None):
        config.coverage.cover = args.cover
    if getattr(args, "warnings", False):
        config.test_warnings = True
    return config


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for perlstrict."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = _load(args)
        threshold = getattr(args, "threshold", None)
        if threshold is not None:
            check_threshold(threshold)
    except ConfigError as exc:
        parser.exit(EXIT_CONFIG, f"perlstrict: {exc}\n")

    reporter = TapReporter()
    try:
        if args.plan is not None:
            reporter.plan(args.plan)
    except PlanError as exc:
        parser.exit(EXIT_CONFIG, f"perlstrict: {exc}\n")

    # The CLI is the running script, so path defaults are relative to the working directory.
    checker = StrictChecker(config, reporter=reporter, script_path="")

    if args.command == "syntax":
        for file in args.files:
            checker.syntax_ok(file)
    elif args.command == "strict":
        for file in args.files:
            checker.strict_ok(file)
    elif args.command == "warnings":
        for file in args.files:
            checker.warnings_ok(file)
    elif args.command == "files":
        checker.all_perl_files_ok(*(args.dirs or ["."]))
    elif args.command == "cover":
        checker.all_cover_ok(threshold, *args.dirs)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    summary = checker.finish()
    parser.exit(0 if summary.ok else 1)


if __name__ == "__main__":
    main(sys.argv[1:])
