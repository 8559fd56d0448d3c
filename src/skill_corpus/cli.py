"""Command-line entry point: ``validate-corpus [ROOT]``."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

import logfire
from rich.console import Console

from .config import ENV_CORPUS_ROOT, CorpusConfig
from .exceptions import SkillCorpusError
from .loader import load_corpus
from .logging_utils import log_validation_finished, resolve_logger
from .report import build_report, render_summary, write_json
from .validation import validate_corpus

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validate-corpus",
        description="Load a Markdown skill/agent corpus and report integrity problems.",
    )
    parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        default=None,
        help=f"Corpus root directory (defaults to ${ENV_CORPUS_ROOT}).",
    )
    parser.add_argument(
        "--json",
        dest="json_path",
        type=Path,
        default=None,
        help="Also write the report as JSON to this file.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed per file read before it is reported as a timeout.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum number of files read concurrently.",
    )
    parser.add_argument(
        "--include-hidden",
        action="store_true",
        default=None,
        help="Also load files under hidden directories.",
    )
    parser.add_argument(
        "--check-cycles",
        action="store_true",
        default=None,
        help="Report cycles in the link graph.",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while files are read.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print structured log output to the console.",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    console: Console | None = None,
    configure_logging: bool = False,
) -> int:
    """Run the validator and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if configure_logging:
        logfire.configure(
            send_to_logfire="if-token-present",
            console=None if args.verbose else False,
        )
    out = console or Console()
    env = os.environ if environ is None else environ

    try:
        config = CorpusConfig.from_env(
            env,
            root=args.root,
            read_timeout=args.timeout,
            max_concurrency=args.concurrency,
            include_hidden=args.include_hidden,
            check_cycles=args.check_cycles,
        )
    except SkillCorpusError as exc:
        out.print(f"error: {exc}", markup=False, highlight=False)
        return EXIT_USAGE

    if config.root is None:
        out.print(
            f"error: no corpus root given and ${ENV_CORPUS_ROOT} is not set",
            markup=False,
            highlight=False,
        )
        return EXIT_USAGE

    try:
        result = load_corpus(config.root, config=config, show_progress=args.progress)
    except SkillCorpusError as exc:
        out.print(f"error: {exc}", markup=False, highlight=False)
        return EXIT_USAGE

    issues = validate_corpus(result.records, check_cycles=config.check_cycles)
    report = build_report(result, issues)
    log_validation_finished(resolve_logger(), report)

    render_summary(report, out)
    if args.json_path is not None:
        try:
            write_json(report, args.json_path)
        except OSError as exc:
            out.print(
                f"error: could not write JSON report to {args.json_path}: {exc}",
                markup=False,
                highlight=False,
                soft_wrap=True,
            )
            return EXIT_USAGE
        out.print(f"JSON report written to {args.json_path}", markup=False, highlight=False)
    return report.exit_code


def run() -> None:
    """Console-script entry point."""
    sys.exit(main(configure_logging=True))


if __name__ == "__main__":
    run()
