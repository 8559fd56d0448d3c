"""Aggregate reporting: build, print and persist the outcome of a corpus run."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import CorpusReport, DocumentKind, LoadResult, ValidationIssue


def build_report(
    load_result: LoadResult, issues: Sequence[ValidationIssue]
) -> CorpusReport:
    """Combine a load result and validator output into a single report."""
    return CorpusReport.from_parts(
        load_result.root,
        load_result.records,
        load_result.errors,
        issues,
    )


def _counts_table(report: CorpusReport) -> Table:
    table = Table(title=Text(f"Corpus: {report.root}"), title_justify="left")
    table.add_column("Kind")
    table.add_column("Documents", justify="right")
    for kind in DocumentKind:
        table.add_row(str(kind), str(report.counts_by_kind.get(kind, 0)))
    table.add_row("total", str(report.total_documents), style="bold")
    return table


def render_summary(report: CorpusReport, console: Console | None = None) -> None:
    """Print a counts table followed by one line per problem."""
    out = console or Console()
    out.print(_counts_table(report))

    for error in report.load_errors:
        out.print(
            f"{error.path}: [{error.kind}] {error.message}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    for issue in report.issues:
        out.print(
            f"{issue.path}: [{issue.kind}] {issue.message}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    if report.ok:
        out.print(f"OK: {report.total_documents} document(s), no problems found.")
    else:
        out.print(
            f"FAILED: {len(report.load_errors)} load error(s), "
            f"{len(report.issues)} validation issue(s)."
        )


def write_json(report: CorpusReport, path: Path) -> None:
    """Write the machine-readable report, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report.to_json() + "\n", encoding="utf-8")


__all__ = [
    "build_report",
    "render_summary",
    "write_json",
]
