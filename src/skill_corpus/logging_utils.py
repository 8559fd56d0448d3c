"""Structured log events for corpus runs, emitted through logfire by default."""

from __future__ import annotations

from typing import Any, Protocol

import logfire

from .models import CorpusReport, LoadError, LoadResult


class CorpusLogger(Protocol):
    """Anything with logfire-style ``info``/``warning`` methods."""

    def info(self, message: str, /, *args: Any, **kwargs: Any) -> Any:
        ...

    def warning(self, message: str, /, *args: Any, **kwargs: Any) -> Any:
        ...


def resolve_logger(preferred: CorpusLogger | None = None) -> CorpusLogger:
    """Return ``preferred`` when given, otherwise the logfire module."""
    if preferred is not None:
        return preferred
    return logfire  # type: ignore[return-value]


def _emit(logger: CorpusLogger, level: str, event: str, **attributes: Any) -> None:
    method = getattr(logger, level)
    try:
        method(event, **attributes)
    except TypeError:
        # stdlib ``logging.Logger`` takes no keyword attributes.
        details = ", ".join(f"{key}={value!r}" for key, value in attributes.items())
        method(f"{event} | {details}")


def log_file_problem(logger: CorpusLogger, error: LoadError) -> None:
    """Warn about one file that could not be read or parsed cleanly."""
    _emit(
        logger,
        "warning",
        "Corpus file problem",
        path=error.path,
        kind=str(error.kind),
        detail=error.message,
    )


def log_corpus_loaded(logger: CorpusLogger, result: LoadResult) -> None:
    _emit(
        logger,
        "info",
        "Corpus loaded",
        root=str(result.root),
        documents=len(result.records),
        errors=len(result.errors),
    )


def log_validation_finished(logger: CorpusLogger, report: CorpusReport) -> None:
    """Record the outcome of validation; a failing run is logged as a warning."""
    _emit(
        logger,
        "info" if report.ok else "warning",
        "Corpus validated",
        root=report.root,
        documents=report.total_documents,
        load_errors=len(report.load_errors),
        issues=len(report.issues),
    )


__all__ = [
    "CorpusLogger",
    "log_corpus_loaded",
    "log_file_problem",
    "log_validation_finished",
    "resolve_logger",
]
