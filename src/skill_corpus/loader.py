"""Corpus loading: discover Markdown files, read them concurrently, build records."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Mapping
from pathlib import Path

import logfire

from .config import CorpusConfig
from .exceptions import CorpusRootError, MalformedFrontmatterError
from .frontmatter import parse_frontmatter, split_frontmatter
from .links import extract_links, normalize_rel_path
from .logging_utils import CorpusLogger, log_corpus_loaded, log_file_problem, resolve_logger
from .models import (
    DocumentKind,
    DocumentRecord,
    FieldValue,
    LoadError,
    LoadErrorKind,
    LoadResult,
)
from .progress import LoadProgress

MARKDOWN_SUFFIX = ".md"


def discover_documents(root: Path, *, include_hidden: bool = False) -> list[Path]:
    """Return every Markdown file under ``root`` in a stable, sorted order."""
    if not root.exists() or not root.is_dir():
        raise CorpusRootError(f"root must be an existing directory: {root}")

    found: list[Path] = []
    for path in root.rglob("*"):
        if path.suffix.lower() != MARKDOWN_SUFFIX or not path.is_file():
            continue
        rel_parts = path.relative_to(root).parts
        if not include_hidden and any(part.startswith(".") for part in rel_parts):
            continue
        found.append(path)
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def classify_kind(frontmatter: Mapping[str, FieldValue]) -> DocumentKind:
    """Classify a document from the keys present in its frontmatter."""
    if "tools" in frontmatter and "model" in frontmatter:
        return DocumentKind.AGENT
    if "name" in frontmatter and "description" in frontmatter:
        return DocumentKind.SKILL
    return DocumentKind.REFERENCE


def parse_document(path: str, text: str) -> tuple[DocumentRecord, LoadError | None]:
    """Build a record from raw document text.

    Malformed frontmatter does not raise: the record is returned with empty
    frontmatter alongside a ``malformed_frontmatter`` error.
    """
    error: LoadError | None = None
    frontmatter: dict[str, FieldValue] = {}
    body = text
    try:
        yaml_block, body = split_frontmatter(text)
        if yaml_block is not None:
            frontmatter = parse_frontmatter(yaml_block)
    except MalformedFrontmatterError as exc:
        frontmatter = {}
        error = LoadError(
            kind=LoadErrorKind.MALFORMED_FRONTMATTER,
            path=path,
            message=str(exc),
        )

    record = DocumentRecord(
        path=path,
        kind=classify_kind(frontmatter),
        frontmatter=frontmatter,
        body=body,
        outbound_links=extract_links(body),
    )
    return record, error


def _read_bytes(path: Path) -> bytes:
    return path.read_bytes()


async def _read_with_timeout(path: Path, timeout: float) -> bytes:
    """Read ``path`` on a daemon thread, giving up after ``timeout`` seconds.

    A stalled read is abandoned rather than awaited: its thread never holds up
    the event loop shutdown or interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[bytes] = loop.create_future()

    def _deliver(data: bytes | None, error: Exception | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(data)  # type: ignore[arg-type]

    def _worker() -> None:
        data: bytes | None = None
        error: Exception | None = None
        try:
            data = _read_bytes(path)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_deliver, data, error)
        except RuntimeError:
            # The load finished (and closed its loop) before this read did.
            return

    threading.Thread(target=_worker, name=f"corpus-read:{path.name}", daemon=True).start()
    return await asyncio.wait_for(future, timeout)


async def _load_one(
    path: Path,
    rel_path: str,
    *,
    semaphore: asyncio.Semaphore,
    timeout: float,
) -> tuple[DocumentRecord | None, LoadError | None]:
    async with semaphore:
        try:
            raw = await _read_with_timeout(path, timeout)
        except TimeoutError:
            return None, LoadError(
                kind=LoadErrorKind.TIMEOUT,
                path=rel_path,
                message=f"read did not complete within {timeout:g}s",
            )
        except OSError as exc:
            return None, LoadError(
                kind=LoadErrorKind.READ_ERROR,
                path=rel_path,
                message=f"could not read file: {exc.strerror or exc}",
            )

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        return None, LoadError(
            kind=LoadErrorKind.DECODE_ERROR,
            path=rel_path,
            message=f"file is not valid UTF-8: {exc.reason} at byte {exc.start}",
        )
    return parse_document(rel_path, text)


async def aload_corpus(
    root: Path | str,
    *,
    config: CorpusConfig | None = None,
    logger: CorpusLogger | None = None,
    show_progress: bool = False,
) -> LoadResult:
    """Load every Markdown document under ``root``.

    Each file is read in its own task, bounded by ``config.max_concurrency``
    and ``config.read_timeout``. Per-file problems are collected as
    ``LoadError`` entries; only an unusable ``root`` raises.

    Args:
        root: Corpus root directory.
        config: Loader settings. Defaults to ``CorpusConfig()``.
        logger: Structured logger; defaults to logfire.
        show_progress: Display a Rich progress bar while files are read.

    Returns:
        LoadResult with records and errors sorted by path.
    """
    cfg = config or CorpusConfig()
    log = resolve_logger(logger)
    root_path = Path(root)
    files = discover_documents(root_path, include_hidden=cfg.include_hidden)

    records: list[DocumentRecord] = []
    errors: list[LoadError] = []
    semaphore = asyncio.Semaphore(cfg.max_concurrency)

    with logfire.span("load corpus", root=str(root_path), file_count=len(files)):
        with LoadProgress(
            total=len(files),
            description="Loading corpus",
            enabled=show_progress,
        ) as progress_bar:
            tasks = [
                asyncio.create_task(
                    _load_one(
                        path,
                        normalize_rel_path(path.relative_to(root_path).as_posix()),
                        semaphore=semaphore,
                        timeout=cfg.read_timeout,
                    )
                )
                for path in files
            ]
            for completed, future in enumerate(asyncio.as_completed(tasks), start=1):
                record, error = await future
                if record is not None:
                    records.append(record)
                if error is not None:
                    errors.append(error)
                    log_file_problem(log, error)
                progress_bar.update(
                    completed,
                    current_path=record.path if record is not None else None,
                    problems=len(errors),
                )

    records.sort(key=lambda r: r.path)
    errors.sort(key=lambda e: (e.path, str(e.kind)))
    result = LoadResult(root=root_path, records=tuple(records), errors=tuple(errors))
    log_corpus_loaded(log, result)
    return result


def load_corpus(
    root: Path | str,
    *,
    config: CorpusConfig | None = None,
    logger: CorpusLogger | None = None,
    show_progress: bool = False,
) -> LoadResult:
    """Synchronous wrapper around ``aload_corpus``; must not run inside an event loop."""
    return asyncio.run(
        aload_corpus(
            root,
            config=config,
            logger=logger,
            show_progress=show_progress,
        )
    )


__all__ = [
    "aload_corpus",
    "classify_kind",
    "discover_documents",
    "load_corpus",
    "parse_document",
]
