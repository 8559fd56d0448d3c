from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from skill_corpus import (
    CorpusConfig,
    CorpusRootError,
    DocumentKind,
    LoadErrorKind,
    ListValue,
    Scalar,
    aload_corpus,
    classify_kind,
    discover_documents,
    load_corpus,
    parse_document,
)

SKILL = """---
name: nextjs-app-router
description: Patterns for the Next.js App Router.
version: "1.0"
---
# Next.js App Router

- [Caching](references/caching.md)
- [Routing](references/routing.md#dynamic)
"""

AGENT = """---
name: a11y-auditor
description: Audits UI code for accessibility problems.
model: sonnet
color: purple
tools:
  - Read
  - Grep
---
You are an accessibility auditor. Use [the checklist](../skills/a11y/SKILL.md).
"""

REFERENCE = "# Caching\n\nTables and snippets.\n"


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, object]]] = []

    def info(self, message: str, /, **kwargs: object) -> None:
        self.calls.append(("info", message, dict(kwargs)))

    def debug(self, message: str, /, **kwargs: object) -> None:
        self.calls.append(("debug", message, dict(kwargs)))

    def warning(self, message: str, /, **kwargs: object) -> None:
        self.calls.append(("warning", message, dict(kwargs)))

    def error(self, message: str, /, **kwargs: object) -> None:
        self.calls.append(("error", message, dict(kwargs)))


@pytest.fixture
def corpus(tmp_path: Path, write_doc: Callable[[str, str], Path]) -> Path:
    write_doc("skills/nextjs/SKILL.md", SKILL)
    write_doc("skills/nextjs/references/caching.md", REFERENCE)
    write_doc("skills/nextjs/references/routing.md", "# Routing\n")
    write_doc("agents/a11y-auditor.md", AGENT)
    write_doc("skills/nextjs/notes.txt", "not markdown")
    write_doc(".github/PULL_REQUEST_TEMPLATE.md", "# hidden\n")
    return tmp_path


def test_classify_kind() -> None:
    assert classify_kind({"tools": ListValue(()), "model": Scalar("x")}) is DocumentKind.AGENT
    assert classify_kind({"name": Scalar("x"), "description": Scalar("y")}) is DocumentKind.SKILL
    assert (
        classify_kind(
            {
                "name": Scalar("x"),
                "description": Scalar("y"),
                "tools": ListValue(("Read",)),
                "model": Scalar("opus"),
            }
        )
        is DocumentKind.AGENT
    )
    assert classify_kind({"name": Scalar("x")}) is DocumentKind.REFERENCE
    assert classify_kind({}) is DocumentKind.REFERENCE


def test_discover_documents_skips_hidden_and_non_markdown(corpus: Path) -> None:
    found = [p.relative_to(corpus).as_posix() for p in discover_documents(corpus)]
    assert found == [
        "agents/a11y-auditor.md",
        "skills/nextjs/SKILL.md",
        "skills/nextjs/references/caching.md",
        "skills/nextjs/references/routing.md",
    ]

    with_hidden = discover_documents(corpus, include_hidden=True)
    assert corpus / ".github" / "PULL_REQUEST_TEMPLATE.md" in with_hidden


def test_discover_documents_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(CorpusRootError):
        discover_documents(tmp_path / "missing")


def test_load_corpus_builds_records(corpus: Path) -> None:
    result = load_corpus(corpus)

    assert result.errors == ()
    assert [r.path for r in result.records] == [
        "agents/a11y-auditor.md",
        "skills/nextjs/SKILL.md",
        "skills/nextjs/references/caching.md",
        "skills/nextjs/references/routing.md",
    ]
    records = result.by_path()

    skill = records["skills/nextjs/SKILL.md"]
    assert skill.kind is DocumentKind.SKILL
    assert skill.get_field("version") == Scalar("1.0")
    assert skill.outbound_links == ("references/caching.md", "references/routing.md")
    assert skill.body.startswith("# Next.js App Router")

    agent = records["agents/a11y-auditor.md"]
    assert agent.kind is DocumentKind.AGENT
    assert agent.get_field("tools") == ListValue(("Read", "Grep"))
    assert agent.outbound_links == ("../skills/a11y/SKILL.md",)

    reference = records["skills/nextjs/references/caching.md"]
    assert reference.kind is DocumentKind.REFERENCE
    assert dict(reference.frontmatter) == {}


def test_load_corpus_is_idempotent(corpus: Path) -> None:
    first = load_corpus(corpus)
    second = load_corpus(corpus)

    assert [(r.path, r.kind, r.outbound_links) for r in first.records] == [
        (r.path, r.kind, r.outbound_links) for r in second.records
    ]
    assert first.errors == second.errors


def test_load_corpus_empty_directory(tmp_path: Path) -> None:
    result = load_corpus(tmp_path)
    assert result.records == ()
    assert result.errors == ()


def test_unclosed_frontmatter_reports_one_error_and_keeps_record(
    tmp_path: Path, write_doc: Callable[[str, str], Path]
) -> None:
    write_doc("broken.md", "---\nname: broken\ndescription: no closing line\n# Body\n")
    write_doc("fine.md", "# Fine\n")

    result = load_corpus(tmp_path)

    assert [(e.kind, e.path) for e in result.errors] == [
        (LoadErrorKind.MALFORMED_FRONTMATTER, "broken.md")
    ]
    broken = result.by_path()["broken.md"]
    assert dict(broken.frontmatter) == {}
    assert broken.kind is DocumentKind.REFERENCE
    assert "fine.md" in result.by_path()


def test_invalid_yaml_keeps_body_and_links() -> None:
    record, error = parse_document(
        "skills/x/SKILL.md",
        "---\nname: [oops\n---\nSee [ref](references/r.md).\n",
    )
    assert error is not None
    assert error.kind is LoadErrorKind.MALFORMED_FRONTMATTER
    assert dict(record.frontmatter) == {}
    assert record.outbound_links == ("references/r.md",)


def test_undecodable_file_is_reported(tmp_path: Path) -> None:
    (tmp_path / "latin1.md").write_bytes("caf\xe9".encode("latin-1"))
    (tmp_path / "ok.md").write_text("# ok\n", encoding="utf-8")

    result = load_corpus(tmp_path)

    assert [r.path for r in result.records] == ["ok.md"]
    assert [(e.kind, e.path) for e in result.errors] == [
        (LoadErrorKind.DECODE_ERROR, "latin1.md")
    ]


def test_unreadable_file_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "locked.md").write_text("# locked\n", encoding="utf-8")
    (tmp_path / "ok.md").write_text("# ok\n", encoding="utf-8")

    def _read(path: Path) -> bytes:
        if path.name == "locked.md":
            raise PermissionError(13, "Permission denied")
        return path.read_bytes()

    monkeypatch.setattr("skill_corpus.loader._read_bytes", _read)
    result = load_corpus(tmp_path)

    assert [r.path for r in result.records] == ["ok.md"]
    assert len(result.errors) == 1
    assert result.errors[0].kind is LoadErrorKind.READ_ERROR
    assert "Permission denied" in result.errors[0].message


def test_slow_read_is_reported_as_timeout(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "slow.md").write_text("# slow\n", encoding="utf-8")
    (tmp_path / "fast.md").write_text("# fast\n", encoding="utf-8")

    def _read(path: Path) -> bytes:
        if path.name == "slow.md":
            time.sleep(3.0)
        return path.read_bytes()

    monkeypatch.setattr("skill_corpus.loader._read_bytes", _read)
    started = time.monotonic()
    result = load_corpus(tmp_path, config=CorpusConfig(read_timeout=0.1))
    elapsed = time.monotonic() - started

    # The stalled read must not hold up the load once its timeout has passed.
    assert elapsed < 1.5
    assert [r.path for r in result.records] == ["fast.md"]
    assert [(e.kind, e.path) for e in result.errors] == [
        (LoadErrorKind.TIMEOUT, "slow.md")
    ]


def test_load_corpus_logs_problems(
    tmp_path: Path, write_doc: Callable[[str, str], Path]
) -> None:
    write_doc("broken.md", "---\nname: x\n")
    recorder = _Recorder()

    load_corpus(tmp_path, logger=recorder)

    warnings = [call for call in recorder.calls if call[0] == "warning"]
    assert warnings == [
        (
            "warning",
            "Corpus file problem",
            {
                "path": "broken.md",
                "kind": "malformed_frontmatter",
                "detail": "frontmatter block is not closed ('---')",
            },
        )
    ]
    assert recorder.calls[-1][1] == "Corpus loaded"
    assert recorder.calls[-1][2]["documents"] == 1
    assert recorder.calls[-1][2]["errors"] == 1


@pytest.mark.anyio
async def test_aload_corpus_respects_concurrency_limit(
    corpus: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def _read(path: Path) -> bytes:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with lock:
            active -= 1
        return path.read_bytes()

    monkeypatch.setattr("skill_corpus.loader._read_bytes", _read)
    result = await aload_corpus(corpus, config=CorpusConfig(max_concurrency=1))

    assert len(result.records) == 4
    assert peak == 1
