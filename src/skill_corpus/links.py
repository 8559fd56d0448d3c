"""Extraction and resolution of relative Markdown links between documents."""

from __future__ import annotations

import posixpath
import re
from pathlib import PurePosixPath
from urllib.parse import unquote

# [text](target) or ![alt](target), with an optional "title" after the target.
_INLINE_LINK_RE = re.compile(
    r"!?\[[^\]\n]*\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'][^\"'\n]*[\"'])?\s*\)"
)
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def normalize_rel_path(path: str) -> str:
    """Normalize and validate a corpus-relative path (posix separators, no '..')."""
    if not path:
        raise ValueError("path must be non-empty")
    p = PurePosixPath(path.replace("\\", "/"))
    if p.is_absolute():
        raise ValueError("path must be relative")
    parts = [part for part in p.parts if part not in (".", "")]
    if any(part == ".." for part in parts):
        raise ValueError("path must not contain '..' segments")
    if not parts:
        raise ValueError("path must not resolve to root")
    return "/".join(parts)


def _strip_fragment(target: str) -> str:
    for sep in ("#", "?"):
        if sep in target:
            target = target.split(sep, 1)[0]
    return target


def extract_links(body: str) -> tuple[str, ...]:
    """Return relative ``.md`` link targets in order of appearance.

    Fragments (``#section``) are dropped, duplicates are kept, and targets
    carrying a URL scheme are skipped.
    """
    links: list[str] = []
    for match in _INLINE_LINK_RE.finditer(body):
        target = match.group(1)
        if _SCHEME_RE.match(target):
            continue
        path = _strip_fragment(target)
        if not path.lower().endswith(".md"):
            continue
        links.append(path)
    return tuple(links)


def resolve_link(source_path: str, target: str) -> str | None:
    """Resolve ``target`` against the directory of ``source_path``.

    A leading ``/`` anchors the target at the corpus root. Returns ``None`` for
    targets that escape the root.
    """
    decoded = unquote(target).replace("\\", "/")
    if decoded.startswith("/"):
        joined = decoded.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(source_path), decoded)
    if not joined:
        return None
    resolved = posixpath.normpath(joined)
    if resolved == ".." or resolved.startswith("../") or resolved == ".":
        return None
    return resolved


__all__ = [
    "extract_links",
    "normalize_rel_path",
    "resolve_link",
]
