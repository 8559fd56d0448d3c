"""Loader and link validator for Markdown skill, agent and reference corpora."""

from __future__ import annotations

from .config import CorpusConfig
from .exceptions import (
    ConfigError,
    CorpusRootError,
    MalformedFrontmatterError,
    SkillCorpusError,
)
from .frontmatter import parse_frontmatter, split_frontmatter, to_field_value
from .links import extract_links, normalize_rel_path, resolve_link
from .loader import (
    aload_corpus,
    classify_kind,
    discover_documents,
    load_corpus,
    parse_document,
)
from .models import (
    CorpusReport,
    DocumentKind,
    DocumentRecord,
    FieldValue,
    IssueKind,
    ListValue,
    LoadError,
    LoadErrorKind,
    LoadResult,
    Missing,
    Scalar,
    ValidationIssue,
)
from .report import build_report, render_summary, write_json
from .validation import (
    detect_cycles,
    validate_corpus,
    validate_frontmatter,
    validate_links,
)

__all__ = [
    "load_corpus",
    "aload_corpus",
    "validate_frontmatter",
    "validate_links",
    "validate_corpus",
    "detect_cycles",
    "build_report",
    "render_summary",
    "write_json",
    "classify_kind",
    "discover_documents",
    "parse_document",
    "parse_frontmatter",
    "split_frontmatter",
    "to_field_value",
    "extract_links",
    "normalize_rel_path",
    "resolve_link",
    "CorpusConfig",
    "CorpusReport",
    "DocumentKind",
    "DocumentRecord",
    "FieldValue",
    "IssueKind",
    "ListValue",
    "LoadError",
    "LoadErrorKind",
    "LoadResult",
    "Missing",
    "Scalar",
    "ValidationIssue",
    "SkillCorpusError",
    "CorpusRootError",
    "ConfigError",
    "MalformedFrontmatterError",
]

__version__ = "0.1.0"
