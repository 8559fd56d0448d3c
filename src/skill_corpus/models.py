"""Record, error and report models for a loaded document corpus."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(StrEnum):
    """Document classification derived from frontmatter shape."""

    SKILL = "skill"
    AGENT = "agent"
    REFERENCE = "reference"


class LoadErrorKind(StrEnum):
    """Per-file problems encountered while reading the corpus."""

    MALFORMED_FRONTMATTER = "malformed_frontmatter"
    TIMEOUT = "timeout"
    READ_ERROR = "read_error"
    DECODE_ERROR = "decode_error"


class IssueKind(StrEnum):
    """Integrity problems found by the validators."""

    MISSING_REQUIRED_FIELD = "missing_required_field"
    INVALID_FIELD_TYPE = "invalid_field_type"
    BROKEN_LINK = "broken_link"
    CYCLIC_REFERENCE = "cyclic_reference"


@dataclass(slots=True, frozen=True)
class Scalar:
    """A single frontmatter value, always held as text."""

    value: str


@dataclass(slots=True, frozen=True)
class ListValue:
    """A frontmatter list; items are held as text."""

    items: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Missing:
    """Placeholder for an absent or null frontmatter key."""


FieldValue = Scalar | ListValue | Missing
"""Tagged variant for frontmatter values."""


@dataclass(slots=True, frozen=True)
class DocumentRecord:
    """A single Markdown document loaded from the corpus.

    ``path`` is POSIX-style and relative to the corpus root. ``outbound_links``
    keeps the order links appear in the body and is not deduplicated.
    """

    path: str
    kind: DocumentKind
    frontmatter: Mapping[str, FieldValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    body: str = ""
    outbound_links: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.frontmatter, MappingProxyType):
            object.__setattr__(
                self, "frontmatter", MappingProxyType(dict(self.frontmatter))
            )

    def get_field(self, name: str) -> FieldValue:
        """Return the value for ``name`` or ``Missing()`` when it is absent."""
        return self.frontmatter.get(name, Missing())


class LoadError(BaseModel):
    """A problem with one file, recorded instead of aborting the load."""

    kind: LoadErrorKind
    path: str
    message: str

    model_config = ConfigDict(frozen=True)


class ValidationIssue(BaseModel):
    """An integrity problem reported by a validator."""

    kind: IssueKind
    path: str
    message: str
    field: str | None = None
    target: str | None = None

    model_config = ConfigDict(frozen=True)


@dataclass(slots=True, frozen=True)
class LoadResult:
    """Records and per-file errors produced by a single corpus load."""

    root: Path
    records: tuple[DocumentRecord, ...] = ()
    errors: tuple[LoadError, ...] = ()

    def by_path(self) -> dict[str, DocumentRecord]:
        return {record.path: record for record in self.records}


class CorpusReport(BaseModel):
    """Aggregate outcome of loading and validating a corpus."""

    root: str
    total_documents: int = 0
    counts_by_kind: dict[DocumentKind, int] = Field(
        default_factory=lambda: {kind: 0 for kind in DocumentKind}
    )
    load_errors: list[LoadError] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def problem_count(self) -> int:
        return len(self.load_errors) + len(self.issues)

    @property
    def ok(self) -> bool:
        return self.problem_count == 0

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 when clean, 1 when any problem was found."""
        return 0 if self.ok else 1

    def to_json(self, *, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_parts(
        cls,
        root: Path | str,
        records: Sequence[DocumentRecord],
        load_errors: Sequence[LoadError],
        issues: Sequence[ValidationIssue],
    ) -> CorpusReport:
        counts = {kind: 0 for kind in DocumentKind}
        for record in records:
            counts[record.kind] += 1
        return cls(
            root=str(root),
            total_documents=len(records),
            counts_by_kind=counts,
            load_errors=list(load_errors),
            issues=list(issues),
        )


__all__ = [
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
]
