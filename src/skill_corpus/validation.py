"""Integrity checks over a loaded corpus.

Every function here is pure: it reads the record sequence it is given, performs
no I/O and returns issues in a deterministic order.
"""

from __future__ import annotations

from collections.abc import Sequence

from .links import resolve_link
from .models import (
    DocumentKind,
    DocumentRecord,
    FieldValue,
    IssueKind,
    ListValue,
    Scalar,
    ValidationIssue,
)

REQUIRED_SCALAR_FIELDS: dict[DocumentKind, tuple[str, ...]] = {
    DocumentKind.SKILL: ("name", "description"),
    DocumentKind.AGENT: ("name", "description", "model"),
}
REQUIRED_LIST_FIELDS: dict[DocumentKind, tuple[str, ...]] = {
    DocumentKind.AGENT: ("tools",),
}


def _missing(record: DocumentRecord, field_name: str, expected: str) -> ValidationIssue:
    return ValidationIssue(
        kind=IssueKind.MISSING_REQUIRED_FIELD,
        path=record.path,
        field=field_name,
        message=f"{record.kind} is missing required field '{field_name}' ({expected})",
    )


def _wrong_type(
    record: DocumentRecord, field_name: str, expected: str, value: FieldValue
) -> ValidationIssue:
    actual = "list" if isinstance(value, ListValue) else "string"
    return ValidationIssue(
        kind=IssueKind.INVALID_FIELD_TYPE,
        path=record.path,
        field=field_name,
        message=f"field '{field_name}' must be {expected}, got a {actual}",
    )


def _check_scalar(record: DocumentRecord, field_name: str) -> ValidationIssue | None:
    value = record.get_field(field_name)
    if isinstance(value, Scalar):
        return None if value.value.strip() else _missing(record, field_name, "non-empty string")
    if isinstance(value, ListValue):
        return _wrong_type(record, field_name, "a string", value)
    return _missing(record, field_name, "non-empty string")


def _check_list(record: DocumentRecord, field_name: str) -> ValidationIssue | None:
    value = record.get_field(field_name)
    if isinstance(value, ListValue):
        if any(item.strip() for item in value.items):
            return None
        return _missing(record, field_name, "non-empty list")
    if isinstance(value, Scalar) and value.value.strip():
        return _wrong_type(record, field_name, "a list of strings", value)
    return _missing(record, field_name, "non-empty list")


def validate_frontmatter(records: Sequence[DocumentRecord]) -> list[ValidationIssue]:
    """Check required frontmatter fields for skill and agent documents.

    Reference documents are exempt.
    """
    issues: list[ValidationIssue] = []
    for record in records:
        for field_name in REQUIRED_SCALAR_FIELDS.get(record.kind, ()):
            issue = _check_scalar(record, field_name)
            if issue is not None:
                issues.append(issue)
        for field_name in REQUIRED_LIST_FIELDS.get(record.kind, ()):
            issue = _check_list(record, field_name)
            if issue is not None:
                issues.append(issue)
    return issues


def validate_links(records: Sequence[DocumentRecord]) -> list[ValidationIssue]:
    """Report outbound links that do not resolve to a loaded document."""
    known = {record.path for record in records}
    issues: list[ValidationIssue] = []
    for record in records:
        for link in record.outbound_links:
            resolved = resolve_link(record.path, link)
            if resolved is None:
                message = f"link '{link}' points outside the corpus root"
            elif resolved not in known:
                message = f"link '{link}' does not resolve to a document ({resolved})"
            else:
                continue
            issues.append(
                ValidationIssue(
                    kind=IssueKind.BROKEN_LINK,
                    path=record.path,
                    target=link,
                    message=message,
                )
            )
    return issues


def build_link_graph(records: Sequence[DocumentRecord]) -> dict[str, list[str]]:
    """Adjacency list of resolvable links keyed by path (self-links dropped)."""
    known = {record.path for record in records}
    graph: dict[str, list[str]] = {}
    for record in records:
        edges: list[str] = []
        for link in record.outbound_links:
            resolved = resolve_link(record.path, link)
            if resolved is None or resolved not in known or resolved == record.path:
                continue
            if resolved not in edges:
                edges.append(resolved)
        graph[record.path] = edges
    return graph


_VISITING = 1
_DONE = 2


def detect_cycles(records: Sequence[DocumentRecord]) -> list[ValidationIssue]:
    """Report one ``cyclic_reference`` issue per back edge in the link graph."""
    graph = build_link_graph(records)
    state: dict[str, int] = {}
    issues: list[ValidationIssue] = []

    for start in sorted(graph):
        if start in state:
            continue
        state[start] = _VISITING
        trail = [start]
        stack = [(start, iter(graph[start]))]
        while stack:
            node, edges = stack[-1]
            target = next(edges, None)
            if target is None:
                state[node] = _DONE
                stack.pop()
                trail.pop()
                continue
            seen = state.get(target)
            if seen is None:
                state[target] = _VISITING
                trail.append(target)
                stack.append((target, iter(graph[target])))
            elif seen == _VISITING:
                cycle = trail[trail.index(target) :] + [target]
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.CYCLIC_REFERENCE,
                        path=node,
                        target=target,
                        message="link cycle: " + " -> ".join(cycle),
                    )
                )
    return issues


def validate_corpus(
    records: Sequence[DocumentRecord], *, check_cycles: bool = False
) -> list[ValidationIssue]:
    """Run every validator and concatenate their issues."""
    issues = validate_frontmatter(records)
    issues.extend(validate_links(records))
    if check_cycles:
        issues.extend(detect_cycles(records))
    return issues


__all__ = [
    "REQUIRED_LIST_FIELDS",
    "REQUIRED_SCALAR_FIELDS",
    "build_link_graph",
    "detect_cycles",
    "validate_corpus",
    "validate_frontmatter",
    "validate_links",
]
