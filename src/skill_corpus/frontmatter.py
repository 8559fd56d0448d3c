"""Splitting and parsing of YAML frontmatter at the top of Markdown documents."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

import yaml

from .exceptions import MalformedFrontmatterError
from .models import FieldValue, ListValue, Missing, Scalar

_FRONTMATTER_DELIMITER_RE = re.compile(r"^---\s*$")
_BOM = "\ufeff"


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split ``text`` into (yaml_block, body).

    ``yaml_block`` is ``None`` when the document does not open with a ``---``
    line. An opening delimiter without a matching closing one raises
    ``MalformedFrontmatterError``.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM) :]

    lines = text.splitlines(keepends=True)
    if not lines or not _FRONTMATTER_DELIMITER_RE.match(lines[0]):
        return None, text

    end_index: int | None = None
    for idx in range(1, len(lines)):
        if _FRONTMATTER_DELIMITER_RE.match(lines[idx]):
            end_index = idx
            break
    if end_index is None:
        raise MalformedFrontmatterError("frontmatter block is not closed ('---')")

    yaml_block = "\n".join(_without_line_break(line) for line in lines[1:end_index])
    # The body keeps its original line endings.
    body = "".join(lines[end_index + 1 :])
    return yaml_block, body


def _without_line_break(line: str) -> str:
    return line.splitlines()[0] if line else line


def to_field_value(raw: Any) -> FieldValue:
    """Convert a raw YAML value into a ``FieldValue``."""
    if raw is None:
        return Missing()
    if isinstance(raw, list):
        return ListValue(items=tuple(_scalar_text(item) for item in raw))
    return Scalar(value=_scalar_text(raw))


def _scalar_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (datetime, date)):
        return raw.isoformat()
    if raw is None:
        return ""
    if isinstance(raw, (dict, list)):
        # Nested structures are kept as compact flow YAML.
        return yaml.safe_dump(
            raw, default_flow_style=True, sort_keys=False, allow_unicode=True
        ).strip()
    return str(raw)


def parse_frontmatter(yaml_block: str) -> dict[str, FieldValue]:
    """Parse a frontmatter block into a flat ``{key: FieldValue}`` mapping."""
    try:
        data = yaml.safe_load(yaml_block)
    except yaml.YAMLError as exc:
        raise MalformedFrontmatterError(f"invalid YAML in frontmatter: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontmatterError("frontmatter must be a YAML mapping")

    return {str(key): to_field_value(value) for key, value in data.items()}


__all__ = [
    "parse_frontmatter",
    "split_frontmatter",
    "to_field_value",
]
