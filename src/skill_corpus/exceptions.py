"""Custom exceptions used across skill-corpus."""

from __future__ import annotations


class SkillCorpusError(Exception):
    """Base class for errors raised by skill-corpus."""


class CorpusRootError(SkillCorpusError, ValueError):
    """Raised when the corpus root is missing or is not a directory."""


class ConfigError(SkillCorpusError, ValueError):
    """Raised when a configuration value (argument or environment) is invalid."""


class MalformedFrontmatterError(SkillCorpusError, ValueError):
    """Raised when a document's YAML frontmatter cannot be parsed."""


__all__ = [
    "ConfigError",
    "CorpusRootError",
    "MalformedFrontmatterError",
    "SkillCorpusError",
]
