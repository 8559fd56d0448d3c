"""Configuration for corpus loading and validation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigError

ENV_CORPUS_ROOT = "CORPUS_ROOT"
ENV_READ_TIMEOUT = "CORPUS_READ_TIMEOUT"
ENV_MAX_CONCURRENCY = "CORPUS_MAX_CONCURRENCY"


@dataclass(frozen=True)
class CorpusConfig:
    """Settings shared by the loader, the validators and the CLI."""

    root: Path | None = None
    """Corpus root directory. The CLI falls back to ``CORPUS_ROOT`` when unset."""

    read_timeout: float = 5.0
    """Seconds allowed for a single file read before it is reported as a timeout."""

    max_concurrency: int = 16
    """Upper bound on files read at the same time."""

    include_hidden: bool = False
    """Load files under hidden directories (``.git``, ``.github`` ...)."""

    check_cycles: bool = False
    """Report link cycles in addition to broken links and frontmatter problems."""

    def __post_init__(self) -> None:
        if self.read_timeout <= 0:
            raise ConfigError(f"read_timeout must be > 0, got {self.read_timeout}")
        if self.max_concurrency < 1:
            raise ConfigError(
                f"max_concurrency must be >= 1, got {self.max_concurrency}"
            )

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> CorpusConfig:
        """Build a config from ``CORPUS_*`` environment variables.

        Keyword overrides whose value is not ``None`` win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        root = env.get(ENV_CORPUS_ROOT)
        if root:
            values["root"] = Path(root)
        timeout = env.get(ENV_READ_TIMEOUT)
        if timeout:
            values["read_timeout"] = _parse_number(ENV_READ_TIMEOUT, timeout, float)
        concurrency = env.get(ENV_MAX_CONCURRENCY)
        if concurrency:
            values["max_concurrency"] = _parse_number(
                ENV_MAX_CONCURRENCY, concurrency, int
            )

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]


def _parse_number(name: str, raw: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a {kind.__name__}, got {raw!r}") from exc


__all__ = [
    "CorpusConfig",
    "ENV_CORPUS_ROOT",
    "ENV_MAX_CONCURRENCY",
    "ENV_READ_TIMEOUT",
]
