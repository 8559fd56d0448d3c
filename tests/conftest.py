from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import logfire
import pytest


@pytest.fixture(scope='session', autouse=True)
def _configure_logfire() -> None:
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(scope='session')
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def write_doc(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a UTF-8 document under ``tmp_path`` and return its path."""

    def _write(rel_path: str, text: str) -> Path:
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding='utf-8')
        return path

    return _write