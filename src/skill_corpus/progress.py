"""Utilities for displaying corpus load progress in the terminal."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

DEFAULT_PROGRESS_COLUMNS = (
    SpinnerColumn(),
    TextColumn("[progress.description]{task.description}"),
    BarColumn(bar_width=None),
    TaskProgressColumn(),
    TextColumn("{task.completed}/{task.total} files"),
    TimeElapsedColumn(),
)


@dataclass
class LoadProgress:
    """Context manager that renders a Rich progress bar while files are read."""

    total: int
    description: str
    enabled: bool = False
    transient: bool = True

    _progress: Progress | None = field(init=False, default=None, repr=False)
    _task_id: TaskID | None = field(init=False, default=None, repr=False)
    _context: AbstractContextManager[Any] | None = field(
        init=False, default=None, repr=False
    )

    def __enter__(self) -> "LoadProgress":
        if not self.enabled:
            return self

        self._progress = Progress(
            *DEFAULT_PROGRESS_COLUMNS,
            transient=self.transient,
        )
        self._context = self._progress
        self._context.__enter__()
        self._task_id = self._progress.add_task(
            self.description,
            total=self.total,
        )
        return self

    def update(
        self,
        completed: int,
        *,
        current_path: str | None = None,
        problems: int | None = None,
    ) -> None:
        """Update the bar with the number of files done and the latest path."""
        if self._progress is None or self._task_id is None:
            return
        capped = completed if completed <= self.total else self.total
        self._progress.update(
            self._task_id,
            completed=capped,
            description=self._format_description(
                current_path=current_path, problems=problems
            ),
        )

    def _format_description(
        self, *, current_path: str | None, problems: int | None
    ) -> str:
        description = self.description
        if current_path:
            description = f"{description} ({current_path})"
        if problems:
            description = f"{description} | problems: {problems}"
        return description

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._context is None:
            return False
        return bool(self._context.__exit__(exc_type, exc, tb))


__all__ = ["LoadProgress"]
