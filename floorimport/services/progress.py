from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.import_result import CommitProgress

"""Commit progress display with tqdm (TTY only).

A single tqdm bar per commit; disabled in non-TTY environments (CI, pipes)
to avoid ANSI control sequence spam. The tracker is itself a valid
``on_progress`` callback for the batch committer.
"""

__all__ = [
    "CommitProgressBar",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class CommitProgressBar:
    """Row-level progress bar fed by CommitProgress events."""

    def __init__(self, total_rows: int, *, description: str = "Saving rows", enabled: bool | None = None) -> None:
        self.total_rows = total_rows
        self.description = description
        self.done = 0

        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, progress: CommitProgress) -> None:
        # done は単調増加 (committer が 1 行ずつ通知)
        step = progress.done - self.done
        self.done = progress.done
        if self.pbar is not None and step > 0:
            self.pbar.update(step)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> CommitProgressBar:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
