from __future__ import annotations

from dataclasses import dataclass, field

from .parsed_row import ParsedRow

"""Aggregate result models for the import preview and the commit step.

ImportResult is the validation/preview output shown before commit.
CommitProgress is transient (never persisted) and CommitOutcome is what the
batch committer reports once every row has been attempted.
"""

__all__ = [
    "CommitOutcome",
    "CommitProgress",
    "ImportResult",
]


@dataclass(frozen=True)
class ImportResult:
    """Ordered parsed rows plus summary counts."""
    rows: list[ParsedRow] = field(default_factory=list)
    total_rows: int = 0
    valid_count: int = 0  # エラー 0 件の行
    error_count: int = 0
    new_count: int = 0  # valid かつ action=new
    update_count: int = 0  # valid かつ action=update
    duplicate_count: int = 0
    warning_count: int = 0  # 警告を 1 件以上持つ行

    @classmethod
    def empty(cls) -> ImportResult:
        """'Nothing found' outcome used for empty or unreadable files."""
        return cls()

    @property
    def valid_rows(self) -> list[ParsedRow]:
        return [r for r in self.rows if r.is_valid]

    @property
    def can_commit(self) -> bool:
        return self.valid_count > 0


@dataclass(frozen=True)
class CommitProgress:
    done: int
    total: int


@dataclass(frozen=True)
class CommitOutcome:
    """Result of a sequential batch commit.

    ``batch_failed`` is true only when every attempted row failed; a batch
    with nothing to do is neither failed nor partial.
    """
    total: int
    done: int
    added: int
    updated: int
    failed: int

    @property
    def added_or_updated_rows(self) -> int:
        return self.done - self.failed

    @property
    def failed_rows(self) -> int:
        return self.failed

    @property
    def batch_failed(self) -> bool:
        return self.done > 0 and self.failed == self.done

    @property
    def status(self) -> str:
        if self.batch_failed:
            return "failed"
        if self.failed > 0:
            return "partial"
        return "ok"
