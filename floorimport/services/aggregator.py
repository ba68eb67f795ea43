from __future__ import annotations

from collections.abc import Iterable

from ..models.import_result import ImportResult
from ..models.parsed_row import ParsedRow, RowAction

"""Validation aggregator: pure reduction of parsed rows into an ImportResult.

Deterministic and idempotent: the same row sequence always yields the same
counts, and ``valid_count + error_count == total_rows``.
"""


def aggregate(rows: Iterable[ParsedRow]) -> ImportResult:
    """Fold reconciled rows into summary counts (row order is preserved)."""
    ordered = list(rows)
    valid = [r for r in ordered if r.is_valid]
    return ImportResult(
        rows=ordered,
        total_rows=len(ordered),
        valid_count=len(valid),
        error_count=len(ordered) - len(valid),
        new_count=sum(1 for r in valid if r.action is RowAction.NEW),
        update_count=sum(1 for r in valid if r.action is RowAction.UPDATE),
        duplicate_count=sum(1 for r in ordered if r.is_duplicate),
        warning_count=sum(1 for r in ordered if r.warnings),
    )
