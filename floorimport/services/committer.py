from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.import_result import CommitOutcome, CommitProgress
from ..models.parsed_row import ParsedRow, RowAction

"""Batch committer: apply validated rows against an injected persistence API.

Rows are written strictly one after another (never concurrently) so that
ordering is preserved, the backing store is not flooded and progress is
monotonic. A failure of one row is caught, counted and logged; it never
aborts the loop. Once started, a batch always runs to completion.

``update`` returning ``False`` is counted as a failure (the store reported
that nothing was updated); ``None`` / ``True`` are successes.
"""

__all__ = [
    "CreateFn",
    "UpdateFn",
    "ProgressFn",
    "commit_rows",
]

logger = logging.getLogger(__name__)

CreateFn = Callable[[dict[str, Any]], Awaitable[Any]]
UpdateFn = Callable[[str, dict[str, Any]], Awaitable[Any]]
ProgressFn = Callable[[CommitProgress], None]


def _check_committable(rows: Sequence[ParsedRow]) -> None:
    for row in rows:
        if row.errors:
            raise ValueError(f"row {row.row_index} has errors and cannot be committed")
        if row.action is RowAction.UPDATE and not row.matched_id:
            raise ValueError(f"row {row.row_index} is an update without a matched id")


async def commit_rows(
    rows: Sequence[ParsedRow],
    create: CreateFn,
    update: UpdateFn,
    *,
    on_progress: ProgressFn | None = None,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
    sheet_name: str = "",
) -> CommitOutcome:
    """Commit valid rows sequentially and report added / updated / failed.

    Raises:
        ValueError: a row with errors (or an update row without matched id)
            was passed in; raised before anything is written
    """
    rows = list(rows)
    _check_committable(rows)

    total = len(rows)
    done = added = updated = failed = 0
    for row in rows:
        try:
            if row.action is RowAction.NEW:
                await create(dict(row.payload))
                added += 1
            else:
                result = await update(row.matched_id, dict(row.payload))  # type: ignore[arg-type]
                if result is False:
                    raise RuntimeError(f"entity {row.matched_id} was not updated")
                updated += 1
        except Exception as e:
            failed += 1
            logger.warning(f"row {row.row_index}: {row.action.value} failed: {e}")
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(
                        file=file_name,
                        sheet=sheet_name,
                        row=row.row_index,
                        error_type="COMMIT_FAILED",
                        message=str(e) or type(e).__name__,
                    )
                )
        done += 1
        if on_progress is not None:
            on_progress(CommitProgress(done=done, total=total))

    outcome = CommitOutcome(total=total, done=done, added=added, updated=updated, failed=failed)
    if outcome.batch_failed:
        logger.error(f"all {done} rows failed during commit")
    return outcome
