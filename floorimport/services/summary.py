from __future__ import annotations

from ..models.import_result import CommitOutcome, ImportResult
from ..models.parsed_row import ParsedRow, RowAction

"""Summary line rendering for preview and commit output.

Formats:
    PREVIEW rows={total} valid={valid} errors={errors} new={new} update={update}
        duplicates={duplicates} warnings={warnings}
    SUMMARY rows={total} added={added} updated={updated} failed={failed} status={ok|partial|failed}
"""

__all__ = [
    "render_preview_line",
    "render_commit_line",
    "render_row_status",
]


def render_preview_line(result: ImportResult) -> str:
    """Render the PREVIEW line for an ImportResult.

    Examples:
        >>> render_preview_line(ImportResult())
        'PREVIEW rows=0 valid=0 errors=0 new=0 update=0 duplicates=0 warnings=0'
    """
    return (
        f"PREVIEW rows={result.total_rows} "
        f"valid={result.valid_count} "
        f"errors={result.error_count} "
        f"new={result.new_count} "
        f"update={result.update_count} "
        f"duplicates={result.duplicate_count} "
        f"warnings={result.warning_count}"
    )


def render_commit_line(outcome: CommitOutcome) -> str:
    """Render the SUMMARY line for a finished commit.

    Examples:
        >>> render_commit_line(CommitOutcome(total=3, done=3, added=1, updated=1, failed=1))
        'SUMMARY rows=3 added=1 updated=1 failed=1 status=partial'
    """
    return (
        f"SUMMARY rows={outcome.done} "
        f"added={outcome.added} "
        f"updated={outcome.updated} "
        f"failed={outcome.failed} "
        f"status={outcome.status}"
    )


def render_row_status(row: ParsedRow) -> str:
    """One preview line per row: row number, classification and messages."""
    if row.errors:
        status = f"ERROR ({row.action.value})"
        detail = "; ".join(row.errors)
    elif row.action is RowAction.UPDATE:
        status = "UPDATE"
        detail = "; ".join(row.describe_changes()) if row.changes else "no changes"
    else:
        status = "NEW"
        detail = ""
    line = f"row {row.row_index}: {status}"
    if detail:
        line += f" - {detail}"
    if row.warnings:
        line += f" [warnings: {'; '.join(row.warnings)}]"
    return line
