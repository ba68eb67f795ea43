from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from ..excel.headers import build_header_mapping
from ..excel.reader import ReadError, SheetData, read_first_sheet, sheet_from_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.import_result import CommitOutcome, ImportResult
from ..profiles import EntityProfile, get_profile
from .aggregator import aggregate
from .committer import CreateFn, ProgressFn, UpdateFn, commit_rows
from .entity_index import Entity
from .reconciler import reconcile_rows
from .row_parser import parse_row

"""Import orchestration: file -> ImportResult, ImportResult -> commit.

parse side (pure with respect to persistence):
    read first sheet -> header mapping -> parse rows -> reconcile against a
    freshly built index -> aggregate
commit side:
    valid rows -> sequential batch commit through injected create / update

The parse boundary never raises for file content: an unreadable workbook or
a sheet without data rows yields an empty ImportResult ("nothing found").
"""

__all__ = [
    "parse_file",
    "parse_sheet",
    "parse_table",
    "commit_result",
]

logger = logging.getLogger(__name__)


def parse_sheet(
    sheet: SheetData,
    existing: Iterable[Entity],
    kind: str | EntityProfile,
    lookups: Mapping[str, Sequence[Entity]] | None = None,
    *,
    number_policy: str = "warn",
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
) -> ImportResult:
    """Parse and reconcile an already-read sheet."""
    profile = get_profile(kind)
    mapping = build_header_mapping(sheet.headers, profile.synonyms)
    unmatched = [h for h in sheet.headers if h and h not in mapping]
    if unmatched:
        logger.debug(f"{file_name or sheet.sheet_name}: ignoring columns {unmatched}")

    parsed = []
    for position, raw in sheet.data_rows():
        row = parse_row(raw, mapping, position, profile.fields, number_policy=number_policy)
        if profile.skip_row(row):
            continue
        parsed.append(row)

    # 既存エンティティの索引はインポート試行ごとに作り直す
    index = profile.build_index(existing, lookups)
    result = aggregate(reconcile_rows(parsed, index, profile))

    if error_log is not None:
        for row in result.rows:
            if row.errors:
                error_log.append(
                    ErrorRecord.create(
                        file=file_name,
                        sheet=sheet.sheet_name,
                        row=row.row_index,
                        error_type="ROW_REJECTED",
                        message="; ".join(row.errors),
                    )
                )
    return result


def parse_table(
    headers: Sequence[Any],
    rows: Iterable[Sequence[Any]],
    existing: Iterable[Entity],
    kind: str | EntityProfile,
    lookups: Mapping[str, Sequence[Entity]] | None = None,
    *,
    number_policy: str = "warn",
) -> ImportResult:
    """Parse in-memory rows (header list + value rows) like a first sheet."""
    header_texts = ["" if h is None else str(h) for h in headers]
    sheet = sheet_from_rows("Sheet1", header_texts, rows)
    return parse_sheet(sheet, existing, kind, lookups, number_policy=number_policy)


def parse_file(
    path: Path,
    existing: Iterable[Entity],
    kind: str | EntityProfile,
    lookups: Mapping[str, Sequence[Entity]] | None = None,
    *,
    number_policy: str = "warn",
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Read the first sheet of ``path`` and build the import preview.

    Never raises for unreadable or unparseable files; those produce an empty
    ImportResult (and a FILE_UNREADABLE error-log record when a buffer is given).
    """
    path = Path(path)
    profile = get_profile(kind)
    try:
        sheet = read_first_sheet(path)
    except ReadError as e:
        logger.warning(f"{path.name}: {e}")
        if error_log is not None:
            error_log.append(ErrorRecord.create(path.name, "<FILE_LEVEL>", -1, "FILE_UNREADABLE", str(e)))
        return ImportResult.empty()

    result = parse_sheet(
        sheet,
        existing,
        profile,
        lookups,
        number_policy=number_policy,
        error_log=error_log,
        file_name=path.name,
    )
    logger.info(
        f"{path.name}: {result.total_rows} rows, {result.valid_count} valid, {result.error_count} with errors"
    )
    return result


async def commit_result(
    result: ImportResult,
    create: CreateFn,
    update: UpdateFn,
    *,
    on_progress: ProgressFn | None = None,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
) -> CommitOutcome:
    """Commit the valid rows of a preview; rows with errors are left out."""
    return await commit_rows(
        result.valid_rows,
        create,
        update,
        on_progress=on_progress,
        error_log=error_log,
        file_name=file_name,
    )
