from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

"""Workbook reader for spreadsheet imports.

Only the first sheet of a workbook is read. Row 1 is the header row, rows 2+
are data rows. Cells are read as raw objects (no dtype inference) so that
codes like "007" and strings like "NA" survive the round trip; blank cells
become ``None``.
"""

__all__ = [
    "ReadError",
    "WorkbookReadError",
    "SheetHeaderError",
    "SheetData",
    "read_first_sheet",
    "normalize_sheet",
    "sheet_from_rows",
    "is_blank",
]


class ReadError(Exception):
    """Base class for file-level read failures."""


class WorkbookReadError(ReadError):
    """Raised when the file cannot be opened as a workbook."""


class SheetHeaderError(ReadError):
    """Raised when the header row (1st line) is missing."""


RawRow = dict[str, Any]


@dataclass
class SheetData:
    sheet_name: str
    headers: list[str]
    # 0 始まりのデータ行位置と行内容。空行は None (位置は保持)
    rows: list[RawRow | None] = field(default_factory=list)

    def data_rows(self) -> list[tuple[int, RawRow]]:
        """Non-blank data rows with their zero-based position."""
        return [(pos, row) for pos, row in enumerate(self.rows) if row is not None]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def read_first_sheet(path: Path) -> SheetData:
    """Read the first sheet of ``path`` and split header / data rows.

    Raises:
        WorkbookReadError: file missing or not a readable workbook
        SheetHeaderError: workbook has no rows at all
    """
    if not path.exists():
        raise WorkbookReadError(f"file not found: {path}")
    try:
        xls = pd.ExcelFile(path)
        if not xls.sheet_names:
            raise SheetHeaderError(f"workbook '{path.name}' has no sheets")
        sheet_name = str(xls.sheet_names[0])
        # keep_default_na=False: "NA" / "N/A" 等の文字列を NaN に変換しない
        df = xls.parse(
            xls.sheet_names[0], header=None, dtype=object, keep_default_na=False, na_values=[]
        )
    except ReadError:
        raise
    except Exception as e:
        raise WorkbookReadError(f"cannot read workbook '{path.name}': {e}") from e
    return normalize_sheet(df, sheet_name)


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Use the first row of a raw DataFrame as header, the rest as data rows.

    Fully blank rows are kept as ``None`` placeholders so that positions keep
    matching spreadsheet row numbers.
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    headers = ["" if is_blank(c) else str(c) for c in df.iloc[0].tolist()]
    return sheet_from_rows(sheet_name, headers, (raw.tolist() for _, raw in df.iloc[1:].iterrows()))


def sheet_from_rows(sheet_name: str, headers: list[str], rows: Any) -> SheetData:
    """Build SheetData from a header list and row value sequences.

    Duplicate header texts keep the first column's value.
    """
    data: list[RawRow | None] = []
    for values in rows:
        values = list(values)
        if all(is_blank(v) for v in values):
            data.append(None)
            continue
        row: RawRow = {}
        for col, val in zip(headers, values, strict=False):
            if col == "" or col in row:
                continue
            row[col] = None if is_blank(val) else val
        data.append(row)
    return SheetData(sheet_name=sheet_name, headers=headers, rows=data)
