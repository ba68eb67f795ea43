from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from ..excel.reader import is_blank
from ..models.fields import ABSENT, FieldKind, FieldSpec, FieldValue, Present
from ..models.parsed_row import ParsedRow

"""Row parser: one raw row + header mapping -> typed ParsedRow.

Rules:
- row_index = zero-based data position + 2 (1-based row, header row offset)
- text fields are trimmed; blank cells and missing columns are ABSENT
- numeric fields parse to int/float; an unparseable cell becomes 0 and, with
  the default ``warn`` policy, a warning (never an exception)
- date fields normalize to YYYY-MM-DD; an unrecognizable date is an error
- mandatory-field checks are left to the reconciler
"""

__all__ = [
    "NUMBER_POLICIES",
    "parse_row",
    "parse_number",
    "parse_date",
]

NUMBER_POLICIES = ("warn", "zero")

# Excel 1900 date system epoch (serial 1 == 1900-01-01, with the 1900 leap bug)
_EXCEL_EPOCH = datetime(1899, 12, 30)
_MAX_EXCEL_SERIAL = 2958465  # 9999-12-31
_ISO_DATE = re.compile(r"^(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})$")
_DMY_DATE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
# アラビア・インド数字 -> ASCII
_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹", "01234567890123456789")


def parse_number(raw: Any) -> tuple[int | float, bool]:
    """Parse a numeric cell.

    Returns:
        (value, ok) where ``ok`` is False when the cell could not be parsed
        and ``value`` fell back to 0
    """
    if isinstance(raw, bool):
        return int(raw), True
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            return 0, False
        return _tidy_number(raw), True
    text = str(raw).strip().translate(_DIGITS).replace(",", "").replace("٬", "")
    try:
        value = float(text)
    except ValueError:
        return 0, False
    if not math.isfinite(value):
        return 0, False
    return _tidy_number(value), True


def _tidy_number(value: int | float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_date(raw: Any) -> str | None:
    """Normalize a date cell to ``YYYY-MM-DD``; None when unrecognizable."""
    if isinstance(raw, (datetime, pd.Timestamp)):
        return raw.strftime("%Y-%m-%d")
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        # 20260216 のような yyyymmdd 数値はシリアル値の範囲外
        if not math.isfinite(raw) or raw <= 0 or raw > _MAX_EXCEL_SERIAL:
            return None
        try:
            return (_EXCEL_EPOCH + timedelta(days=int(raw))).strftime("%Y-%m-%d")
        except (OverflowError, ValueError):
            return None
    text = str(raw).strip().translate(_DIGITS)
    # "2026-02-16 00:00:00" のような日時文字列は日付部分のみ使用
    text = text.split(" ")[0].split("T")[0]
    m = _ISO_DATE.match(text)
    if m:
        y, mo, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = _DMY_DATE.match(text)
        if not m:
            return None
        d, mo, y = int(m.group(1)), int(m.group(2)), int(m.group(3))
    try:
        return date(y, mo, d).isoformat()
    except ValueError:
        return None


def parse_row(
    raw: Mapping[str, Any],
    mapping: Mapping[str, str],
    position: int,
    fields: Sequence[FieldSpec],
    *,
    number_policy: str = "warn",
) -> ParsedRow:
    """Convert one raw row into a ParsedRow. Never raises on cell content."""
    if number_policy not in NUMBER_POLICIES:
        raise ValueError(f"unknown number policy: {number_policy}")

    # field id -> raw header (mapping は先勝ち済み)
    header_for = {field_id: header for header, field_id in mapping.items()}

    values: dict[str, FieldValue] = {}
    errors: list[str] = []
    warnings: list[str] = []
    for spec in fields:
        header = header_for.get(spec.field_id)
        cell = raw.get(header) if header is not None else None
        if is_blank(cell):
            values[spec.field_id] = ABSENT
            continue
        if spec.kind is FieldKind.NUMBER:
            number, ok = parse_number(cell)
            if not ok and number_policy == "warn":
                warnings.append(f"{spec.label}: unparseable number {str(cell).strip()!r} read as 0")
            values[spec.field_id] = Present(number)
        elif spec.kind is FieldKind.DATE:
            parsed = parse_date(cell)
            if parsed is None:
                # 元の文字列を保持 (必須チェックで "missing" を重複報告しない)
                errors.append(f"invalid date {str(cell).strip()!r}")
                values[spec.field_id] = Present(str(cell).strip())
            else:
                values[spec.field_id] = Present(parsed)
        else:
            text = _as_text(cell)
            values[spec.field_id] = Present(text) if text else ABSENT

    return ParsedRow(row_index=position + 2, values=values, errors=errors, warnings=warnings)


def _as_text(cell: Any) -> str:
    # 数値セルのコード (例: 1001.0) は整数表記に戻す
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()
