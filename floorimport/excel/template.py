from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.datavalidation import DataValidation

"""Import template workbooks.

Layout:
- primary data-entry sheet "Data": header row + sample rows
- one reference sheet per non-empty lookup collection (Lines / Products /
  Employees), names in column A
- on the data sheet, columns backed by a reference sheet get a list
  validation pointing at that sheet's name range
"""

__all__ = [
    "TEMPLATE_HEADERS",
    "DATA_SHEET",
    "write_template",
]

DATA_SHEET = "Data"
VALIDATED_ROWS = 1000

TEMPLATE_HEADERS: dict[str, dict[str, list[str]]] = {
    "products": {
        "en": ["Name", "Code", "Category", "Opening Balance"],
        "ar": ["اسم المنتج", "الكود", "الفئة", "الرصيد الافتتاحي"],
    },
    "reports": {
        "en": ["Date", "Production Line", "Product", "Employee", "Quantity Produced", "Waste", "Workers Count", "Work Hours"],
        "ar": ["التاريخ", "خط الإنتاج", "المنتج", "الموظف", "الكمية المنتجة", "الهالك", "عدد العمال", "ساعات العمل"],
    },
}

_PRODUCT_SAMPLES: list[list[Any]] = [
    ["Motor H-400", "PRD-001", "Finished goods", 100],
    ["Valve V-200", "PRD-002", "Finished goods", 250],
    ["Raw sheet metal", "PRD-003", "Raw materials", 500],
]

# reports: data column index -> (lookup name, reference sheet title)
_REPORT_REFERENCES = {1: ("lines", "Lines"), 2: ("products", "Products"), 3: ("employees", "Employees")}


def _names(entities: Sequence[Mapping[str, Any]]) -> list[str]:
    return [str(e["name"]) for e in entities if e.get("name")]


def _report_samples(lookups: Mapping[str, Sequence[Mapping[str, Any]]]) -> list[list[Any]]:
    line = (_names(lookups.get("lines", ())) or ["Line 1"])[0]
    product = (_names(lookups.get("products", ())) or ["Product A"])[0]
    employee = (_names(lookups.get("employees", ())) or ["Employee A"])[0]
    return [
        ["2026-02-16", line, product, employee, 500, 10, 8, 8],
        ["2026-02-17", line, product, employee, 450, 8, 8, 8],
    ]


def write_template(
    path: Path,
    kind: str,
    lookups: Mapping[str, Sequence[Mapping[str, Any]]] | None = None,
    *,
    locale: str = "en",
) -> Path:
    """Write an import template for ``kind`` (products | reports) to ``path``."""
    if kind not in TEMPLATE_HEADERS:
        raise ValueError(f"unknown import kind: {kind!r}")
    headers = TEMPLATE_HEADERS[kind].get(locale)
    if headers is None:
        raise ValueError(f"unknown template locale: {locale!r}")
    lookups = lookups or {}

    samples = _PRODUCT_SAMPLES if kind == "products" else _report_samples(lookups)
    references = {} if kind == "products" else _REPORT_REFERENCES

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(samples, columns=headers).to_excel(writer, sheet_name=DATA_SHEET, index=False)
        data_ws = writer.sheets[DATA_SHEET]
        for i, header in enumerate(headers, start=1):
            data_ws.column_dimensions[get_column_letter(i)].width = max(14, len(header) + 4)

        for col_idx, (lookup_name, sheet_title) in references.items():
            names = _names(lookups.get(lookup_name, ()))
            if not names:
                continue
            pd.DataFrame({"name": names}).to_excel(writer, sheet_name=sheet_title, index=False)
            col = get_column_letter(col_idx + 1)
            dv = DataValidation(
                type="list",
                formula1=f"='{sheet_title}'!$A$2:$A${len(names) + 1}",
                allow_blank=True,
                showErrorMessage=True,
            )
            dv.add(f"{col}2:{col}{VALIDATED_ROWS}")
            data_ws.add_data_validation(dv)
    return path
