from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any

from ..models.fields import FieldKind, FieldSpec
from ..models.parsed_row import ParsedRow
from ..services.entity_index import Entity, ExistingEntityIndex, ReferenceLookup, key_text
from .base import EntityAttribute, EntityProfile

"""Production report import profile.

A report is identified by its report code when the row carries one, and
otherwise by its slot: date + production line + employee. Line, product and
employee names are resolved to ids through reference lookups; an unknown
name is a row error.

When a row's report code is new but its slot is already taken by a stored
report under a different code, the row is rejected: the store would accept
it and end up with two reports for one slot.
"""

__all__ = [
    "ReportProfile",
    "REPORT_HEADER_SYNONYMS",
    "TOTAL_ROW_MARKERS",
]

REPORT_HEADER_SYNONYMS: dict[str, str] = {
    # English
    "report code": "report_code",
    "report no": "report_code",
    "date": "date",
    "line": "line_name",
    "production line": "line_name",
    "product": "product_name",
    "employee": "employee_name",
    "supervisor": "employee_name",
    "worker": "employee_name",
    "quantity produced": "quantity_produced",
    "produced": "quantity_produced",
    "quantity": "quantity_produced",
    "waste": "quantity_waste",
    "quantity waste": "quantity_waste",
    "workers": "workers_count",
    "workers count": "workers_count",
    "work hours": "work_hours",
    "hours": "work_hours",
    # Arabic
    "كود التقرير": "report_code",
    "التاريخ": "date",
    "تاريخ": "date",
    "خط الإنتاج": "line_name",
    "خط الانتاج": "line_name",
    "الخط": "line_name",
    "المنتج": "product_name",
    "منتج": "product_name",
    "الموظف": "employee_name",
    "موظف": "employee_name",
    "المشرف": "employee_name",
    "مشرف": "employee_name",
    "الكمية المنتجة": "quantity_produced",
    "كمية الانتاج": "quantity_produced",
    "كمية الإنتاج": "quantity_produced",
    "الكمية": "quantity_produced",
    "الهالك": "quantity_waste",
    "هالك": "quantity_waste",
    "عدد العمال": "workers_count",
    "العمال": "workers_count",
    "عمال": "workers_count",
    "ساعات العمل": "work_hours",
    "ساعات": "work_hours",
}

# 合計行 (日付列に "الإجمالي" 等) はデータ行として扱わない
TOTAL_ROW_MARKERS = frozenset({"total", "totals", "الإجمالي", "الاجمالي"})

MAX_WORK_HOURS = 24

# reference lookup name -> (row field, entity attribute, lookup label)
_REFERENCES = (
    ("lines", "line_name", "line_id", "line"),
    ("products", "product_name", "product_id", "product"),
    ("employees", "employee_name", "employee_id", "employee"),
)


def _slot(date: Any, line_id: Any, employee_id: Any) -> tuple[str, str, str, str] | None:
    parts = (key_text(date), key_text(line_id), key_text(employee_id))
    if not all(parts):
        return None
    return ("slot", *parts)


def _code(value: Any) -> tuple[str, str] | None:
    k = key_text(value)
    return ("code", k) if k else None


class ReportProfile(EntityProfile):
    kind = "reports"
    sheet_label = "Reports"
    raw_synonyms = REPORT_HEADER_SYNONYMS
    fields = (
        FieldSpec("report_code", FieldKind.TEXT, "report code"),
        FieldSpec("date", FieldKind.DATE, "date"),
        FieldSpec("line_name", FieldKind.TEXT, "line"),
        FieldSpec("product_name", FieldKind.TEXT, "product"),
        FieldSpec("employee_name", FieldKind.TEXT, "employee"),
        FieldSpec("quantity_produced", FieldKind.NUMBER, "quantity produced"),
        FieldSpec("quantity_waste", FieldKind.NUMBER, "waste"),
        FieldSpec("workers_count", FieldKind.NUMBER, "workers count"),
        FieldSpec("work_hours", FieldKind.NUMBER, "work hours"),
    )
    attributes = (
        EntityAttribute("report_code", "report code"),
        EntityAttribute("date", "date"),
        EntityAttribute("line_id", "line"),
        EntityAttribute("product_id", "product"),
        EntityAttribute("employee_id", "employee"),
        EntityAttribute("quantity_produced", "quantity produced", 0),
        EntityAttribute("quantity_waste", "waste", 0),
        EntityAttribute("workers_count", "workers count", 0),
        EntityAttribute("work_hours", "work hours", 0),
    )

    def build_index(
        self, existing: Iterable[Entity], lookups: Mapping[str, Sequence[Entity]] | None = None
    ) -> ExistingEntityIndex:
        lookups = dict(lookups or {})
        if "employees" not in lookups and "supervisors" in lookups:
            lookups["employees"] = lookups["supervisors"]
        references = {
            "lines": ReferenceLookup.build("lines", lookups.get("lines", ())),
            "products": ReferenceLookup.build("products", lookups.get("products", ()), code_field="code"),
            "employees": ReferenceLookup.build(
                "employees", lookups.get("employees", ()), code_field="code"
            ),
        }

        def natural_keys(e: Entity) -> list[Hashable]:
            keys = [_code(e.get("report_code")), _slot(e.get("date"), e.get("line_id"), e.get("employee_id"))]
            return [k for k in keys if k is not None]

        return ExistingEntityIndex.build(
            existing,
            natural_keys=natural_keys,
            alternate_keys={
                "slot": lambda e: [k] if (k := _slot(e.get("date"), e.get("line_id"), e.get("employee_id"))) else []
            },
            references=references,
        )

    def skip_row(self, row: ParsedRow) -> bool:
        return key_text(row.value("date")) in TOTAL_ROW_MARKERS

    def resolve(self, row: ParsedRow, index: ExistingEntityIndex) -> tuple[dict[str, Any], list[str]]:
        resolved: dict[str, Any] = {}
        errors: list[str] = []
        for attr in ("report_code", "date", "quantity_produced", "quantity_waste", "workers_count", "work_hours"):
            if row.is_present(attr):
                resolved[attr] = row.value(attr)
        for lookup_name, field_id, attr, label in _REFERENCES:
            if not row.is_present(field_id):
                continue
            name = row.value(field_id)
            entity = index.reference(lookup_name).find(name)
            if entity is None:
                errors.append(f'{label} "{name}" not found')
            else:
                resolved[attr] = entity.get("id")
        return resolved, errors

    def match(self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex) -> Entity | None:
        code = _code(resolved.get("report_code"))
        if code is not None:
            return index.find(code)
        return index.find(self._row_slot(resolved))

    def seen_keys(self, row: ParsedRow, resolved: Mapping[str, Any]) -> frozenset[Hashable]:
        keys = {_code(resolved.get("report_code")), self._row_slot(resolved)}
        keys.discard(None)
        return frozenset(keys)

    def mandatory_errors(self, row: ParsedRow, matched: Entity | None) -> list[str]:
        if matched is not None:
            return []
        errors = []
        if not row.is_present("date"):
            errors.append("date missing")
        for _, field_id, _, label in _REFERENCES:
            if not row.is_present(field_id):
                errors.append(f"{label} missing")
        return errors

    def collision_errors(
        self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex
    ) -> list[str]:
        if _code(resolved.get("report_code")) is None:
            return []
        other = index.find_alternate("slot", self._row_slot(resolved))
        if other is None:
            return []
        return [
            f'a report for {resolved.get("date")} on this line and employee already exists'
            f' as "{other.get("report_code", "")}"'
        ]

    def value_errors(self, row: ParsedRow, matched: Entity | None) -> list[str]:
        errors = []
        checks = (
            ("quantity_produced", "quantity produced must be greater than 0"),
            ("workers_count", "workers count must be greater than 0"),
            ("work_hours", "work hours must be greater than 0"),
        )
        for field_id, message in checks:
            # 更新行は列が空なら既存値を維持
            if matched is not None and not row.is_present(field_id):
                continue
            if (row.value(field_id) or 0) <= 0:
                errors.append(message)
        return errors

    def value_warnings(self, row: ParsedRow) -> list[str]:
        warnings = []
        produced = row.value("quantity_produced") or 0
        waste = row.value("quantity_waste") or 0
        if waste < 0:
            warnings.append("waste is negative")
        if produced > 0 and waste > produced:
            warnings.append(f"waste ({waste}) exceeds quantity produced ({produced})")
        hours = row.value("work_hours") or 0
        if hours > MAX_WORK_HOURS:
            warnings.append(f"work hours ({hours}) exceed {MAX_WORK_HOURS}")
        return warnings

    @staticmethod
    def _row_slot(resolved: Mapping[str, Any]) -> tuple[str, str, str, str] | None:
        return _slot(resolved.get("date"), resolved.get("line_id"), resolved.get("employee_id"))
