from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any

from ..models.fields import FieldKind, FieldSpec
from ..models.parsed_row import DUPLICATE_IN_FILE, ParsedRow
from ..services.entity_index import Entity, ExistingEntityIndex, key_text
from .base import EntityAttribute, EntityProfile

"""Product import profile.

Natural key: product code (trimmed, case-insensitive).
Alternate key: product name; a new product whose name already exists under
another code is rejected because the store does not enforce name uniqueness,
and so is a row repeating a name already used earlier in the same file.
Mandatory: code always, name and category for new products. An update row
may leave name / category blank to keep the stored values.
"""

__all__ = [
    "ProductProfile",
    "PRODUCT_HEADER_SYNONYMS",
]

PRODUCT_HEADER_SYNONYMS: dict[str, str] = {
    # English
    "name": "name",
    "product name": "name",
    "product": "name",
    "code": "code",
    "product code": "code",
    "sku": "code",
    "category": "category",
    "model": "category",
    "type": "category",
    "openingbalance": "opening_balance",
    "opening balance": "opening_balance",
    "opening_balance": "opening_balance",
    "opening stock": "opening_balance",
    "balance": "opening_balance",
    "chinese unit cost": "chinese_unit_cost",
    "unit cost (china)": "chinese_unit_cost",
    "inner box cost": "inner_box_cost",
    "outer carton cost": "outer_carton_cost",
    "carton cost": "outer_carton_cost",
    "units per carton": "units_per_carton",
    "selling price": "selling_price",
    "price": "selling_price",
    # Arabic
    "اسم المنتج": "name",
    "المنتج": "name",
    "الاسم": "name",
    "اسم": "name",
    "الكود": "code",
    "كود": "code",
    "كود المنتج": "code",
    "الفئة": "category",
    "فئة": "category",
    "الموديل": "category",
    "موديل": "category",
    "الفئة / الموديل": "category",
    "النوع": "category",
    "الرصيد الافتتاحي": "opening_balance",
    "رصيد افتتاحي": "opening_balance",
    "الرصيد": "opening_balance",
    "رصيد": "opening_balance",
    "تكلفة الوحدة الصينية": "chinese_unit_cost",
    "الوحدة الصينية": "chinese_unit_cost",
    "تكلفة صينية": "chinese_unit_cost",
    "تكلفة العلبة الداخلية": "inner_box_cost",
    "العلبة الداخلية": "inner_box_cost",
    "علبة داخلية": "inner_box_cost",
    "تكلفة الكرتونة الخارجية": "outer_carton_cost",
    "الكرتونة الخارجية": "outer_carton_cost",
    "تكلفة الكرتونة": "outer_carton_cost",
    "كرتونة": "outer_carton_cost",
    "عدد الوحدات في الكرتونة": "units_per_carton",
    "وحدات/كرتونة": "units_per_carton",
    "وحدات الكرتونة": "units_per_carton",
    "سعر البيع": "selling_price",
    "سعر بيع": "selling_price",
    "سعر": "selling_price",
}

_NUMERIC = (
    "opening_balance",
    "chinese_unit_cost",
    "inner_box_cost",
    "outer_carton_cost",
    "units_per_carton",
    "selling_price",
)


class ProductProfile(EntityProfile):
    kind = "products"
    sheet_label = "Products"
    raw_synonyms = PRODUCT_HEADER_SYNONYMS
    fields = (
        FieldSpec("name", FieldKind.TEXT, "name"),
        FieldSpec("code", FieldKind.TEXT, "code"),
        FieldSpec("category", FieldKind.TEXT, "category"),
        FieldSpec("opening_balance", FieldKind.NUMBER, "opening balance"),
        FieldSpec("chinese_unit_cost", FieldKind.NUMBER, "chinese unit cost"),
        FieldSpec("inner_box_cost", FieldKind.NUMBER, "inner box cost"),
        FieldSpec("outer_carton_cost", FieldKind.NUMBER, "outer carton cost"),
        FieldSpec("units_per_carton", FieldKind.NUMBER, "units per carton"),
        FieldSpec("selling_price", FieldKind.NUMBER, "selling price"),
    )
    attributes = (
        EntityAttribute("name", "name"),
        EntityAttribute("code", "code"),
        EntityAttribute("category", "category"),
        *(EntityAttribute(f, f.replace("_", " "), 0) for f in _NUMERIC),
    )

    def build_index(
        self, existing: Iterable[Entity], lookups: Mapping[str, Sequence[Entity]] | None = None
    ) -> ExistingEntityIndex:
        return ExistingEntityIndex.build(
            existing,
            natural_keys=lambda e: [k] if (k := key_text(e.get("code"))) else [],
            alternate_keys={"name": lambda e: [k] if (k := key_text(e.get("name"))) else []},
        )

    def match(self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex) -> Entity | None:
        return index.find(key_text(row.value("code")) or None)

    def seen_keys(self, row: ParsedRow, resolved: Mapping[str, Any]) -> frozenset[Hashable]:
        keys: set[Hashable] = set()
        if code := key_text(row.value("code")):
            keys.add(("code", code))
        # 名前もファイル内で一意 (ストア側は名前の一意性を保証しない)
        if name := key_text(row.value("name")):
            keys.add(("name", name))
        return frozenset(keys)

    def duplicate_errors(self, row: ParsedRow, repeated: frozenset[Hashable]) -> list[str]:
        if any(kind == "code" for kind, _ in repeated):
            return [DUPLICATE_IN_FILE]
        return [f'name "{row.value("name")}" repeated within file']

    def mandatory_errors(self, row: ParsedRow, matched: Entity | None) -> list[str]:
        errors: list[str] = []
        if matched is None and not row.is_present("name"):
            errors.append("name missing")
        if not row.is_present("code"):
            errors.append("code missing")
        if matched is None and not row.is_present("category"):
            errors.append("category missing")
        return errors

    def collision_errors(
        self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex
    ) -> list[str]:
        name = key_text(row.value("name"))
        other = index.find_alternate("name", name or None)
        if other is None:
            return []
        return [f'name "{row.value("name")}" already used by product "{other.get("code", "")}"']

    def value_warnings(self, row: ParsedRow) -> list[str]:
        warnings = []
        for spec in self.fields:
            if spec.kind is FieldKind.NUMBER and (row.value(spec.field_id) or 0) < 0:
                warnings.append(f"{spec.label} is negative")
        return warnings
