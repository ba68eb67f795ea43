from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Field-level value model for spreadsheet imports.

Each canonical field of a row is carried as a tagged outcome before coercion:
``Present(value)`` when the sheet supplied a non-blank cell, ``ABSENT`` when the
column is missing or the cell is blank. This keeps "blank", "zero" and
"unparseable" distinguishable until the reconciler decides what they mean.
"""

__all__ = [
    "ABSENT",
    "Absent",
    "FieldKind",
    "FieldSpec",
    "FieldValue",
    "Present",
]


class FieldKind(Enum):
    """Coercion applied by the row parser."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


@dataclass(frozen=True)
class FieldSpec:
    """Canonical field definition (field id + coercion + display label)."""
    field_id: str
    kind: FieldKind
    label: str  # 表示用ラベル (変更点の説明に使用)

    @property
    def default(self) -> Any:
        return 0 if self.kind is FieldKind.NUMBER else ""


@dataclass(frozen=True)
class Present:
    value: Any

    @property
    def is_present(self) -> bool:
        return True


class Absent:
    """Singleton marker for a blank or missing cell."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def is_present(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()

FieldValue = Present | Absent
