from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .fields import ABSENT, FieldValue, Present

"""ParsedRow model: one spreadsheet row after parsing and reconciliation.

The row parser produces a ParsedRow with coerced values and parse-level
warnings; the reconciler returns a copy carrying the classification
(action / matched_id / changes), the row errors and the commit payload.
"""

__all__ = [
    "DUPLICATE_IN_FILE",
    "FieldChange",
    "ParsedRow",
    "RowAction",
]

DUPLICATE_IN_FILE = "duplicate within file"


class RowAction(Enum):
    """Tentative classification of a row (kept even when the row has errors)."""
    NEW = "new"
    UPDATE = "update"


@dataclass(frozen=True)
class FieldChange:
    """One differing field between an incoming row and the matched entity."""
    field_id: str
    label: str
    old: Any
    new: Any

    def describe(self) -> str:
        return f"{self.label}: {self.old} → {self.new}"


@dataclass(frozen=True)
class ParsedRow:
    """Typed, partially-validated record for one data row.

    Attributes:
        row_index: 1-based spreadsheet row number (header row counted)
        values: canonical field id -> Present(value) | ABSENT
        errors: blocking messages; any error excludes the row from commit
        warnings: non-blocking data-quality notes
        action: new / update (tentative for rows with errors)
        matched_id: id of the existing entity (update rows only)
        changes: differing fields (update rows only, may be empty)
        payload: entity data sent to create() (full) or update() (partial)
        is_duplicate: row collided with an existing entity or an earlier row
    """
    row_index: int
    values: dict[str, FieldValue]
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    action: RowAction = RowAction.NEW
    matched_id: str | None = None
    changes: list[FieldChange] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)
    is_duplicate: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def changed_fields(self) -> list[str]:
        return [c.field_id for c in self.changes]

    @property
    def has_no_changes(self) -> bool:
        """Update row whose incoming values equal the stored entity."""
        return self.action is RowAction.UPDATE and not self.changes

    def is_present(self, field_id: str) -> bool:
        return self.values.get(field_id, ABSENT).is_present

    def value(self, field_id: str, default: Any = None) -> Any:
        fv = self.values.get(field_id, ABSENT)
        if isinstance(fv, Present):
            return fv.value
        return default

    def describe_changes(self) -> list[str]:
        return [c.describe() for c in self.changes]
