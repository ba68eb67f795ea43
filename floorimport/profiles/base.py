from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..excel.headers import normalize_synonyms
from ..models.fields import FieldSpec
from ..models.parsed_row import DUPLICATE_IN_FILE, ParsedRow
from ..services.entity_index import Entity, ExistingEntityIndex

"""Entity profile base: per-entity rules plugged into the generic reconciler.

A profile owns the header synonym table, the canonical field list, the index
construction and the entity-specific checks. The reconciler drives the
order of the checks and the in-file duplicate tracking.
"""

__all__ = [
    "EntityAttribute",
    "EntityProfile",
]


@dataclass(frozen=True)
class EntityAttribute:
    """Stored entity attribute written by an import."""
    name: str
    label: str
    default: Any = ""


class EntityProfile:
    kind: str = ""
    sheet_label: str = ""
    fields: tuple[FieldSpec, ...] = ()
    attributes: tuple[EntityAttribute, ...] = ()
    raw_synonyms: Mapping[str, str] = {}

    def __init__(self) -> None:
        self.synonyms = normalize_synonyms(self.raw_synonyms)
        self._labels = {a.name: a.label for a in self.attributes}

    # --- index -----------------------------------------------------------
    def build_index(
        self, existing: Iterable[Entity], lookups: Mapping[str, Sequence[Entity]] | None = None
    ) -> ExistingEntityIndex:
        raise NotImplementedError

    # --- per-row hooks ---------------------------------------------------
    def skip_row(self, row: ParsedRow) -> bool:
        """Rows that are not data (e.g. a totals line) and must not be counted."""
        return False

    def resolve(self, row: ParsedRow, index: ExistingEntityIndex) -> tuple[dict[str, Any], list[str]]:
        """Present row values as entity attributes, plus reference errors."""
        resolved = {a.name: row.value(a.name) for a in self.attributes if row.is_present(a.name)}
        return resolved, []

    def match(self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex) -> Entity | None:
        raise NotImplementedError

    def seen_keys(self, row: ParsedRow, resolved: Mapping[str, Any]) -> frozenset[Hashable]:
        """Keys a later row of the same file must not repeat."""
        raise NotImplementedError

    def duplicate_errors(self, row: ParsedRow, repeated: frozenset[Hashable]) -> list[str]:
        return [DUPLICATE_IN_FILE]

    def mandatory_errors(self, row: ParsedRow, matched: Entity | None) -> list[str]:
        return []

    def collision_errors(
        self, row: ParsedRow, resolved: Mapping[str, Any], index: ExistingEntityIndex
    ) -> list[str]:
        return []

    def value_errors(self, row: ParsedRow, matched: Entity | None) -> list[str]:
        return []

    def value_warnings(self, row: ParsedRow) -> list[str]:
        return []

    # --- payloads --------------------------------------------------------
    def create_payload(self, resolved: Mapping[str, Any]) -> dict[str, Any]:
        payload = {a.name: a.default for a in self.attributes}
        payload.update(resolved)
        return payload

    def update_payload(self, resolved: Mapping[str, Any]) -> dict[str, Any]:
        return dict(resolved)

    def label(self, attribute: str) -> str:
        return self._labels.get(attribute, attribute)
