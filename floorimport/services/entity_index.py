from __future__ import annotations

import re
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

"""Existing-entity index used by the reconciler.

The index is built fresh from the current entity snapshot before every import
attempt and never mutated afterwards. It therefore reflects the store state
before this import, not rows committed earlier in the same batch.
"""

__all__ = [
    "Entity",
    "ExistingEntityIndex",
    "ReferenceLookup",
    "attribute_name",
    "key_text",
]

Entity = Mapping[str, Any]
KeyFunc = Callable[[Entity], Iterable[Hashable]]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def key_text(value: Any) -> str:
    """Comparison form for natural / alternate key parts."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().casefold()


def attribute_name(key: str) -> str:
    """Store documents use camelCase keys; the engine uses snake_case."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _freeze(entity: Entity) -> Entity:
    return MappingProxyType({attribute_name(str(k)): v for k, v in entity.items()})


def _index_by(entities: Iterable[Entity], keys: KeyFunc) -> Mapping[Hashable, Entity]:
    table: dict[Hashable, Entity] = {}
    for entity in entities:
        for key in keys(entity):
            # スナップショット内の重複キーは先勝ち
            table.setdefault(key, entity)
    return MappingProxyType(table)


@dataclass(frozen=True)
class ReferenceLookup:
    """Name (and optional code) -> entity lookup for a reference collection."""
    name: str
    by_name: Mapping[str, Entity] = field(default_factory=dict)
    by_code: Mapping[str, Entity] = field(default_factory=dict)
    entities: tuple[Entity, ...] = ()

    @classmethod
    def build(cls, name: str, entities: Iterable[Entity], *, code_field: str | None = None) -> ReferenceLookup:
        frozen = tuple(_freeze(e) for e in entities)
        by_name = _index_by(frozen, lambda e: [key_text(e.get("name"))] if key_text(e.get("name")) else [])
        by_code: Mapping[str, Entity] = MappingProxyType({})
        if code_field:
            by_code = _index_by(
                frozen, lambda e: [key_text(e.get(code_field))] if key_text(e.get(code_field)) else []
            )
        return cls(name=name, by_name=by_name, by_code=by_code, entities=frozen)

    def find(self, text: Any) -> Entity | None:
        k = key_text(text)
        if not k:
            return None
        return self.by_name.get(k) or self.by_code.get(k)

    def names(self) -> list[str]:
        return [str(e.get("name", "")) for e in self.entities if e.get("name")]


@dataclass(frozen=True)
class ExistingEntityIndex:
    """Read-only lookup over an entity snapshot.

    ``natural`` maps natural keys to entities, ``alternates`` holds one table
    per alternate duplicate-detection key, ``references`` holds lookups for
    related collections (lines, products, employees).
    """
    natural: Mapping[Hashable, Entity]
    alternates: Mapping[str, Mapping[Hashable, Entity]]
    references: Mapping[str, ReferenceLookup]
    size: int = 0

    @classmethod
    def build(
        cls,
        entities: Iterable[Entity],
        *,
        natural_keys: KeyFunc,
        alternate_keys: Mapping[str, KeyFunc] | None = None,
        references: Mapping[str, ReferenceLookup] | None = None,
    ) -> ExistingEntityIndex:
        frozen = [_freeze(e) for e in entities]
        alternates = {
            name: _index_by(frozen, fn) for name, fn in (alternate_keys or {}).items()
        }
        return cls(
            natural=_index_by(frozen, natural_keys),
            alternates=MappingProxyType(alternates),
            references=MappingProxyType(dict(references or {})),
            size=len(frozen),
        )

    def find(self, key: Hashable | None) -> Entity | None:
        if key is None:
            return None
        return self.natural.get(key)

    def find_alternate(self, name: str, key: Hashable | None) -> Entity | None:
        if key is None:
            return None
        table = self.alternates.get(name)
        if table is None:
            return None
        return table.get(key)

    def reference(self, name: str) -> ReferenceLookup:
        return self.references.get(name) or ReferenceLookup(name=name)
