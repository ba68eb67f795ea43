from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

"""Local JSON snapshot store.

Stands in for the remote document store when the importer runs from the
command line: entities live in one JSON array per collection
(``<directory>/<collection>.json``). Each write is persisted immediately so
that a partially committed batch is visible to the next import attempt.
"""

__all__ = [
    "SnapshotError",
    "JsonSnapshotStore",
    "load_collection",
]


class SnapshotError(Exception):
    pass


def load_collection(directory: Path, collection: str) -> list[dict[str, Any]]:
    """Load a collection snapshot; a missing file is an empty collection."""
    path = directory / f"{collection}.json"
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotError(f"invalid snapshot {path}: {e}") from e
    if not isinstance(data, list):
        raise SnapshotError(f"invalid snapshot {path}: expected a JSON array")
    return [dict(item) for item in data if isinstance(item, dict)]


class JsonSnapshotStore:
    """Async create / update over a JSON array file."""

    def __init__(self, directory: Path, collection: str) -> None:
        self.directory = directory
        self.collection = collection
        self.path = directory / f"{collection}.json"
        self._entities = load_collection(directory, collection)

    def snapshot(self) -> list[dict[str, Any]]:
        """Copy of the current entities (what an import should reconcile against)."""
        return [dict(e) for e in self._entities]

    def _save(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(self._entities, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
        tmp.replace(self.path)

    async def create(self, entity: dict[str, Any]) -> str:
        entity_id = uuid.uuid4().hex
        self._entities.append({**entity, "id": entity_id})
        self._save()
        return entity_id

    async def update(self, entity_id: str, partial: dict[str, Any]) -> bool:
        for entity in self._entities:
            if str(entity.get("id")) == entity_id:
                entity.update({k: v for k, v in partial.items() if k != "id"})
                self._save()
                return True
        return False
