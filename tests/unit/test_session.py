from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from floorimport.models.session_state import SessionState
from floorimport.services.session import ImportSession, SessionStateError

HEADERS = ["Name", "Code", "Category", "OpeningBalance"]


class MemoryStore:
    def __init__(self):
        self.entities: list[dict] = []

    async def create(self, entity):
        self.entities.append({**entity, "id": f"id-{len(self.entities) + 1}"})
        return self.entities[-1]["id"]

    async def update(self, entity_id, partial):
        for e in self.entities:
            if e["id"] == entity_id:
                e.update(partial)
                return True
        return False


def test_session_parse_then_commit(temp_workdir: Path, make_excel):
    path = make_excel(temp_workdir / "products.xlsx", [HEADERS, ["Widget A", "W-1", "Home", 100]])
    store = MemoryStore()
    session = ImportSession("products")
    assert session.state is SessionState.IDLE

    result = session.parse(path, [])
    assert session.state is SessionState.PREVIEW_READY
    assert result.valid_count == 1

    outcome = asyncio.run(session.commit(store.create, store.update))
    assert session.state is SessionState.COMMITTED
    assert outcome.added == 1
    assert store.entities[0]["code"] == "W-1"

    # 同じセッションは再利用できない
    with pytest.raises(SessionStateError):
        asyncio.run(session.commit(store.create, store.update))


def test_cancel_before_commit(temp_workdir: Path, make_excel):
    path = make_excel(temp_workdir / "products.xlsx", [HEADERS, ["Widget A", "W-1", "Home", 100]])
    session = ImportSession("products")
    session.parse(path, [])
    session.cancel()
    assert session.state is SessionState.CANCELLED
    with pytest.raises(SessionStateError):
        asyncio.run(session.commit(MemoryStore().create, MemoryStore().update))


def test_commit_requires_valid_rows(temp_workdir: Path, make_excel):
    path = make_excel(temp_workdir / "products.xlsx", [HEADERS, [None, "W-1", None, 1]])
    session = ImportSession("products")
    result = session.parse(path, [])
    assert result.valid_count == 0
    assert not session.has_valid_rows
    with pytest.raises(SessionStateError):
        asyncio.run(session.commit(MemoryStore().create, MemoryStore().update))
    # 有効行が無くてもキャンセルは可能
    session.cancel()


def test_commit_before_parse_is_rejected():
    session = ImportSession("reports")
    with pytest.raises(SessionStateError):
        asyncio.run(session.commit(MemoryStore().create, MemoryStore().update))


def test_retry_after_partial_commit_reclassifies_as_update(temp_workdir: Path, make_excel):
    path = make_excel(
        temp_workdir / "products.xlsx",
        [HEADERS, ["Widget A", "W-1", "Home", 100], ["Widget B", "W-2", "Home", 5]],
    )
    store = MemoryStore()

    async def create_first_only(entity):
        if entity["code"] == "W-2":
            raise RuntimeError("network down")
        return await store.create(entity)

    first = ImportSession("products")
    first.parse(path, store.entities)
    outcome = asyncio.run(first.commit(create_first_only, store.update))
    assert outcome.failed == 1

    retry = ImportSession("products")
    result = retry.parse(path, store.entities)
    assert result.update_count == 1
    assert result.new_count == 1
    assert result.rows[0].has_no_changes


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        ImportSession("customers")
