from __future__ import annotations

from floorimport.models.parsed_row import DUPLICATE_IN_FILE, RowAction
from floorimport.profiles import get_profile
from floorimport.services.orchestrator import parse_table
from floorimport.services.reconciler import diff_entity, reconcile_row
from floorimport.services.row_parser import parse_row

HEADERS = ["Name", "Code", "Category", "OpeningBalance"]


def test_new_product_row():
    result = parse_table(HEADERS, [["Widget A", "W-1", "Home", 100]], [], "products")
    assert len(result.rows) == 1
    row = result.rows[0]
    assert row.action is RowAction.NEW
    assert row.errors == []
    assert row.matched_id is None
    assert row.changes == []
    assert row.payload["code"] == "W-1"
    assert row.payload["opening_balance"] == 100
    # 列が無い数値属性は既定値 0
    assert row.payload["selling_price"] == 0


def test_existing_product_is_update_with_changed_fields():
    existing = [{"id": "p1", "code": "W-1", "name": "Widget A", "openingBalance": 50}]
    result = parse_table(HEADERS, [["Widget A", "W-1", "Home", 100]], existing, "products")
    row = result.rows[0]
    assert row.action is RowAction.UPDATE
    assert row.matched_id == "p1"
    assert row.changed_fields == ["opening_balance"]
    assert row.describe_changes() == ["opening balance: 50 → 100"]


def test_update_without_differences_is_kept_as_no_changes():
    existing = [{"id": "p1", "code": "W-1", "name": "Widget A", "category": "Home", "openingBalance": 100}]
    result = parse_table(HEADERS, [["Widget A", " W-1 ", "Home", 100]], existing, "products")
    row = result.rows[0]
    assert row.action is RowAction.UPDATE
    assert row.has_no_changes
    assert result.update_count == 1


def test_duplicate_code_within_file():
    rows = [["Widget B", "W-2", "Home", 1], ["Widget B2", "W-2", "Home", 2]]
    result = parse_table(HEADERS, rows, [], "products")
    first, second = result.rows
    assert first.action is RowAction.NEW
    assert first.errors == []
    assert second.errors == [DUPLICATE_IN_FILE]
    assert second.is_duplicate
    assert result.duplicate_count == 1


def test_all_missing_mandatory_fields_are_reported():
    result = parse_table(HEADERS, [[None, None, None, 5]], [], "products")
    assert result.rows[0].errors == ["name missing", "code missing", "category missing"]


def test_update_row_may_omit_name_and_category():
    existing = [{"id": "p1", "code": "W-1", "name": "Widget A", "category": "Home"}]
    result = parse_table(HEADERS, [[None, "W-1", None, 7]], existing, "products")
    row = result.rows[0]
    assert row.errors == []
    assert row.payload == {"code": "W-1", "opening_balance": 7}


def test_new_product_with_existing_name_is_collision_error():
    existing = [{"id": "p1", "code": "W-1", "name": "Widget A", "category": "Home"}]
    result = parse_table(HEADERS, [["widget a", "W-9", "Home", 1]], existing, "products")
    row = result.rows[0]
    assert row.action is RowAction.NEW
    assert row.errors == ['name "widget a" already used by product "W-1"']
    assert row.is_duplicate


def test_rejected_row_still_poisons_its_key():
    # 1 行目はエラー (カテゴリ無し) でも、同じコードの 2 行目は重複扱い
    rows = [["Widget C", "W-3", None, 1], ["Widget C", "W-3", "Home", 1]]
    result = parse_table(HEADERS, rows, [], "products")
    first, second = result.rows
    assert first.errors == ["category missing"]
    assert second.errors == [DUPLICATE_IN_FILE]


def test_rows_without_code_do_not_collide_with_each_other():
    rows = [["A", None, "Home", 1], ["B", None, "Home", 1]]
    result = parse_table(HEADERS, rows, [], "products")
    assert all(DUPLICATE_IN_FILE not in r.errors for r in result.rows)


def test_negative_number_is_warning_only():
    result = parse_table(HEADERS, [["Widget A", "W-1", "Home", -3]], [], "products")
    row = result.rows[0]
    assert row.is_valid
    assert row.warnings == ["opening balance is negative"]


def test_reconcile_row_returns_extended_seen_keys():
    profile = get_profile("products")
    index = profile.build_index([])
    raw = parse_row({"Code": "W-1", "Name": "A", "Category": "Home"},
                    {"Code": "code", "Name": "name", "Category": "category"}, 0, profile.fields)
    reconciled, seen = reconcile_row(raw, index, profile, frozenset())
    assert reconciled.is_valid
    assert seen == frozenset({("code", "w-1"), ("name", "a")})
    again, seen_after = reconcile_row(raw, index, profile, seen)
    assert again.errors == [DUPLICATE_IN_FILE]
    assert seen_after == seen


def test_diff_entity_ignores_attributes_missing_on_either_side():
    profile = get_profile("products")
    changes = diff_entity(profile, {"code": "W-1", "name": "A"}, {"code": "W-1", "category": "Home"})
    assert changes == []


def test_same_name_on_two_new_rows_is_rejected():
    rows = [["Widget", "W-1", "Home", 1], ["widget ", "W-2", "Home", 1]]
    result = parse_table(HEADERS, rows, [], "products")
    first, second = result.rows
    assert first.errors == []
    assert second.errors == ['name "widget" repeated within file']
    assert second.is_duplicate
    assert result.valid_count == 1
    assert result.new_count == 1


def test_name_taken_by_update_row_blocks_new_row():
    # 更新行で付けた名前を同じファイルの新規行が再利用すると重複になる
    existing = [{"id": "p1", "code": "W-1", "name": "Widget A", "category": "Home"}]
    rows = [["Widget Z", "W-1", "Home", 1], ["Widget Z", "W-2", "Home", 1]]
    result = parse_table(HEADERS, rows, existing, "products")
    assert result.rows[0].errors == []
    assert result.rows[1].errors == ['name "Widget Z" repeated within file']
