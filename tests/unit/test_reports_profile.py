from __future__ import annotations

from floorimport.models.parsed_row import DUPLICATE_IN_FILE, RowAction
from floorimport.services.orchestrator import parse_table

HEADERS = ["Date", "Production Line", "Product", "Employee", "Quantity Produced", "Waste", "Workers Count", "Work Hours"]

LOOKUPS = {
    "lines": [{"id": "L1", "name": "Line 1"}],
    "products": [{"id": "P1", "name": "Motor H-400", "code": "PRD-001"}],
    "employees": [{"id": "E1", "name": "Sara"}, {"id": "E2", "name": "Omar"}],
}


def _row(date="2026-02-16", line="Line 1", product="Motor H-400", employee="Sara", produced=500, waste=10, workers=8, hours=8):
    return [date, line, product, employee, produced, waste, workers, hours]


def test_new_report_resolves_reference_ids():
    result = parse_table(HEADERS, [_row()], [], "reports", LOOKUPS)
    row = result.rows[0]
    assert row.errors == []
    assert row.action is RowAction.NEW
    assert row.payload["line_id"] == "L1"
    assert row.payload["product_id"] == "P1"
    assert row.payload["employee_id"] == "E1"
    assert row.payload["date"] == "2026-02-16"


def test_product_can_be_referenced_by_code():
    result = parse_table(HEADERS, [_row(product="prd-001")], [], "reports", LOOKUPS)
    assert result.rows[0].payload["product_id"] == "P1"


def test_unknown_reference_is_error():
    result = parse_table(HEADERS, [_row(line="Line 9")], [], "reports", LOOKUPS)
    assert result.rows[0].errors == ['line "Line 9" not found']


def test_supervisors_lookup_alias():
    lookups = {k: v for k, v in LOOKUPS.items() if k != "employees"}
    lookups["supervisors"] = [{"id": "S1", "name": "Sara"}]
    result = parse_table(HEADERS, [_row()], [], "reports", lookups)
    assert result.rows[0].payload["employee_id"] == "S1"


def test_missing_mandatory_fields_listed_together():
    result = parse_table(HEADERS, [_row(date=None, line=None, employee=None)], [], "reports", LOOKUPS)
    assert result.rows[0].errors == ["date missing", "line missing", "employee missing"]


def test_quantities_must_be_positive():
    result = parse_table(HEADERS, [_row(produced=0, workers=None)], [], "reports", LOOKUPS)
    assert result.rows[0].errors == [
        "quantity produced must be greater than 0",
        "workers count must be greater than 0",
    ]


def test_waste_and_hours_warnings():
    result = parse_table(HEADERS, [_row(produced=10, waste=20, hours=30)], [], "reports", LOOKUPS)
    row = result.rows[0]
    assert row.is_valid
    assert row.warnings == ["waste (20) exceeds quantity produced (10)", "work hours (30) exceed 24"]
    assert result.warning_count == 1


def test_same_slot_twice_in_file_is_duplicate():
    result = parse_table(HEADERS, [_row(), _row(produced=600)], [], "reports", LOOKUPS)
    assert result.rows[0].errors == []
    assert result.rows[1].errors == [DUPLICATE_IN_FILE]


def test_existing_slot_is_update():
    existing = [{
        "id": "r1", "date": "2026-02-16", "lineId": "L1", "productId": "P1", "employeeId": "E1",
        "quantityProduced": 450, "quantityWaste": 10, "workersCount": 8, "workHours": 8,
    }]
    result = parse_table(HEADERS, [_row()], existing, "reports", LOOKUPS)
    row = result.rows[0]
    assert row.action is RowAction.UPDATE
    assert row.matched_id == "r1"
    assert row.changed_fields == ["quantity_produced"]


def test_new_code_in_taken_slot_is_collision():
    headers = ["Report Code", *HEADERS]
    existing = [{"id": "r1", "reportCode": "R-1", "date": "2026-02-16", "lineId": "L1", "employeeId": "E1"}]
    result = parse_table(headers, [["R-2", *_row()]], existing, "reports", LOOKUPS)
    row = result.rows[0]
    assert row.action is RowAction.NEW
    assert row.is_duplicate
    assert row.errors == ['a report for 2026-02-16 on this line and employee already exists as "R-1"']


def test_report_code_match_wins_over_slot():
    headers = ["Report Code", *HEADERS]
    existing = [{"id": "r1", "reportCode": "R-1", "date": "2026-02-15", "lineId": "L1", "employeeId": "E2"}]
    result = parse_table(headers, [["R-1", *_row()]], existing, "reports", LOOKUPS)
    row = result.rows[0]
    assert row.action is RowAction.UPDATE
    assert row.matched_id == "r1"
    assert "date" in row.changed_fields
    assert "employee_id" in row.changed_fields


def test_totals_row_is_skipped():
    rows = [_row(), ["الإجمالي", None, None, None, 500, 10, None, None]]
    result = parse_table(HEADERS, rows, [], "reports", LOOKUPS)
    assert result.total_rows == 1
