# Shared pytest fixtures
from __future__ import annotations
import json
import tempfile
from pathlib import Path

import pandas as pd
import pytest


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("FLOORIMPORT_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """snapshot_directory: ./data
unparseable_numbers: warn
error_log_directory: ./logs
progress: "off"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def reference_snapshots(temp_workdir: Path) -> dict[str, list[dict]]:
    """Lines / products / employees used by report imports."""
    refs = {
        "lines": [{"id": "L1", "name": "Line 1"}, {"id": "L2", "name": "Line 2"}],
        "products": [{"id": "P1", "name": "Motor H-400", "code": "PRD-001"}],
        "employees": [{"id": "E1", "name": "Sara"}, {"id": "E2", "name": "Omar"}],
    }
    for name, entities in refs.items():
        (temp_workdir / "data" / f"{name}.json").write_text(json.dumps(entities), encoding="utf-8")
    return refs


def _make_excel(path: Path, rows: list[list[object]], sheet: str = "Sheet1") -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_excel():
    """Factory writing ``rows`` (header row first) to the first sheet of a workbook."""
    return _make_excel
