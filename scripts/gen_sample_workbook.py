#!/usr/bin/env python3
"""Sample workbook generator for import testing.

Generates synthetic product or production-report workbooks in the layout the
importer expects:
- Row 1: Header row (English or Arabic headers)
- Row 2+: Data rows

A share of rows can be made deliberately invalid (blank code, repeated code,
unparseable number) to exercise the preview error paths. Reference snapshots
(lines / products / employees) matching the generated report rows can be
written next to the workbook for the CLI store.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from floorimport.excel.template import TEMPLATE_HEADERS


def generate_products(rows: int, error_rate: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Generate product rows; ``error_rate`` of them carry a data problem."""
    rng = np.random.default_rng(seed)
    categories = ["Finished goods", "Raw materials", "Semi-finished"]
    data: list[list[Any]] = []
    for i in range(rows):
        data.append([
            f"Item {i + 1:05d}",
            f"PRD-{i + 1:05d}",
            rng.choice(categories),
            int(rng.integers(0, 5000)),
        ])
    _inject_errors(data, rng, error_rate, code_col=1, number_col=3)
    return pd.DataFrame(data, columns=TEMPLATE_HEADERS["products"]["en"])


def generate_reports(
    rows: int, lines: int = 3, employees: int = 5, error_rate: float = 0.0, seed: int = 42
) -> tuple[pd.DataFrame, dict[str, list[dict[str, Any]]]]:
    """Generate report rows plus the reference snapshots they point at."""
    rng = np.random.default_rng(seed)
    refs = {
        "lines": [{"id": f"L{i}", "name": f"Line {i}"} for i in range(1, lines + 1)],
        "products": [{"id": f"P{i}", "name": f"Product {i}", "code": f"PRD-{i:05d}"} for i in range(1, 4)],
        "employees": [{"id": f"E{i}", "name": f"Employee {i}"} for i in range(1, employees + 1)],
    }
    dates = pd.date_range("2026-01-01", periods=max(1, rows // (lines * employees) + 1), freq="D")
    data: list[list[Any]] = []
    # 日付×ライン×従業員の組合せを順に割り当てて重複を避ける
    slots = [(d, ln, em) for d in dates for ln in refs["lines"] for em in refs["employees"]]
    for d, ln, em in slots[:rows]:
        produced = int(rng.integers(100, 1000))
        data.append([
            d.strftime("%Y-%m-%d"),
            ln["name"],
            rng.choice(refs["products"])["name"],
            em["name"],
            produced,
            int(rng.integers(0, produced // 10 + 1)),
            int(rng.integers(2, 12)),
            8,
        ])
    _inject_errors(data, rng, error_rate, code_col=1, number_col=4)
    return pd.DataFrame(data, columns=TEMPLATE_HEADERS["reports"]["en"]), refs


def _inject_errors(data: list[list[Any]], rng: np.random.Generator, rate: float, *, code_col: int, number_col: int) -> None:
    if rate <= 0 or not data:
        return
    count = max(1, int(len(data) * rate))
    for idx in rng.choice(len(data), size=min(count, len(data)), replace=False):
        kind = int(idx) % 3
        if kind == 0:
            data[idx][code_col] = ""
        elif kind == 1 and idx > 0:
            data[idx][code_col] = data[idx - 1][code_col]
        else:
            data[idx][number_col] = "n/a"


def write_workbook(df: pd.DataFrame, output: Path, sheet_name: str = "Sheet1") -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate sample product / report workbooks for import testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s products.xlsx --kind products --rows 500
  %(prog)s reports.xlsx --kind reports --rows 200 --error-rate 0.05 --snapshots ./data
        """,
    )
    parser.add_argument("output", type=Path, help="Output workbook path")
    parser.add_argument("--kind", choices=("products", "reports"), default="products")
    parser.add_argument("--rows", type=int, default=1000, help="Number of data rows (default: 1000)")
    parser.add_argument("--error-rate", type=float, default=0.0, help="Share of invalid rows (0..1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--snapshots", type=Path, default=None, help="Write reference snapshots here (reports)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.error_rate <= 1:
        print("Error: --error-rate must be between 0 and 1", file=sys.stderr)
        return 1

    if args.kind == "products":
        df = generate_products(args.rows, args.error_rate, args.seed)
    else:
        df, refs = generate_reports(args.rows, error_rate=args.error_rate, seed=args.seed)
        if args.snapshots is not None:
            args.snapshots.mkdir(parents=True, exist_ok=True)
            for name, entities in refs.items():
                (args.snapshots / f"{name}.json").write_text(
                    json.dumps(entities, ensure_ascii=False, indent=2), encoding="utf-8"
                )
    write_workbook(df, args.output)
    print(f"Created {args.kind} workbook: {args.output} ({len(df):,} rows)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
