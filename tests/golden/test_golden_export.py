import json
import pathlib
import sys

# Add project root to path for imports
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.aggregator import aggregate_data
from core.parser import parse_orders
from core.reader import read_records
from excel_io.csv_export import export_inventory_csv, export_filename

IN_DIR = HERE / "inputs"
EXP_DIR = HERE / "expected"


def _normalise(text: str) -> list[str]:
    return [line.rstrip() for line in text.strip().splitlines()]


@pytest.mark.parametrize("with_progress", [False, True])
def test_orders_export_matches_golden(tmp_path, with_progress, update_golden):
    """
    End-to-end golden test:
      orders CSV -> records -> line items / orders -> pivots -> inventory CSV.
    """
    _, records = read_records(str(IN_DIR / "orders_export.csv"))
    result = parse_orders(records)
    data = aggregate_data(result.items, result.orders)
    checked = json.loads((EXP_DIR / "checklist.json").read_text())

    got = export_inventory_csv(data, checked, with_progress=with_progress)
    exp_path = EXP_DIR / export_filename(with_progress)

    if update_golden:
        EXP_DIR.mkdir(parents=True, exist_ok=True)
        exp_path.write_text(got)
        pytest.skip(f"Golden updated for {exp_path.name}")

    assert _normalise(got) == _normalise(exp_path.read_text())


def test_golden_input_invariants():
    _, records = read_records(str(IN_DIR / "orders_export.csv"))
    result = parse_orders(records)
    data = aggregate_data(result.items, result.orders)

    assert [o.name for o in data.orders] == ["#2001", "#2002", "#2003"]
    assert data.grand_total == sum(data.totals.values()) == 6
    for size, total in data.totals.items():
        assert total == sum(row[size] for row in data.products.values())
