import pytest
import pandas as pd
import os
import sys
import pathlib
from openpyxl import load_workbook

# Add project root to path for imports
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.aggregator import aggregate_data
from core.earnings import earnings_stats, process_orders
from core.parser import parse_orders
from excel_io.excel_writer import (
    ORDER_COLUMNS,
    to_color_table,
    to_inventory_table,
    to_orders_table,
    write_to_excel,
)


@pytest.fixture
def report(orders_records):
    result = parse_orders(orders_records)
    data = aggregate_data(result.items, result.orders)
    rows = process_orders(data.orders, 2.9, 0.30, {"#1001": 7.25})
    stats = earnings_stats(rows, shipping_cost=10, blank_costs=20)
    return data, rows, stats


class TestWriteToExcelBasicFunctionality:
    """Test basic functionality of write_to_excel"""

    def test_write_creates_file(self, tmp_path, report):
        output = str(tmp_path / "test.xlsx")
        write_to_excel(*report, output)
        assert os.path.exists(output)

    def test_write_creates_expected_sheets(self, tmp_path, report):
        output = str(tmp_path / "test.xlsx")
        write_to_excel(*report, output)
        wb = load_workbook(output)
        assert wb.sheetnames == ["Summary", "Inventory", "Colors", "Orders"]

    def test_empty_import_still_writes(self, tmp_path):
        data = aggregate_data([], [])
        rows = process_orders([])
        output = str(tmp_path / "empty.xlsx")
        write_to_excel(data, rows, earnings_stats(rows, 0, 0), output)
        inv = pd.read_excel(output, sheet_name="Inventory")
        assert len(inv) == 0
        colors = pd.read_excel(output, sheet_name="Colors")
        assert colors["Color"].tolist() == ["TOTAL"]

    def test_writer_errors_propagate(self, tmp_path, report):
        bad = str(tmp_path / "missing_dir" / "out.xlsx")
        with pytest.raises(Exception):
            write_to_excel(*report, bad)


class TestSheetContents:
    """Values written to each sheet"""

    def test_summary_values(self, tmp_path, report):
        output = str(tmp_path / "test.xlsx")
        write_to_excel(*report, output)
        summary = pd.read_excel(output, sheet_name="Summary")
        values = dict(zip(summary["Field"], summary["Value"].astype(str)))
        assert values["Unique Products"] == "4"
        assert values["Total Items"] == "5"
        assert values["Top Product"] == "Classic Tee - Black (2)"
        assert values["Top Color"] == "black (2)"
        assert values["Orders"] == "3"
        assert values["Total Subtotal"] == "$115.00"
        assert values["Shipping"] == "$10.00"
        assert values["Blank Costs"] == "$20.00"
        assert "Processing Date" in values

    def test_inventory_sheet(self, tmp_path, report):
        output = str(tmp_path / "test.xlsx")
        write_to_excel(*report, output)
        inv = pd.read_excel(output, sheet_name="Inventory")
        assert inv.columns.tolist() == ["Product / Color", "XS", "SMALL", "MEDIUM", "LARGE", "XL", "2XL", "3XL", "Total"]
        assert inv["Total"].sum() == 5
        row = inv.loc[inv["Product / Color"] == "Classic Tee - Black"].iloc[0]
        assert row["LARGE"] == 2

    def test_orders_sheet(self, tmp_path, report):
        output = str(tmp_path / "test.xlsx")
        write_to_excel(*report, output)
        orders = pd.read_excel(output, sheet_name="Orders")
        assert orders.columns.tolist() == ORDER_COLUMNS
        first = orders.iloc[0]
        assert first["Order"] == "#1001"
        assert first["Shopify Fee"] == pytest.approx(2.24)
        assert first["Shipping"] == pytest.approx(7.25)


class TestTables:

    def test_inventory_table_matches_pivot(self, report):
        data = report[0]
        df = to_inventory_table(data)
        assert len(df) == len(data.products)
        assert df["Total"].sum() == data.grand_total

    def test_color_table_total_row(self, report):
        data = report[0]
        df = to_color_table(data)
        last = df.iloc[-1]
        assert last["Color"] == "TOTAL"
        assert last["Total"] == data.grand_total
        assert df["Color"].tolist()[:-1] == ["black", "Navy", "storm", "white"]

    def test_orders_table_blank_date(self):
        from core.models import Order
        from core.earnings import OrderEarnings
        o = Order(id="#1", name="#1", date=pd.NaT, total=1.0, subtotal=1.0)
        df = to_orders_table([OrderEarnings(order=o, shopify_fee=0.0, net_after_fees=1.0)])
        assert df.loc[0, "Date"] == ""
