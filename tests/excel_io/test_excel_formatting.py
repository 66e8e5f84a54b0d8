"""
Tests for Excel output formatting and styling.

These tests verify that workbooks are not just structurally correct,
but also properly formatted with colors, fonts, borders, alignment, and column widths.
"""
import pytest
import sys
import pathlib
from openpyxl import load_workbook

# Add project root to path
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.aggregator import aggregate_data
from core.earnings import earnings_stats, process_orders
from core.parser import parse_orders
from excel_io.excel_writer import write_to_excel

BLUE_HEADER = ["FF4F81BD", "004F81BD", "4F81BD"]
SUMMARY_HEADER = ["FF366092", "00366092", "366092"]
ZEBRA = ["FFF2F2F2", "00F2F2F2", "F2F2F2"]


@pytest.fixture
def workbook(tmp_path, orders_records):
    result = parse_orders(orders_records)
    data = aggregate_data(result.items, result.orders)
    rows = process_orders(data.orders)
    output = str(tmp_path / "styled.xlsx")
    write_to_excel(data, rows, earnings_stats(rows, 0, 0), output)
    return load_workbook(output)


class TestSummarySheetFormatting:
    """Test formatting of the Summary sheet"""

    def test_summary_sheet_header_color(self, workbook):
        ws = workbook["Summary"]
        assert ws["A1"].fill.start_color.rgb in SUMMARY_HEADER

    def test_summary_sheet_header_font(self, workbook):
        ws = workbook["Summary"]
        assert ws["A1"].font.bold is True
        assert ws["A1"].font.color.rgb in ["FFFFFFFF", "00FFFFFF", "FFFFFF"]

    def test_summary_sheet_column_widths(self, workbook):
        ws = workbook["Summary"]
        assert ws.column_dimensions["A"].width == 20
        assert ws.column_dimensions["B"].width == 40

    def test_summary_sheet_borders(self, workbook):
        ws = workbook["Summary"]
        assert ws["B2"].border.left.style == "thin"


class TestPivotSheetFormatting:
    """Inventory and Colors sheets"""

    @pytest.mark.parametrize("sheet", ["Inventory", "Colors", "Orders"])
    def test_header_fill(self, workbook, sheet):
        ws = workbook[sheet]
        for cell in ws[1]:
            assert cell.fill.start_color.rgb in BLUE_HEADER
            assert cell.font.bold is True

    def test_label_column_left_sizes_centered(self, workbook):
        ws = workbook["Inventory"]
        assert ws["A2"].alignment.horizontal == "left"
        assert ws["B2"].alignment.horizontal == "center"

    def test_freeze_panes(self, workbook):
        assert workbook["Inventory"].freeze_panes == "B2"
        assert workbook["Orders"].freeze_panes == "A2"

    def test_zebra_rows(self, workbook):
        ws = workbook["Inventory"]
        assert ws["A2"].fill.start_color.rgb in ZEBRA

    def test_colors_total_row_bold(self, workbook):
        ws = workbook["Colors"]
        assert ws.cell(row=ws.max_row, column=1).value == "TOTAL"
        assert ws.cell(row=ws.max_row, column=1).font.bold is True

    def test_size_columns_compact(self, workbook):
        ws = workbook["Inventory"]
        assert ws.column_dimensions["B"].width <= 10
        assert ws.column_dimensions["A"].width > ws.column_dimensions["B"].width


class TestOrdersSheetFormatting:

    def test_money_columns_number_format(self, workbook):
        ws = workbook["Orders"]
        assert ws["C2"].number_format == "#,##0.00"
        assert ws["C2"].alignment.horizontal == "right"
        assert ws["A2"].alignment.horizontal == "left"
