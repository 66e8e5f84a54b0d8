"""
excel_writer.py

Writes one import as a styled workbook.

Sheets
------
- Summary   -> Field / Value headline numbers (pieces, top sellers, profit)
- Inventory -> one row per "Product - Color", sizes across, Total
- Colors    -> one row per colour family, sizes across, Total, final TOTAL row
- Orders    -> one row per order with fee / net / shipping figures

Usage
-----
write_to_excel(data, earnings_rows, stats, "out.xlsx")
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from core.aggregator import product_rows, quick_stats
from core.earnings import EarningsStats, OrderEarnings
from core.models import AggregatedData
from core.sizes import ORDERED_SIZES

logger = logging.getLogger(__name__)

ORDER_COLUMNS: List[str] = [
    "Order",
    "Date",
    "Total",
    "Subtotal",
    "Shopify Fee",
    "Net After Fees",
    "Shipping",
]

_THIN = Border(left=Side(style="thin"), right=Side(style="thin"),
               top=Side(style="thin"), bottom=Side(style="thin"))
_HEADER_FILL = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
_ZEBRA = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")


# ==============================================================================
# Public API
# ==============================================================================

def write_to_excel(
    data: AggregatedData,
    earnings_rows: Sequence[OrderEarnings],
    stats: EarningsStats,
    output_path: str,
) -> None:
    """
    Write an Excel workbook with Summary, Inventory, Colors and Orders sheets.
    """
    try:
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            _create_summary_sheet(writer, data, earnings_rows, stats)

            inv_df = to_inventory_table(data)
            inv_df.to_excel(writer, sheet_name="Inventory", index=False)
            _format_pivot_sheet(writer.sheets["Inventory"], inv_df)

            color_df = to_color_table(data)
            color_df.to_excel(writer, sheet_name="Colors", index=False)
            _format_pivot_sheet(writer.sheets["Colors"], color_df, bold_last_row=True)

            orders_df = to_orders_table(earnings_rows)
            orders_df.to_excel(writer, sheet_name="Orders", index=False)
            _format_orders_sheet(writer.sheets["Orders"], orders_df)

        logger.info("Excel file written successfully: %s", output_path)
    except Exception as e:
        logger.error("Error writing Excel file: %s", e)
        raise


# ==============================================================================
# Tables
# ==============================================================================

def to_inventory_table(data: AggregatedData) -> pd.DataFrame:
    rows = [
        {"Product / Color": r.name, **{s: r.sizes.get(s, 0) for s in ORDERED_SIZES}, "Total": r.total}
        for r in product_rows(data)
    ]
    return pd.DataFrame(rows, columns=["Product / Color"] + ORDERED_SIZES + ["Total"])


def to_color_table(data: AggregatedData) -> pd.DataFrame:
    """Colour families sorted by name, followed by a TOTAL row from the size totals."""
    rows = []
    for family in sorted(data.color_totals, key=str.casefold):
        sizes = data.color_totals[family]
        rows.append({"Color": family, **{s: sizes.get(s, 0) for s in ORDERED_SIZES},
                     "Total": sum(sizes.get(s, 0) for s in ORDERED_SIZES)})
    rows.append({"Color": "TOTAL", **{s: data.totals.get(s, 0) for s in ORDERED_SIZES},
                 "Total": data.grand_total})
    return pd.DataFrame(rows, columns=["Color"] + ORDERED_SIZES + ["Total"])


def to_orders_table(earnings_rows: Sequence[OrderEarnings]) -> pd.DataFrame:
    rows = []
    for r in earnings_rows:
        o = r.order
        rows.append([
            o.name,
            "" if pd.isna(o.date) else o.date.strftime("%Y-%m-%d %H:%M"),
            round(o.total, 2),
            round(o.subtotal, 2),
            round(r.shopify_fee, 2),
            round(r.net_after_fees, 2),
            round(r.shipping_cost, 2),
        ])
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


# ==============================================================================
# Summary sheet
# ==============================================================================

def _create_summary_sheet(writer, data: AggregatedData, earnings_rows, stats: EarningsStats) -> None:
    qs = quick_stats(data)
    top_product = qs["top_product"]
    top_color = qs["top_color"]
    summary_data = {
        "Field": [
            "Unique Products",
            "Total Items",
            "Top Product",
            "Top Color",
            "Orders",
            "Total Subtotal",
            "Shopify Fees",
            "Shipping",
            "Blank Costs",
            "Net Profit",
            "Processing Date",
        ],
        "Value": [
            str(qs["unique_products"]),
            str(qs["total_items"]),
            f"{top_product['name']} ({top_product['total']})",
            f"{top_color['color']} ({top_color['total']})",
            str(len(earnings_rows)),
            _money(stats.total_subtotal),
            _money(stats.total_shopify),
            _money(stats.total_shipping),
            _money(stats.total_blank),
            _money(stats.net_profit),
            pd.Timestamp.now().strftime("%Y-%m-%d %H:%M:%S"),
        ],
    }
    pd.DataFrame(summary_data).to_excel(writer, sheet_name="Summary", index=False)
    _format_summary_sheet(writer.sheets["Summary"])


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _format_summary_sheet(ws) -> None:
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True, size=12)
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
    body_font = Font(size=11)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.font = body_font
            cell.alignment = Alignment(horizontal="left", vertical="center")
    ws.column_dimensions["A"].width = 20
    ws.column_dimensions["B"].width = 40
    _apply_borders(ws)


# ==============================================================================
# Pivot and orders formatting
# ==============================================================================

def _format_pivot_sheet(ws, df: pd.DataFrame, *, bold_last_row: bool = False) -> None:
    """Blue header, left-aligned label column, centred counts, zebra rows."""
    _style_header(ws)
    for row in ws.iter_rows(min_row=2):
        for idx, cell in enumerate(row, start=1):
            horizontal = "left" if idx == 1 else "center"
            cell.alignment = Alignment(horizontal=horizontal, vertical="center")
            cell.font = Font(size=10)

    for col_idx, col in enumerate(df.columns, start=1):
        max_len = _max_len(df, col)
        if col_idx == 1:
            width = min(max_len + 6, 70)
        elif col == "Total":
            width = max(10, max_len + 2)
        else:
            width = max(8, min(max_len + 1, 10))
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    ws.freeze_panes = "B2"
    _apply_borders(ws)
    for r_idx, row in enumerate(ws.iter_rows(min_row=2), start=2):
        if r_idx % 2 == 0:
            for cell in row:
                cell.fill = _ZEBRA
    if bold_last_row and ws.max_row > 1:
        for cell in ws[ws.max_row]:
            cell.font = Font(size=10, bold=True)


def _format_orders_sheet(ws, df: pd.DataFrame) -> None:
    _style_header(ws)
    body_font = Font(size=10)
    for row in ws.iter_rows(min_row=2):
        for idx, cell in enumerate(row, start=1):
            cell.font = body_font
            if idx > 2:
                cell.number_format = "#,##0.00"
                cell.alignment = Alignment(horizontal="right", vertical="center")
            else:
                cell.alignment = Alignment(horizontal="left", vertical="center")
    for col_idx, col in enumerate(df.columns, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = min(_max_len(df, col) + 3, 50)
    ws.freeze_panes = "A2"
    _apply_borders(ws)


# ==============================================================================
# Helpers
# ==============================================================================

def _style_header(ws) -> None:
    header_font = Font(color="FFFFFF", bold=True, size=11)
    for cell in ws[1]:
        cell.fill = _HEADER_FILL
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _apply_borders(ws) -> None:
    for row in ws.iter_rows():
        for cell in row:
            cell.border = _THIN


def _max_len(df: pd.DataFrame, col) -> int:
    if len(df) == 0:
        return len(str(col))
    return max(len(str(col)), int(df[col].astype(str).str.len().max()))
