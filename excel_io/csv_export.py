"""
csv_export.py

Row-per-product inventory sheet as CSV.

    Product / Color, XS, SMALL, MEDIUM, LARGE, XL, 2XL, 3XL, Total

"blank" mode writes bare counts. "progress" mode marks cells against the
fulfilment checklist: "DONE (n)" when every piece is checked, "k / n" when
some are, otherwise the bare count. Commas are removed from product names.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

import pandas as pd

from core.aggregator import product_rows
from core.checklist import cell_count
from core.models import AggregatedData
from core.sizes import ORDERED_SIZES

logger = logging.getLogger(__name__)

PRODUCT_COL = "Product / Color"
EXPORT_COLUMNS: List[str] = [PRODUCT_COL] + ORDERED_SIZES + ["Total"]


def export_filename(with_progress: bool) -> str:
    return f"inventory_{'progress' if with_progress else 'blank'}.csv"


def progress_cell(qty: int, done: int) -> str:
    if qty > 0 and done >= qty:
        return f"DONE ({qty})"
    if qty > 0 and done > 0:
        return f"{done} / {qty}"
    return str(qty)


def to_inventory_frame(
    data: AggregatedData,
    checked: Optional[Mapping[str, object]] = None,
    *,
    with_progress: bool = False,
    sort_field: str = "name",
    direction: str = "asc",
) -> pd.DataFrame:
    """
    Build the export table, one row per "Product - Color".

    Args:
        data: Aggregation to export.
        checked: Checklist mapping; only read in progress mode.
        with_progress: Mark cells with checklist progress.
        sort_field: Row order, see core.aggregator.product_rows.
        direction: "asc" or "desc".

    Returns:
        A DataFrame with EXPORT_COLUMNS; size cells are strings.
    """
    checked = checked or {}
    records = []
    for row in product_rows(data, sort_field, direction):
        rec = {PRODUCT_COL: row.name.replace(",", "")}
        for size in ORDERED_SIZES:
            qty = row.sizes.get(size, 0)
            if with_progress:
                rec[size] = progress_cell(qty, cell_count(checked, row.name, size, qty))
            else:
                rec[size] = str(qty)
        rec["Total"] = str(row.total)
        records.append(rec)
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def export_inventory_csv(
    data: AggregatedData,
    checked: Optional[Mapping[str, object]] = None,
    *,
    with_progress: bool = False,
    sort_field: str = "name",
    direction: str = "asc",
) -> str:
    """Render the inventory export as CSV text."""
    df = to_inventory_frame(
        data, checked, with_progress=with_progress, sort_field=sort_field, direction=direction
    )
    logger.info("Exporting %d product rows (%s)", len(df), "progress" if with_progress else "blank")
    return df.to_csv(index=False, lineterminator="\n")
