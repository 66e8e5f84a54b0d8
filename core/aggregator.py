"""
aggregator.py

Folds parsed line items into the size pivots used for production planning:

- products:     "Product - Color" x size
- color_totals: colour family x size
- totals:       size totals, plus a grand total

Only canonical sizes are counted. Items sized "Unknown" / "One Size" stay in
the raw item list but never reach a pivot. Every inner mapping carries all
canonical sizes, zero-filled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from core.colors import detect_color_family
from core.models import AggregatedData, LineItem, Order
from core.sizes import ORDERED_SIZES, empty_size_row, is_canonical

logger = logging.getLogger(__name__)

SORT_FIELDS = ("name", "total")
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class ProductRow:
    name: str
    sizes: Dict[str, int]
    total: int


# ==============================
# Pivot build
# ==============================


def aggregate_data(items: Sequence[LineItem], orders: Sequence[Order]) -> AggregatedData:
    """
    Build the pivots for one import.

    Args:
        items: Parsed line items.
        orders: Unique orders; carried through unchanged.

    Returns:
        A new AggregatedData. Inputs are never modified.
    """
    rows = [
        (item.row_key, detect_color_family(item.color), item.size, item.quantity)
        for item in items
        if is_canonical(item.size)
    ]
    totals = empty_size_row()
    if not rows:
        logger.info("No items with a standard size; pivots are empty")
        return AggregatedData(products={}, color_totals={}, totals=totals, grand_total=0, orders=list(orders))

    work = pd.DataFrame(rows, columns=["__row__", "__family__", "__size__", "__qty__"])

    products = _pivot(work, "__row__")
    color_totals = _pivot(work, "__family__")

    by_size = work.groupby("__size__", sort=False)["__qty__"].sum()
    for size, qty in by_size.items():
        totals[size] = int(qty)
    grand_total = sum(totals.values())

    logger.info(
        "Aggregated %d items into %d product rows and %d colour families (%d pieces, %d excluded)",
        len(rows), len(products), len(color_totals), grand_total, len(items) - len(rows),
    )
    return AggregatedData(
        products=products,
        color_totals=color_totals,
        totals=totals,
        grand_total=grand_total,
        orders=list(orders),
    )


def _pivot(work: pd.DataFrame, index_col: str) -> Dict[str, Dict[str, int]]:
    """Sum quantities by (index_col, size) in first-seen row order, all sizes present."""
    pvt = (
        work.pivot_table(
            index=index_col,
            columns="__size__",
            values="__qty__",
            aggfunc="sum",
            fill_value=0,
            sort=False,
        )
        .reindex(columns=ORDERED_SIZES, fill_value=0)
    )
    return {
        str(key): {s: int(row[s]) for s in ORDERED_SIZES}
        for key, row in pvt.iterrows()
    }


# ==============================
# Views
# ==============================


def product_rows(data: AggregatedData, sort_field: str = "name", direction: str = "asc") -> List[ProductRow]:
    """
    Product pivot as sorted rows with a per-row total.

    Args:
        data: Aggregation to read.
        sort_field: "name" (case-insensitive) or "total".
        direction: "asc" or "desc".

    Raises:
        ValueError: On an unknown sort field or direction.
    """
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_field}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction}")

    rows = [
        ProductRow(name=name, sizes=dict(sizes), total=sum(sizes.get(s, 0) for s in ORDERED_SIZES))
        for name, sizes in data.products.items()
    ]
    if sort_field == "name":
        key = lambda r: r.name.casefold()
    else:
        key = lambda r: r.total
    return sorted(rows, key=key, reverse=(direction == "desc"))


def quick_stats(data: AggregatedData) -> Dict[str, object]:
    """Headline numbers: unique products, total pieces, top product and top colour family."""
    rows = product_rows(data)
    top_product = _top([(r.name, r.total) for r in rows])
    top_color = _top([
        (family, sum(sizes.get(s, 0) for s in ORDERED_SIZES))
        for family, sizes in data.color_totals.items()
    ])
    return {
        "unique_products": len(rows),
        "total_items": data.grand_total,
        "top_product": {"name": top_product[0], "total": top_product[1]},
        "top_color": {"color": top_color[0], "total": top_color[1]},
    }


def _top(entries: List[Tuple[str, int]]) -> Tuple[str, int]:
    # later entries win ties
    best = entries[0] if entries else ("-", 0)
    for entry in entries[1:]:
        if entry[1] >= best[1]:
            best = entry
    return best
