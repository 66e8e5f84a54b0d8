"""
checklist.py

Helpers over the fulfilment checklist: a plain mapping of
"{Product - Color}_{SIZE}" -> pieces done, owned by whoever displays it.

Older saves stored True for a finished cell; that still reads as "all done".
Nothing here mutates the mapping it is given.
"""

from __future__ import annotations

from typing import Dict, Mapping

from core.models import AggregatedData
from core.sizes import ORDERED_SIZES


def cell_key(row_key: str, size: str) -> str:
    return f"{row_key}_{size}"


def cell_count(checked: Mapping[str, object], row_key: str, size: str, qty: int) -> int:
    """Pieces marked done for one cell; legacy True means qty, anything non-int means 0."""
    val = checked.get(cell_key(row_key, size))
    if val is True:
        return qty
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    return 0


def toggle_cell(
    checked: Mapping[str, object],
    row_key: str,
    size: str,
    qty: int,
    delta: int,
) -> Dict[str, object]:
    """
    Return a copy of the checklist with one cell moved by delta, clamped to [0, qty].
    """
    current = cell_count(checked, row_key, size, qty)
    nxt = min(max(current + delta, 0), qty)
    out = dict(checked)
    out[cell_key(row_key, size)] = nxt
    return out


def progress_stats(data: AggregatedData, checked: Mapping[str, object]) -> Dict[str, float]:
    """
    Overall fulfilment progress against the product pivot.

    Stale keys (products no longer in the pivot) are ignored; done counts are
    capped at each cell's quantity.
    """
    checked_count = 0
    for name, sizes in data.products.items():
        for size in ORDERED_SIZES:
            qty = sizes.get(size, 0)
            if qty > 0:
                checked_count += min(cell_count(checked, name, size, qty), qty)

    total = data.grand_total
    return {
        "checked_count": checked_count,
        "total_count": total,
        "percent": (checked_count / total) * 100 if total > 0 else 0.0,
    }
