"""
parser.py

This module turns order-export records (one row per line item, with order
header fields repeated or blank on continuation rows) into:

1) Line items: product / colour / size / quantity split out of "Lineitem name".
2) Orders: one record per unique order "Name", taken from its header row.

Both are collected in a single pass over the records. Malformed rows degrade
to sentinel values or are skipped; nothing here raises on bad data.

Public API:
    parse_line_item(raw_name: str, raw_quantity: str, row_id: str) -> LineItem | None
    parse_orders(records: list[dict]) -> ParseResult
"""

from __future__ import annotations

import logging
import math
import re
from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.models import LineItem, Order, ParseResult
from core.sizes import normalize_size

logger = logging.getLogger(__name__)

# Input columns consumed from the orders export
QTY_COL = "Lineitem quantity"
NAME_COL = "Lineitem name"
ORDER_COL = "Name"
DATE_COL = "Created at"
TOTAL_COL = "Total"
SUBTOTAL_COL = "Subtotal"

REQUIRED_COLS = [QTY_COL, NAME_COL, ORDER_COL, DATE_COL, TOTAL_COL, SUBTOTAL_COL]

UNKNOWN = "Unknown"
STANDARD_COLOR = "Standard"
ONE_SIZE = "One Size"

_INT_RE = re.compile(r"^[+-]?\d+$")

# ==============================
# Public API
# ==============================


def parse_orders(records: List[Dict[str, str]]) -> ParseResult:
    """
    Parse line items and unique orders from export records.

    Args:
        records: Rows as produced by the CSV reader (string-keyed, string values).

    Returns:
        A ParseResult with items in row order and orders in first-seen order.
    """
    items: List[LineItem] = []
    orders: Dict[str, Order] = {}
    skipped = 0

    for index, row in enumerate(records):
        raw_name = _cell(row, NAME_COL)
        item = parse_line_item(raw_name, _cell(row, QTY_COL), f"{index}-{raw_name}")
        if item is not None:
            items.append(item)
        else:
            skipped += 1
            logger.debug("Row %d is not a line item (name=%r)", index, raw_name)

        order = _extract_order(row)
        if order is not None and order.name not in orders:
            orders[order.name] = order

    logger.info(
        "Parsed %d line items and %d orders from %d rows (%d non-item rows)",
        len(items), len(orders), len(records), skipped,
    )
    return ParseResult(items=items, orders=list(orders.values()), rows_read=len(records))


def parse_line_item(raw_name: str, raw_quantity: str, row_id: str = "") -> Optional[LineItem]:
    """
    Build a LineItem from a raw "Lineitem name" and quantity.

    The name is expected as "Product - Color / Size" (either order of colour
    and size). Whatever cannot be resolved falls back to sentinels:

        "Classic Tee - Navy / Large"    -> Classic Tee, Navy, LARGE
        "Classic Tee - Large"           -> Classic Tee, Standard, LARGE
        "Classic Tee - Special Edition" -> Classic Tee, Special Edition, One Size
        "Gift Card"                     -> Gift Card, Unknown, Unknown

    Args:
        raw_name: Line item name text.
        raw_quantity: Quantity text.
        row_id: Identity string carried on the item.

    Returns:
        The parsed LineItem, or None if the name is empty or the quantity is
        not a positive integer.
    """
    quantity = _to_int(raw_quantity)
    if not raw_name or quantity is None or quantity <= 0:
        return None

    product_name, color, size = split_item_name(raw_name)
    return LineItem(
        id=row_id or raw_name,
        product_name=product_name,
        color=color,
        size=size,
        quantity=quantity,
    )


def split_item_name(raw_name: str) -> Tuple[str, str, str]:
    """Split a line item name into (product, color, size)."""
    parts = raw_name.split(" - ")
    if len(parts) < 2:
        return raw_name, UNKNOWN, UNKNOWN

    suffix = parts[-1]
    product_name = " - ".join(parts[:-1])
    suffix_parts = [p.strip() for p in suffix.split("/")]

    if len(suffix_parts) == 2:
        part_a, part_b = suffix_parts
        size_a = normalize_size(part_a)
        if size_a:
            return product_name, part_b, size_a
        size_b = normalize_size(part_b)
        if size_b:
            return product_name, part_a, size_b
        return product_name, suffix, UNKNOWN

    # One part, or several "/" that we do not try to interpret
    size = normalize_size(suffix)
    if size:
        return product_name, STANDARD_COLOR, size
    return product_name, suffix, ONE_SIZE


# ==============================
# Orders
# ==============================


def _extract_order(row: Dict[str, str]) -> Optional[Order]:
    """
    Build an Order from a header row.

    Continuation rows share the order name but leave "Created at" blank; they
    never produce an Order.
    """
    name = _cell(row, ORDER_COL)
    created_at = _cell(row, DATE_COL)
    if not name or not created_at:
        return None

    total = parse_money(_cell(row, TOTAL_COL)) or 0.0
    subtotal = parse_money(_cell(row, SUBTOTAL_COL)) or 0.0
    return Order(
        id=name,
        name=name,
        date=_to_timestamp(created_at),
        total=total,
        subtotal=subtotal,
        shipping_cost=0.0,
        net_earnings=total,
    )


# ==============================
# Helpers
# ==============================


def _cell(row: Dict[str, str], col: str) -> str:
    val = row.get(col)
    if val is None:
        return ""
    return str(val)


def _to_int(s: str | None) -> int | None:
    """
    Parse a whole integer, allowing surrounding whitespace and a sign.

    Args:
        s: Quantity text.

    Returns:
        Parsed integer, or None if the text is not an integer.
    """
    if not s:
        return None
    s2 = str(s).strip()
    if not _INT_RE.match(s2):
        return None
    return int(s2)


def parse_money(s: str | None) -> float | None:
    """
    Parse a currency-like string to float.

    Removes "$", commas, and optional leading "USD". Returns None on failure.
    """
    if not s:
        return None
    s2 = str(s).replace("$", "").replace(",", "").strip()
    if s2.upper().startswith("USD"):
        s2 = s2[3:].strip()
    try:
        val = float(s2)
    except ValueError:
        return None
    return val if math.isfinite(val) else None


def _to_timestamp(s: str) -> pd.Timestamp:
    """Parse an order date as naive UTC; offset-bearing and bare dates compare alike."""
    ts = pd.to_datetime(s, errors="coerce", utc=True)
    if pd.isna(ts):
        logger.warning("Unparseable order date: %r", s)
        return pd.NaT
    return ts.tz_convert(None)
