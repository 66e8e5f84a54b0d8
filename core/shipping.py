"""
shipping.py

Builds an order name -> shipping cost lookup from a loosely structured export
(e.g. a "shipping charges by order" report or a label purchase history).

Column names vary between exports, so the key and value columns are picked by
pattern: the first declared column matching each pattern wins. A file where
either column cannot be found yields an empty lookup, never an error.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern

logger = logging.getLogger(__name__)

ORDER_KEY_PATTERNS: List[Pattern[str]] = [
    re.compile(r"order\s*name|order\s*id|name", re.I),
]
COST_PATTERNS: List[Pattern[str]] = [
    re.compile(r"shipping\s*charge|cost|amount|price|label", re.I),
]

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]+")


def find_column(columns: Iterable[str], patterns: List[Pattern[str]]) -> Optional[str]:
    """
    Return the first column matching any of the patterns, trying patterns in order.

    Returns None when nothing matches.
    """
    cols = list(columns)
    for pat in patterns:
        for c in cols:
            if pat.search(str(c)):
                return c
    return None


def normalize_order_name(name: str) -> str:
    """ "1234" and "#1234" both become "#1234". """
    n = name.strip()
    if not n.startswith("#"):
        n = "#" + n
    return n


def parse_cost(value: str) -> Optional[float]:
    """Strip everything except digits, "." and "-" and parse; None if that fails."""
    cleaned = _NON_NUMERIC_RE.sub("", value or "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def resolve_shipping_costs(columns: List[str], records: List[Dict[str, str]]) -> Dict[str, float]:
    """
    Build the shipping cost lookup.

    Args:
        columns: Header names in declared order.
        records: Data rows keyed by header name.

    Returns:
        Mapping of normalised order name ("#1234") to cost. Later rows for the
        same order overwrite earlier ones.
    """
    name_key = find_column(columns, ORDER_KEY_PATTERNS)
    cost_key = find_column(columns, COST_PATTERNS)
    if not name_key or not cost_key:
        logger.warning("Could not auto-detect shipping columns in %s", columns)

    costs: Dict[str, float] = {}
    skipped = 0
    for row in records:
        name = str(row.get(name_key) or "") if name_key else ""
        cost_val = str(row.get(cost_key) or "") if cost_key else ""
        if not name.strip() or not cost_val:
            continue

        cost = parse_cost(cost_val)
        if cost is None:
            skipped += 1
            continue
        costs[normalize_order_name(name)] = cost

    logger.info(
        "Resolved shipping costs for %d orders (name=%r, cost=%r, %d unparseable)",
        len(costs), name_key, cost_key, skipped,
    )
    return costs
