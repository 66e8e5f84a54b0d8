"""
earnings.py

Per-order payment-processor fees and batch profitability.

Per order:
    shopify_fee    = total * (percent / 100) + fixed
    net_after_fees = subtotal - shopify_fee        (ranking only)

Per batch:
    net_profit = sum(subtotal) - shipping - sum(shopify_fee) - blank_costs

Shipping and blank-goods costs are batch totals. Every monetary input that
does not parse as a number counts as zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from core.models import Order
from core.parser import parse_money

logger = logging.getLogger(__name__)

DEFAULT_FEE_PERCENT = 2.9
DEFAULT_FEE_FIXED = 0.30

SORT_FIELDS = ("date", "net")
SORT_DIRECTIONS = ("asc", "desc")

Amount = Union[str, float, int, None]


@dataclass(frozen=True)
class OrderEarnings:
    order: Order
    shopify_fee: float
    net_after_fees: float
    shipping_cost: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        out = self.order.to_dict()
        out.update(
            shipping_cost=self.shipping_cost,
            shopify_fee=self.shopify_fee,
            net_after_fees=self.net_after_fees,
        )
        return out


@dataclass(frozen=True)
class EarningsStats:
    total_subtotal: float
    total_shipping: float
    total_shopify: float
    total_blank: float
    net_profit: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "total_subtotal": self.total_subtotal,
            "total_shipping": self.total_shipping,
            "total_shopify": self.total_shopify,
            "total_blank": self.total_blank,
            "net_profit": self.net_profit,
        }


def to_amount(value: Amount) -> float:
    """Coerce a user-entered amount (text or number) to float; anything unparseable is 0.

    A trailing "%" is ignored, so "2.9%" reads as 2.9.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if pd.notna(value) else 0.0
    if isinstance(value, str):
        value = value.strip()
        if value.endswith("%"):
            value = value[:-1]
    return parse_money(value) or 0.0


def shopify_fee(total: float, percent: Amount, fixed: Amount) -> float:
    return total * (to_amount(percent) / 100) + to_amount(fixed)


def process_orders(
    orders: Sequence[Order],
    percent: Amount = DEFAULT_FEE_PERCENT,
    fixed: Amount = DEFAULT_FEE_FIXED,
    shipping_costs: Optional[Mapping[str, float]] = None,
    *,
    sort_field: str = "net",
    direction: str = "desc",
) -> List[OrderEarnings]:
    """
    Compute fees per order and sort the result.

    Args:
        orders: Unique orders from the import.
        percent: Percentage fee rate, e.g. 2.9.
        fixed: Fixed fee per order, e.g. 0.30.
        shipping_costs: Optional order name -> cost lookup; missing orders cost 0.
        sort_field: "date" (unparseable dates last) or "net".
        direction: "asc" or "desc".

    Returns:
        One OrderEarnings per order. The orders themselves are left untouched.

    Raises:
        ValueError: On an unknown sort field or direction.
    """
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_field}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction}")

    lookup = shipping_costs or {}
    rows = []
    for o in orders:
        fee = shopify_fee(o.total, percent, fixed)
        rows.append(
            OrderEarnings(
                order=o,
                shopify_fee=fee,
                net_after_fees=o.subtotal - fee,
                shipping_cost=float(lookup.get(o.name, 0.0)),
            )
        )

    reverse = direction == "desc"
    if sort_field == "net":
        return sorted(rows, key=lambda r: r.net_after_fees, reverse=reverse)

    dated = [r for r in rows if pd.notna(r.order.date)]
    undated = [r for r in rows if pd.isna(r.order.date)]
    return sorted(dated, key=lambda r: r.order.date, reverse=reverse) + undated


def earnings_stats(
    rows: Sequence[OrderEarnings],
    shipping_cost: Amount = None,
    blank_costs: Amount = 0,
) -> EarningsStats:
    """
    Batch totals and net profit.

    Args:
        rows: Output of process_orders.
        shipping_cost: Batch shipping total. When None, the per-order shipping
            costs merged by process_orders are summed instead.
        blank_costs: Batch blank-goods cost.
    """
    total_subtotal = sum(r.order.subtotal for r in rows)
    total_shopify = sum(r.shopify_fee for r in rows)
    if shipping_cost is None:
        total_shipping = sum(r.shipping_cost for r in rows)
    else:
        total_shipping = to_amount(shipping_cost)
    total_blank = to_amount(blank_costs)

    net_profit = total_subtotal - total_shipping - total_shopify - total_blank
    logger.info(
        "Earnings for %d orders: subtotal=%.2f fees=%.2f shipping=%.2f blanks=%.2f net=%.2f",
        len(rows), total_subtotal, total_shopify, total_shipping, total_blank, net_profit,
    )
    return EarningsStats(
        total_subtotal=total_subtotal,
        total_shipping=total_shipping,
        total_shopify=total_shopify,
        total_blank=total_blank,
        net_profit=net_profit,
    )
