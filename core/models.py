# core/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd


@dataclass(frozen=True)
class LineItem:
    """
    One purchasable line parsed from a "Lineitem name" cell.
    """
    id: str  # "{row index}-{raw name}", UI identity only
    product_name: str
    color: str
    size: str  # canonical size or a sentinel ("Unknown", "One Size")
    quantity: int

    @property
    def row_key(self) -> str:
        return f"{self.product_name} - {self.color}"


@dataclass(frozen=True)
class Order:
    """
    A unique order header, keyed by its name (e.g. "#1234").
    """
    id: str
    name: str
    date: pd.Timestamp  # NaT when "Created at" could not be parsed
    total: float
    subtotal: float
    shipping_cost: float = 0.0
    net_earnings: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": None if pd.isna(self.date) else self.date.isoformat(),
            "total": self.total,
            "subtotal": self.subtotal,
            "shipping_cost": self.shipping_cost,
            "net_earnings": self.net_earnings,
        }


@dataclass(frozen=True)
class ParseResult:
    items: List[LineItem]
    orders: List[Order]
    rows_read: int = 0


@dataclass(frozen=True)
class AggregatedData:
    """
    Pivot views built from one import.

    Every inner size mapping carries all canonical sizes, zero when absent.
    """
    products: Dict[str, Dict[str, int]]  # "Product - Color" -> size -> qty
    color_totals: Dict[str, Dict[str, int]]  # colour family -> size -> qty
    totals: Dict[str, int]
    grand_total: int
    orders: List[Order] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products": {k: dict(v) for k, v in self.products.items()},
            "color_totals": {k: dict(v) for k, v in self.color_totals.items()},
            "totals": dict(self.totals),
            "grand_total": self.grand_total,
            "orders": [o.to_dict() for o in self.orders],
        }
