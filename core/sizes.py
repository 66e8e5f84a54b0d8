"""
sizes.py

Canonical apparel size vocabulary and the free-text -> canonical lookup used
by the line-item parser and the pivot builder.
"""

from __future__ import annotations

from typing import Dict, List, Optional

# Canonical size order (column order of every pivot and export)
ORDERED_SIZES: List[str] = ["XS", "SMALL", "MEDIUM", "LARGE", "XL", "2XL", "3XL"]

# Upper-cased token -> canonical size
SIZE_MAPPING: Dict[str, str] = {
    "XS": "XS",
    "XSMALL": "XS",

    "S": "SMALL",
    "SMALL": "SMALL",
    "SM": "SMALL",

    "M": "MEDIUM",
    "MEDIUM": "MEDIUM",
    "MD": "MEDIUM",

    "L": "LARGE",
    "LARGE": "LARGE",
    "LG": "LARGE",

    "XL": "XL",
    "XLARGE": "XL",

    "2XL": "2XL",
    "XXL": "2XL",
    "2X": "2XL",

    "3XL": "3XL",
    "XXXL": "3XL",
    "3X": "3XL",
}


def normalize_size(token: str | None) -> Optional[str]:
    """
    Map a free-text size token to its canonical size.

    Args:
        token: Raw size text, e.g. "sm", "XXL", "Medium".

    Returns:
        The canonical size string, or None when the token is not recognised.
    """
    if not token:
        return None
    return SIZE_MAPPING.get(token.upper())


def is_canonical(size: str) -> bool:
    return size in ORDERED_SIZES


def empty_size_row() -> Dict[str, int]:
    """A size -> count mapping with every canonical size present at zero."""
    return {s: 0 for s in ORDERED_SIZES}
