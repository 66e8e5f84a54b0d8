from __future__ import annotations

from typing import List

# Checked in order; first keyword found in the colour text wins
COLOR_FAMILIES: List[str] = ["black", "white", "brown", "storm", "blue"]


def detect_color_family(color: str) -> str:
    """
    Bucket a free-text colour into a coarse family.

    "Heather Black" -> "black", "Storm Blue" -> "storm". Colours matching no
    family keyword are returned unchanged and act as their own family.
    """
    lower = (color or "").lower()
    for family in COLOR_FAMILIES:
        if family in lower:
            return family
    return color
