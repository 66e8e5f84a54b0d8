import pandas as pd

from core.models import AggregatedData, ParseResult
from core.parser import REQUIRED_COLS
from core.sizes import is_canonical


def run_qa_checks(columns, result: ParseResult, data: AggregatedData) -> dict:
    """
    Run QA diagnostics on an orders import.

    Checks include:
        1) Required columns present.
        2) Rows that produced no line item (fees, tips, blank quantity).
        3) Line items left out of the size pivot (non-standard size).
        4) Orders whose "Created at" could not be read as a date.
        5) Pivot grand total equals the pieces counted from standard-size items.

    Args:
        columns: Header names of the imported file.
        result: Parsed line items and orders.
        data: Aggregation built from result.

    Returns:
        A dictionary with:
            - ok: Boolean indicating whether all checks passed.
            - summary: List of human-readable issue descriptions.
    """
    issues = []

    # 1) Columns present
    missing = [c for c in REQUIRED_COLS if c not in columns]
    if missing:
        issues.append(f"Missing columns: {', '.join(missing)}")

    # 2) Non-item rows
    dropped = result.rows_read - len(result.items)
    if dropped > 0:
        issues.append(f"{dropped} rows skipped (no item name or quantity)")

    # 3) Items outside the pivot
    excluded = [i for i in result.items if not is_canonical(i.size)]
    if excluded:
        pieces = sum(i.quantity for i in excluded)
        issues.append(f"{len(excluded)} items ({pieces} pcs) without a standard size")

    # 4) Dates
    bad_dates = [o.name for o in result.orders if pd.isna(o.date)]
    if bad_dates:
        issues.append(f"{len(bad_dates)} orders with unreadable date: {', '.join(bad_dates[:5])}")

    # 5) Pivot integrity
    counted = sum(i.quantity for i in result.items if is_canonical(i.size))
    if counted != data.grand_total:
        issues.append(f"Grand total mismatch: pivot={data.grand_total}, items={counted}")

    return {"ok": len(issues) == 0, "summary": issues}
