"""
reader.py

Loads an exported CSV into an ordered list of string-keyed records.

Every cell is kept as text (no NA coercion) so downstream parsing decides what
counts as empty or numeric. Fully blank lines are skipped.

The header row fixes the width of every record: short rows are padded with
empty strings and fields past the last header column are dropped, so a
trailing comma never shifts values into the wrong column.
"""

from __future__ import annotations

import io
import logging
from typing import Dict, List, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

Record = Dict[str, str]

_READ_OPTS = dict(
    header=None,
    dtype=str,
    keep_default_na=False,
    skip_blank_lines=True,
    engine="python",
)


class CSVReadError(ValueError):
    """The source file could not be read as CSV at all."""


def read_records(source) -> Tuple[List[str], List[Record]]:
    """
    Read a CSV file into (columns, records).

    Args:
        source: A path or a binary/text file-like object.

    Returns:
        A tuple of:
            - columns: Header names in declared order.
            - records: One dict per data row, values as raw strings.

    Raises:
        CSVReadError: If the file is empty or cannot be parsed.
    """
    try:
        text = _load_text(source)
        width = pd.read_csv(io.StringIO(text), nrows=1, **_READ_OPTS).shape[1]

        def _drop_extra_fields(fields: List[str]) -> List[str]:
            return fields[:width]

        df = pd.read_csv(io.StringIO(text), on_bad_lines=_drop_extra_fields, **_READ_OPTS)
    except pd.errors.EmptyDataError as e:
        raise CSVReadError("CSV file is empty") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        logger.error("Could not parse CSV: %s", e)
        raise CSVReadError(f"Could not parse CSV: {e}") from e

    # short rows leave trailing cells as NaN
    df = df.fillna("")
    columns = [str(c) for c in df.iloc[0]]
    records: List[Record] = [
        dict(zip(columns, row)) for row in df.iloc[1:].itertuples(index=False, name=None)
    ]
    logger.info("Read %d rows with %d columns", len(records), len(columns))
    return columns, records


def _load_text(source) -> str:
    if hasattr(source, "read"):
        raw = source.read()
    else:
        with open(source, "rb") as f:
            raw = f.read()
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8-sig")
    return raw.lstrip("\ufeff")
