"""Table helpers shared by the viewers.

Filtering, sorting and column sizing for the display tables produced by
``TreatmentSummary``.  Kept free of Qt so it can be used from scripts and
tests.
"""

from __future__ import annotations

import pandas as pd

from src.sequencing.config import DISPLAY_SEQUENCE

# Minimum column width in characters.
MIN_COLUMN_WIDTH = 8
# Character width used by the Qt viewer to turn characters into pixels.
CHAR_WIDTH_PX = 8


def filter_sequences(
    table: pd.DataFrame,
    query: str,
    column: str = DISPLAY_SEQUENCE,
) -> pd.DataFrame:
    """Keep rows whose ``column`` contains ``query`` (case-insensitive).

    A blank query returns the table unchanged.  The query is matched as
    plain text, never as a regular expression.
    """
    query = (query or "").strip()
    if not query:
        return table
    mask = table[column].astype(str).str.contains(query, case=False, regex=False)
    return table[mask]


def sort_table(table: pd.DataFrame, column: str, ascending: bool = True) -> pd.DataFrame:
    """Stable sort on one column."""
    if column not in table.columns:
        raise KeyError(f"Unknown column: {column}")
    return table.sort_values(column, ascending=ascending, kind="mergesort")


def column_widths(table: pd.DataFrame, minimum: int = MIN_COLUMN_WIDTH) -> dict[str, int]:
    """Width in characters per column: longest of header and cells, floored."""
    widths: dict[str, int] = {}
    for col in table.columns:
        longest = table[col].astype(str).str.len().max() if len(table) else 0
        widths[col] = max(minimum, len(str(col)), int(longest))
    return widths
