"""CSV reading and writing of treatment event tables.

Public API
----------
- ``load_events()`` – Read and type an event CSV.
- ``save_table()``  – Write any table (events, summaries) atomically.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from src.sequencing.config import SequenceConfig
from src.sequencing.errors import OrderingError, ValidationError

logger = logging.getLogger(__name__)


# Helpers
def _normalize_patient_id(value) -> Optional[str]:
    """
    Canonical patient id representation. Prevents 1 vs 1.0 vs "1".
    """
    if pd.isna(value):
        return None
    s = str(value).strip()
    if not s:
        return None
    # Collapse float-like integers: "1.0" -> "1". Ids with a leading zero
    # ("007", "007.0") are kept verbatim.
    digits = s.lstrip("+-")
    if "." in s and not (digits.startswith("0") and digits[1:2].isdigit()):
        try:
            f = float(s)
            if f.is_integer():
                return str(int(f))
        except (ValueError, OverflowError):
            pass
    return s


def _atomic_write_csv(df: pd.DataFrame, path: Path) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    df.to_csv(tmp, index=False)
    tmp.replace(path)


def load_events(
    path: str | Path,
    config: Optional[SequenceConfig] = None,
    date_format: Optional[str] = None,
    dayfirst: bool = False,
) -> pd.DataFrame:
    """Load an event CSV with typed patient ids, labels and dates.

    Patient ids are read as strings and normalised; dates are parsed with
    ``pd.to_datetime``.  Empty date cells stay missing (``NaT``) and are
    rejected later by the builder.

    Raises
    ------
    FileNotFoundError
        ``path`` does not exist.
    ValidationError
        The file is empty or not valid CSV, or a required column is absent.
    OrderingError
        A non-empty date cell cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Event file not found: {path}")

    config = config or SequenceConfig()
    pid_col, label_col, date_col = (
        config.patient_column,
        config.treatment_column,
        config.date_column,
    )

    try:
        df = pd.read_csv(path, dtype={pid_col: str, label_col: str, date_col: str})
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise ValidationError(f"Could not parse event file {path.name}: {e}") from e

    missing = [c for c in (pid_col, label_col, date_col) if c not in df.columns]
    if missing:
        raise ValidationError(f"Missing required event columns in {path.name}: {missing}")

    df[pid_col] = df[pid_col].apply(_normalize_patient_id).astype(object)

    raw_dates = df[date_col]
    parsed = pd.to_datetime(raw_dates, format=date_format, dayfirst=dayfirst, errors="coerce")
    unparseable = parsed.isna() & raw_dates.notna()
    if unparseable.any():
        bad = raw_dates[unparseable].head(5).tolist()
        raise OrderingError(
            f"Unparseable {date_col} values in {path.name} "
            f"({int(unparseable.sum())} rows), e.g. {bad}"
        )
    df[date_col] = parsed

    logger.info("Loaded %d events from %s", len(df), path)
    return df


def save_table(df: pd.DataFrame, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_csv(df, path)
    logger.info("Saved %d rows to %s", len(df), path)
    return path
