"""Event table normalisation and validation.

Brings any supported event input to a canonical ``pd.DataFrame`` and
rejects malformed records before any sequence is built.  Bad rows are
caught here because a corrupted sequence cannot be detected after
aggregation.

Public API
----------
- ``to_event_frame()``   – Normalise events to the canonical columns.
- ``validate_events()``  – Check ids, labels and dates; raise on failure.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Mapping
from typing import Any, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from .config import PATIENT_ID, TREATMENT, TREATMENT_DATE, SequenceConfig
from .errors import OrderingError, ValidationError
from .records import Event

logger = logging.getLogger(__name__)

ROW_COLUMN = "_row"
EVENT_COLUMNS: list[str] = [PATIENT_ID, TREATMENT, TREATMENT_DATE]

# Maximum number of offending rows quoted in an error message.
_MAX_REPORTED_ROWS = 5


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

def to_event_frame(
    events: pd.DataFrame | Iterable[Event | Mapping[str, Any]],
    config: Optional[SequenceConfig] = None,
) -> pd.DataFrame:
    """Return events as a DataFrame with canonical column names.

    Parameters
    ----------
    events : pd.DataFrame or iterable of Event / mapping
        Source events.  DataFrame and mapping columns are looked up with
        the names configured in ``config``; ``Event`` models are used as is.
    config : SequenceConfig, optional
        Source column names.  Defaults to ``SequenceConfig()``.

    Returns
    -------
    pd.DataFrame
        Columns ``patient_id``, ``treatment``, ``treatment_date`` and
        ``_row`` (0-based position of the event in the input).
    """
    config = config or SequenceConfig()

    if isinstance(events, pd.DataFrame):
        missing = [c for c in config.source_columns if c not in events.columns]
        if missing:
            raise ValidationError(f"Missing required event columns: {missing}")
        frame = events[list(config.source_columns)].rename(columns=config.source_columns)
        frame = frame.reset_index(drop=True)
    else:
        frame = pd.DataFrame(
            [_record_to_dict(i, record, config) for i, record in enumerate(events)],
            columns=EVENT_COLUMNS,
        )

    frame[ROW_COLUMN] = range(len(frame))
    return frame


def _record_to_dict(
    index: int,
    record: Event | Mapping[str, Any],
    config: SequenceConfig,
) -> dict[str, Any]:
    """Validate one non-tabular record through the ``Event`` model."""
    if isinstance(record, Event):
        return record.model_dump()
    if not isinstance(record, Mapping):
        raise ValidationError(
            f"Row {index}: expected an Event or a mapping, got {type(record).__name__}"
        )
    values = {canonical: record.get(source) for source, canonical in config.source_columns.items()}
    try:
        return Event.model_validate(values).model_dump()
    except PydanticValidationError as e:
        reasons = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Row {index}: invalid event ({reasons})") from e


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _rows(frame: pd.DataFrame, mask: pd.Series) -> str:
    """Format the input positions of the rows selected by ``mask``."""
    rows = frame.loc[mask, ROW_COLUMN].tolist()
    shown = ", ".join(str(r) for r in rows[:_MAX_REPORTED_ROWS])
    if len(rows) > _MAX_REPORTED_ROWS:
        shown += f", ... ({len(rows)} rows)"
    return shown


def validate_events(frame: pd.DataFrame, config: Optional[SequenceConfig] = None) -> None:
    """Check a canonical event frame, raising on the first failing rule.

    Rules
    -----
    1. ``patient_id`` is present and hashable (``ValidationError``).
    2. ``treatment`` is a non-blank string (``ValidationError``).
    3. ``treatment`` neither contains the configured separator nor starts
       or ends with part of it, otherwise two different label lists could
       render to the same string (``ValidationError``).
    4. ``treatment_date`` is present and all dates are mutually comparable
       (``OrderingError``).
    """
    config = config or SequenceConfig()
    if frame.empty:
        return

    patients = frame[PATIENT_ID].astype(object)
    missing_id = patients.isna()
    if missing_id.any():
        raise ValidationError(f"Missing patient_id in rows: {_rows(frame, missing_id)}")
    unhashable = ~patients.map(lambda v: isinstance(v, Hashable)).astype(bool)
    if unhashable.any():
        raise ValidationError(f"Unhashable patient_id in rows: {_rows(frame, unhashable)}")

    labels = frame[TREATMENT].astype(object)
    not_text = ~labels.map(lambda v: isinstance(v, str)).astype(bool)
    if not_text.any():
        raise ValidationError(
            f"Treatment label missing or not a string in rows: {_rows(frame, not_text)}"
        )
    blank = labels.str.strip() == ""
    if blank.any():
        raise ValidationError(f"Blank treatment label in rows: {_rows(frame, blank)}")
    clashing = labels.str.contains(config.separator, regex=False)
    if clashing.any():
        raise ValidationError(
            f"Treatment labels contain the separator {config.separator!r} "
            f"in rows: {_rows(frame, clashing)}"
        )
    # A label may not start with a tail of the separator nor end with its head,
    # or the separator can match across a label boundary ("a-" + "--" + "b").
    sep = config.separator
    heads = tuple(sep[:k] for k in range(1, len(sep)))
    tails = tuple(sep[k:] for k in range(1, len(sep)))
    straddling = labels.map(lambda v: v.endswith(heads) or v.startswith(tails)).astype(bool)
    if straddling.any():
        raise ValidationError(
            f"Treatment labels start or end with part of the separator {sep!r} "
            f"in rows: {_rows(frame, straddling)}"
        )

    dates = frame[TREATMENT_DATE]
    missing_date = dates.isna()
    if missing_date.any():
        raise OrderingError(f"Missing treatment_date in rows: {_rows(frame, missing_date)}")
    try:
        sorted(pd.unique(dates))
    except TypeError as e:
        raise OrderingError(f"treatment_date values cannot be ordered: {e}") from e

    logger.debug("Validated %d events", len(frame))
