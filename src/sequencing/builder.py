"""Per-patient treatment sequence builder.

Groups raw treatment events by patient, orders them chronologically and
keeps the first occurrence of every treatment label.

Ordering rules:
- Events are sorted by ``treatment_date`` ascending.
- Events sharing a date keep their input order (original row position is
  the explicit secondary key).
- A label already seen for a patient is skipped, even if it is
  re-administered later.

Public API
----------
- ``first_occurrences(events)`` → ``pd.DataFrame``
- ``build_sequences(events)``   → ``list[PatientSequence]``
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import pandas as pd

from .config import PATIENT_ID, TREATMENT, TREATMENT_DATE, SequenceConfig
from .errors import OrderingError
from .records import Event, PatientSequence
from .validation import ROW_COLUMN, to_event_frame, validate_events

logger = logging.getLogger(__name__)

EventInput = Union[pd.DataFrame, Iterable[Union[Event, Mapping[str, Any]]]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _prepare(events: EventInput, config: SequenceConfig) -> pd.DataFrame:
    frame = to_event_frame(events, config)
    validate_events(frame, config)
    return frame


def _sort_chronologically(frame: pd.DataFrame) -> pd.DataFrame:
    """Sort events by date, breaking same-date ties on input position."""
    try:
        return frame.sort_values([TREATMENT_DATE, ROW_COLUMN], kind="mergesort")
    except TypeError as e:
        raise OrderingError(f"treatment_date values cannot be ordered: {e}") from e


def _keep_first(frame: pd.DataFrame) -> pd.DataFrame:
    ordered = _sort_chronologically(frame)
    return ordered.drop_duplicates(subset=[PATIENT_ID, TREATMENT], keep="first")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def first_occurrences(
    events: EventInput,
    config: Optional[SequenceConfig] = None,
) -> pd.DataFrame:
    """Return one event per (patient, treatment): its earliest administration.

    The result is in chronological order and keeps the ``_row`` column so
    callers can trace every kept event back to the input.
    """
    config = config or SequenceConfig()
    frame = _prepare(events, config)
    return _keep_first(frame).reset_index(drop=True)


def build_sequences(
    events: EventInput,
    config: Optional[SequenceConfig] = None,
) -> list[PatientSequence]:
    """Build one deduplicated, chronologically ordered sequence per patient.

    Parameters
    ----------
    events : pd.DataFrame or iterable of Event / mapping
        Treatment events in any order.  Source column names are taken from
        ``config``.
    config : SequenceConfig, optional
        Column names and the separator used to render sequences.

    Returns
    -------
    list[PatientSequence]
        One entry per distinct patient, in the order patients first appear
        in ``events``.

    Raises
    ------
    ValidationError
        A record has no patient id or an invalid treatment label.
    OrderingError
        A treatment date is missing or dates cannot be compared.
    """
    config = config or SequenceConfig()
    frame = _prepare(events, config)

    if frame.empty:
        logger.warning("No treatment events provided; no sequences built")
        return []

    # Patients in first-seen input order
    labels: dict[Any, list[str]] = {pid: [] for pid in dict.fromkeys(frame[PATIENT_ID])}

    kept = _keep_first(frame)
    for pid, treatment in zip(kept[PATIENT_ID], kept[TREATMENT]):
        labels[pid].append(treatment)

    logger.info(
        "Built %d patient sequences from %d events (%d first occurrences)",
        len(labels),
        len(frame),
        len(kept),
    )

    return [
        PatientSequence(patient_id=pid, treatments=tuple(treatments), separator=config.separator)
        for pid, treatments in labels.items()
    ]
