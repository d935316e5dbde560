"""End-to-end treatment sequence summary.

Runs the builder and the aggregator on one event table and exposes both
results as display-ready tables.

Public API
----------
- ``summarize_treatments(events)`` → ``TreatmentSummary``
- ``TreatmentSummary``              – Per-patient and per-sequence results.
- ``sequences_to_frame()``          – ``list[PatientSequence]`` → DataFrame.
- ``frequencies_to_frame()``        – ``list[SequenceFrequency]`` → DataFrame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from .aggregator import aggregate_sequences
from .builder import EventInput, build_sequences
from .config import (
    COUNT,
    DISPLAY_COUNT,
    DISPLAY_PATIENT_ID,
    DISPLAY_SEQUENCE,
    PATIENT_ID,
    SEQUENCE,
    SequenceConfig,
)
from .records import PatientSequence, SequenceFrequency

logger = logging.getLogger(__name__)


def sequences_to_frame(sequences: list[PatientSequence]) -> pd.DataFrame:
    """Return ``patient_id`` / ``sequence`` columns, one row per patient."""
    return pd.DataFrame(
        [s.to_dict() for s in sequences], columns=[PATIENT_ID, SEQUENCE]
    )


def frequencies_to_frame(frequencies: list[SequenceFrequency]) -> pd.DataFrame:
    """Return ``sequence`` / ``count`` columns, one row per distinct sequence."""
    frame = pd.DataFrame([f.to_dict() for f in frequencies], columns=[SEQUENCE, COUNT])
    return frame.astype({COUNT: "int64"})


@dataclass(frozen=True)
class TreatmentSummary:
    """Result of summarising one event table.

    Attributes
    ----------
    patients : list[PatientSequence]
        One sequence per patient, in first-seen order.
    frequencies : list[SequenceFrequency]
        One entry per distinct sequence, most frequent first.
    """

    patients: list[PatientSequence] = field(default_factory=list)
    frequencies: list[SequenceFrequency] = field(default_factory=list)

    @property
    def n_patients(self) -> int:
        return len(self.patients)

    @property
    def n_sequences(self) -> int:
        return len(self.frequencies)

    def patient_table(self) -> pd.DataFrame:
        """Per-patient table with display column names."""
        return sequences_to_frame(self.patients).rename(
            columns={PATIENT_ID: DISPLAY_PATIENT_ID, SEQUENCE: DISPLAY_SEQUENCE}
        )

    def frequency_table(self) -> pd.DataFrame:
        """Per-sequence table with display column names, sorted by ``n``."""
        return frequencies_to_frame(self.frequencies).rename(
            columns={SEQUENCE: DISPLAY_SEQUENCE, COUNT: DISPLAY_COUNT}
        )

    def summary(self) -> dict:
        """Return a concise summary dict (useful for logging / UI)."""
        top = self.frequencies[0] if self.frequencies else None
        return {
            "patients": self.n_patients,
            "distinct_sequences": self.n_sequences,
            "most_common": top.sequence if top else None,
            "most_common_n": top.count if top else 0,
            "longest_sequence": max((len(p) for p in self.patients), default=0),
        }


def summarize_treatments(
    events: EventInput,
    config: Optional[SequenceConfig] = None,
) -> TreatmentSummary:
    """Build per-patient sequences and their frequency distribution.

    Every patient contributes exactly one count, so the counts of
    ``frequencies`` always sum to ``n_patients``.
    """
    config = config or SequenceConfig()
    patients = build_sequences(events, config)
    frequencies = aggregate_sequences(patients, config)

    result = TreatmentSummary(patients=patients, frequencies=frequencies)
    logger.info(
        "Treatment summary: %d patients, %d distinct sequences",
        result.n_patients,
        result.n_sequences,
    )
    return result
