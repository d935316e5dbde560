"""Configuration for sequence building and aggregation.

Public API
----------
- ``SequenceConfig``      – Column names, separator and tie-break policy.
- ``DEFAULT_SEPARATOR``   – Separator used to render a treatment sequence.
- ``TIE_BREAKS``          – Accepted aggregator tie-break policies.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SEPARATOR = ", "

# Canonical column names used internally once an event table is normalised.
PATIENT_ID = "patient_id"
TREATMENT = "treatment"
TREATMENT_DATE = "treatment_date"
SEQUENCE = "sequence"
COUNT = "count"

# Display names bound by the presentation layer.
DISPLAY_PATIENT_ID = "Patient ID"
DISPLAY_SEQUENCE = "Treatment sequence"
DISPLAY_COUNT = "n"

TIE_BREAKS: tuple[str, ...] = ("lexicographic", "first_seen")


@dataclass(frozen=True)
class SequenceConfig:
    """Settings shared by the builder, the aggregator and the loaders.

    Attributes
    ----------
    patient_column : str
        Name of the patient identifier column in the source table.
    treatment_column : str
        Name of the treatment label column in the source table.
    date_column : str
        Name of the treatment date column in the source table.
    separator : str
        String used to join labels into the canonical sequence string.
        Labels must not contain it.
    tie_break : str
        How sequences with equal counts are ordered: ``"lexicographic"``
        (ascending on the sequence string) or ``"first_seen"`` (order in
        which each sequence was first encountered).
    """

    patient_column: str = PATIENT_ID
    treatment_column: str = TREATMENT
    date_column: str = TREATMENT_DATE
    separator: str = DEFAULT_SEPARATOR
    tie_break: str = "lexicographic"

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("separator must be a non-empty string")
        if self.tie_break not in TIE_BREAKS:
            raise ValueError(
                f"Unknown tie_break {self.tie_break!r}; expected one of {TIE_BREAKS}"
            )

    @property
    def source_columns(self) -> dict[str, str]:
        """Map source column names to canonical names."""
        return {
            self.patient_column: PATIENT_ID,
            self.treatment_column: TREATMENT,
            self.date_column: TREATMENT_DATE,
        }

    @classmethod
    def from_env(cls, **overrides) -> "SequenceConfig":
        """Build a config from ``TREATMENT_SEQ_*`` environment variables.

        Explicit keyword overrides take precedence over the environment.
        """
        values = {
            "separator": os.environ.get("TREATMENT_SEQ_SEPARATOR", DEFAULT_SEPARATOR),
            "tie_break": os.environ.get("TREATMENT_SEQ_TIE_BREAK", "lexicographic"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
