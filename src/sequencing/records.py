"""Record types flowing through the sequence pipeline.

Public API
----------
- ``Event``              – One treatment administration (input row).
- ``PatientSequence``    – Ordered, deduplicated treatments of one patient.
- ``SequenceFrequency``  – Number of patients sharing one sequence string.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .config import COUNT, DEFAULT_SEPARATOR, PATIENT_ID, SEQUENCE


# ---------------------------------------------------------------------------
# Event — input row
# ---------------------------------------------------------------------------

class Event(BaseModel):
    """One recorded administration of a treatment to a patient.

    ``treatment_date`` accepts any totally ordered value (``date``,
    ``datetime``, ``pd.Timestamp``, integer day offsets...).  Whether a
    set of dates can actually be ordered is checked by the builder.
    """

    patient_id: Any
    treatment: str
    treatment_date: Any

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "patient_id": "P001",
                    "treatment": "Cisplatin",
                    "treatment_date": "2024-03-01",
                }
            ]
        },
    )

    @field_validator("patient_id")
    @classmethod
    def _check_patient_id(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("patient_id is required")
        if not isinstance(value, Hashable):
            raise ValueError(f"patient_id must be hashable, got {type(value).__name__}")
        return value

    @field_validator("treatment")
    @classmethod
    def _check_treatment(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("treatment label must not be blank")
        return value


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatientSequence:
    """Ordered, deduplicated treatment labels received by one patient.

    Attributes
    ----------
    patient_id : Any
        Opaque patient identifier.
    treatments : tuple[str, ...]
        Distinct labels ordered by first administration date.
    separator : str
        Separator used to render ``sequence``.
    """

    patient_id: Any
    treatments: tuple[str, ...]
    separator: str = field(default=DEFAULT_SEPARATOR, repr=False)

    @property
    def sequence(self) -> str:
        """Canonical rendered sequence string (identity key downstream)."""
        return self.separator.join(self.treatments)

    def __len__(self) -> int:
        return len(self.treatments)

    def to_dict(self) -> dict[str, Any]:
        return {PATIENT_ID: self.patient_id, SEQUENCE: self.sequence}


@dataclass(frozen=True)
class SequenceFrequency:
    """Number of patients whose treatments render to ``sequence``."""

    sequence: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {SEQUENCE: self.sequence, COUNT: self.count}
