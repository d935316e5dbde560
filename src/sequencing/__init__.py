"""Per-patient treatment sequences and their frequency distribution.

Public API
----------
- :func:`build_sequences` — Ordered, first-occurrence-deduplicated sequence per patient
- :func:`aggregate_sequences` — Count patients per distinct sequence string
- :func:`summarize_treatments` — Builder + aggregator with display tables
- :class:`SequenceConfig` — Column names, separator and tie-break policy
"""

from .aggregator import aggregate_sequences
from .builder import build_sequences, first_occurrences
from .config import SequenceConfig
from .errors import OrderingError, SequenceError, ValidationError
from .records import Event, PatientSequence, SequenceFrequency
from .summary import TreatmentSummary, summarize_treatments

__all__ = [
    "aggregate_sequences",
    "build_sequences",
    "first_occurrences",
    "summarize_treatments",
    "SequenceConfig",
    "Event",
    "PatientSequence",
    "SequenceFrequency",
    "TreatmentSummary",
    "SequenceError",
    "ValidationError",
    "OrderingError",
]
