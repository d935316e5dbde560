"""Synthetic treatment event generator.

Produces event tables in the same shape as real extracts so the sequence
summary can be demonstrated and tested without patient data.  Output is
fully determined by ``seed``.

Public API
----------
- ``DEFAULT_TREATMENTS`` – Default treatment vocabulary.
- ``simulate_events()``  – Random event table.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from src.sequencing.config import SequenceConfig

logger = logging.getLogger(__name__)


DEFAULT_TREATMENTS: tuple[str, ...] = (
    "Carboplatin",
    "Cisplatin",
    "Docetaxel",
    "Gemcitabine",
    "Nivolumab",
    "Paclitaxel",
    "Pembrolizumab",
    "Pemetrexed",
)


def simulate_events(
    n_patients: int = 100,
    treatments: Sequence[str] = DEFAULT_TREATMENTS,
    max_events: int = 6,
    start: str = "2020-01-01",
    span_days: int = 730,
    seed: Optional[int] = None,
    shuffle: bool = True,
    config: Optional[SequenceConfig] = None,
) -> pd.DataFrame:
    """Generate a random event table.

    Each patient receives between 1 and ``max_events`` administrations,
    labels drawn uniformly from ``treatments`` and dates drawn uniformly
    from ``[start, start + span_days)``.  Repeated labels and shared dates
    occur naturally.

    Parameters
    ----------
    n_patients : int
        Number of patients (ids ``P0001``, ``P0002``...).
    treatments : sequence of str
        Label vocabulary.
    max_events : int
        Upper bound on the number of events per patient.
    start : str
        First possible treatment date (ISO format).
    span_days : int
        Width of the date window in days.
    seed : int, optional
        Seed for ``numpy.random.default_rng``.
    shuffle : bool
        Shuffle rows so the table carries no ordering guarantee.
    config : SequenceConfig, optional
        Column names of the generated table.

    Returns
    -------
    pd.DataFrame
        One row per event with patient, treatment and date columns.
    """
    if n_patients < 0:
        raise ValueError(f"n_patients must be >= 0, got {n_patients}")
    if max_events < 1:
        raise ValueError(f"max_events must be >= 1, got {max_events}")
    if span_days < 1:
        raise ValueError(f"span_days must be >= 1, got {span_days}")
    if len(treatments) == 0:
        raise ValueError("treatments must not be empty")

    config = config or SequenceConfig()
    rng = np.random.default_rng(seed)

    width = max(4, len(str(n_patients)))
    patient_ids = [f"P{i:0{width}d}" for i in range(1, n_patients + 1)]

    events_per_patient = rng.integers(1, max_events + 1, size=n_patients)
    total = int(events_per_patient.sum())

    labels = rng.choice(np.asarray(treatments, dtype=object), size=total)
    offsets = rng.integers(0, span_days, size=total)

    df = pd.DataFrame(
        {
            config.patient_column: np.repeat(np.asarray(patient_ids, dtype=object), events_per_patient),
            config.treatment_column: labels,
            config.date_column: pd.Timestamp(start) + pd.to_timedelta(offsets, unit="D"),
        }
    )

    if shuffle and total:
        df = df.iloc[rng.permutation(total)].reset_index(drop=True)

    logger.info(
        "Simulated %d events for %d patients (seed=%s)", total, n_patients, seed
    )
    return df
