"""Frequency distribution of rendered treatment sequences.

Public API
----------
- ``aggregate_sequences(sequences)`` → ``list[SequenceFrequency]``
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional, Union

import pandas as pd

from .config import COUNT, SEQUENCE, SequenceConfig
from .records import PatientSequence, SequenceFrequency

logger = logging.getLogger(__name__)

_FIRST_SEEN = "_first_seen"


def aggregate_sequences(
    sequences: Iterable[Union[PatientSequence, str]],
    config: Optional[SequenceConfig] = None,
) -> list[SequenceFrequency]:
    """Count how many patients share each distinct sequence string.

    Sequences are grouped on their rendered string (exact, case-sensitive)
    and returned by descending count.  Equal counts are ordered according
    to ``config.tie_break``:

    - ``"lexicographic"`` — ascending on the sequence string.
    - ``"first_seen"`` — order in which each sequence first appears in
      ``sequences``.

    Parameters
    ----------
    sequences : iterable of PatientSequence or str
        Per-patient sequences.  Plain strings are taken as already
        rendered sequences.
    config : SequenceConfig, optional
        Provides the tie-break policy.

    Returns
    -------
    list[SequenceFrequency]
        One entry per distinct sequence; empty when ``sequences`` is empty.
    """
    config = config or SequenceConfig()
    rendered = [s.sequence if isinstance(s, PatientSequence) else s for s in sequences]

    if not rendered:
        return []

    series = pd.Series(rendered, dtype=object, name=SEQUENCE)
    counts = series.groupby(series, sort=False).size()
    frame = pd.DataFrame({SEQUENCE: counts.index, COUNT: counts.to_numpy()})
    frame[_FIRST_SEEN] = range(len(frame))

    if config.tie_break == "lexicographic":
        frame = frame.sort_values(
            [COUNT, SEQUENCE], ascending=[False, True], kind="mergesort"
        )
    else:
        frame = frame.sort_values([COUNT, _FIRST_SEEN], ascending=[False, True], kind="mergesort")

    logger.info(
        "Aggregated %d sequences into %d distinct groups",
        len(rendered),
        len(frame),
    )

    return [
        SequenceFrequency(sequence=seq, count=int(n))
        for seq, n in zip(frame[SEQUENCE], frame[COUNT])
    ]
