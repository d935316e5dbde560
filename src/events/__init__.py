"""Event table sources: CSV files and synthetic generation.

Public API
----------
- :func:`load_events` — Read an event CSV with typed ids and dates
- :func:`save_table` — Write a table to CSV atomically
- :func:`simulate_events` — Reproducible random event table
"""

from .io import load_events, save_table
from .simulation import DEFAULT_TREATMENTS, simulate_events

__all__ = [
    "load_events",
    "save_table",
    "simulate_events",
    "DEFAULT_TREATMENTS",
]
