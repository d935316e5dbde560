"""Summarise treatment events into per-patient sequences and their frequencies.

Reads an event CSV (or simulates one), prints the sequence frequency
table and optionally writes both tables as CSV.

Usage:
    python -m src.ui.cli --events data/events.csv
    python -m src.ui.cli --simulate 500 --seed 42 --filter cisplatin
"""

import argparse
import logging
import sys
from pathlib import Path

from src.events.io import load_events, save_table
from src.events.simulation import simulate_events
from src.sequencing.config import TIE_BREAKS, SequenceConfig
from src.sequencing.errors import SequenceError
from src.sequencing.summary import summarize_treatments
from src.ui.table import filter_sequences

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Treatment sequence summary")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--events", type=Path, help="Event CSV file.")
    source.add_argument("--simulate", type=int, metavar="N", help="Simulate N patients.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for --simulate.")
    parser.add_argument("--patient-column", default="patient_id")
    parser.add_argument("--treatment-column", default="treatment")
    parser.add_argument("--date-column", default="treatment_date")
    parser.add_argument("--date-format", default=None, help="strftime format of the date column.")
    parser.add_argument("--dayfirst", action="store_true", help="Parse DD/MM/YYYY dates.")
    parser.add_argument("--separator", default=None, help="Sequence separator (default ', ').")
    parser.add_argument("--tie-break", choices=TIE_BREAKS, default=None)
    parser.add_argument("--filter", default="", help="Case-insensitive sequence filter.")
    parser.add_argument("--top", type=int, default=20, help="Rows to print (0 = all).")
    parser.add_argument("--output-dir", type=Path, default=None, help="Write patients.csv and frequencies.csv here.")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = SequenceConfig.from_env(
        patient_column=args.patient_column,
        treatment_column=args.treatment_column,
        date_column=args.date_column,
        separator=args.separator,
        tie_break=args.tie_break,
    )

    try:
        if args.events is not None:
            events = load_events(args.events, config, date_format=args.date_format, dayfirst=args.dayfirst)
        else:
            events = simulate_events(n_patients=args.simulate, seed=args.seed, config=config)
        summary = summarize_treatments(events, config)
    except (FileNotFoundError, SequenceError) as e:
        logger.error("%s", e)
        return 1

    frequencies = filter_sequences(summary.frequency_table(), args.filter)
    patients = filter_sequences(summary.patient_table(), args.filter)

    shown = frequencies if args.top <= 0 else frequencies.head(args.top)
    print(shown.to_string(index=False))
    print(
        f"\n{len(frequencies)} of {summary.n_sequences} sequences, "
        f"{len(patients)} of {summary.n_patients} patients"
    )

    if args.output_dir is not None:
        save_table(patients, args.output_dir / "patients.csv")
        save_table(frequencies, args.output_dir / "frequencies.csv")

    return 0


if __name__ == "__main__":
    sys.exit(main())
