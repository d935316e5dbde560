from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd
from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from src.events.io import load_events
from src.events.simulation import simulate_events
from src.sequencing.config import DISPLAY_COUNT, SequenceConfig
from src.sequencing.errors import SequenceError
from src.sequencing.summary import TreatmentSummary, summarize_treatments
from src.ui.table import CHAR_WIDTH_PX, column_widths, filter_sequences

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, *, config: SequenceConfig | None = None):
        super().__init__()
        self.setWindowTitle("Treatment Sequences")
        self.resize(980, 560)

        self.config = config or SequenceConfig()
        self.summary = TreatmentSummary()

        self.btn_open = QPushButton("Open events CSV…")
        self.btn_open.clicked.connect(self.open_events)

        self.n_patients = QSpinBox()
        self.n_patients.setRange(1, 100_000)
        self.n_patients.setValue(200)

        self.seed = QSpinBox()
        self.seed.setRange(0, 2**31 - 1)
        self.seed.setValue(42)

        self.btn_simulate = QPushButton("Simulate")
        self.btn_simulate.clicked.connect(self.simulate)

        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Filter treatment sequences…")
        self.filter_edit.textChanged.connect(self.refresh_tables)

        # One table per output: per patient, per distinct sequence
        self.patient_table = self._make_table()
        self.frequency_table = self._make_table()

        self.tabs = QTabWidget()
        self.tabs.addTab(self.frequency_table, "Sequence frequencies")
        self.tabs.addTab(self.patient_table, "Patients")

        self.status = QLabel("Ready.")
        self.status.setStyleSheet("color: #333;")

        actions = QHBoxLayout()
        actions.addWidget(self.btn_open)
        actions.addStretch(1)
        actions.addWidget(QLabel("Patients:"))
        actions.addWidget(self.n_patients)
        actions.addWidget(QLabel("Seed:"))
        actions.addWidget(self.seed)
        actions.addWidget(self.btn_simulate)

        layout = QVBoxLayout()
        layout.addLayout(actions)
        layout.addWidget(self.filter_edit)
        layout.addWidget(self.tabs)
        layout.addWidget(self.status)

        root = QWidget()
        root.setLayout(layout)
        self.setCentralWidget(root)

    def _make_table(self) -> QTableWidget:
        table = QTableWidget(0, 0)
        table.horizontalHeader().setStretchLastSection(True)
        table.setEditTriggers(QTableWidget.NoEditTriggers)
        table.setSortingEnabled(True)
        return table

    def open_events(self):
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Select event CSV",
            str(Path.home()),
            "CSV files (*.csv);;All files (*.*)",
        )
        if not path:
            return
        self.open_path(path)

    def open_path(self, path: str | Path) -> bool:
        """Load an event CSV into the tables; errors are shown, not raised."""
        try:
            events = load_events(path, self.config)
        except (OSError, SequenceError) as e:
            logger.error("Could not read events from %s: %s", path, e)
            self._error(f"Could not read events:\n{e}")
            return False
        return self.load(events, source=Path(path).name)

    def simulate(self):
        events = simulate_events(
            n_patients=self.n_patients.value(),
            seed=self.seed.value(),
            config=self.config,
        )
        self.load(events, source=f"simulated (seed {self.seed.value()})")

    def load(self, events: pd.DataFrame, source: str) -> bool:
        try:
            self.summary = summarize_treatments(events, self.config)
        except SequenceError as e:
            self._error(str(e))
            return False
        self.refresh_tables()
        info = self.summary.summary()
        self.status.setText(
            f"{source}: {len(events)} events, {info['patients']} patients, "
            f"{info['distinct_sequences']} distinct sequences."
        )
        return True

    def refresh_tables(self, *_):
        query = self.filter_edit.text()
        self._fill(self.patient_table, filter_sequences(self.summary.patient_table(), query))
        self._fill(self.frequency_table, filter_sequences(self.summary.frequency_table(), query))

    def _fill(self, table: QTableWidget, frame: pd.DataFrame) -> None:
        # Sorting must be off while rows are inserted
        table.setSortingEnabled(False)
        table.clear()
        table.setRowCount(len(frame))
        table.setColumnCount(len(frame.columns))
        table.setHorizontalHeaderLabels([str(c) for c in frame.columns])

        for r, row in enumerate(frame.itertuples(index=False)):
            for c, value in enumerate(row):
                item = QTableWidgetItem()
                if frame.columns[c] == DISPLAY_COUNT:
                    item.setData(Qt.DisplayRole, int(value))
                else:
                    item.setText(str(value))
                table.setItem(r, c, item)

        for c, width in enumerate(column_widths(frame).values()):
            table.setColumnWidth(c, width * CHAR_WIDTH_PX)
        table.setSortingEnabled(True)

    def _error(self, message: str):
        QMessageBox.critical(self, "Error", message)
        self.status.setText("Error.")


def main():
    parser = argparse.ArgumentParser(description="Treatment Sequences - Viewer")
    parser.add_argument("--events", default=None, help="Event CSV to open on startup.")
    parser.add_argument("--seed", type=int, default=None, help="Simulate events with this seed on startup.")
    parser.add_argument("--patients", type=int, default=200, help="Number of simulated patients.")
    args, qt_args = parser.parse_known_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    app = QApplication([sys.argv[0], *qt_args])
    w = MainWindow(config=SequenceConfig.from_env())
    if args.events:
        w.open_path(args.events)
    elif args.seed is not None:
        w.n_patients.setValue(args.patients)
        w.seed.setValue(args.seed)
        w.simulate()
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
