"""Tests for src/sequencing/validation.py and the record types.

Covers:
- Normalisation of DataFrame / mapping / Event inputs to canonical columns
- Missing column, patient id and label checks (ValidationError)
- Separator safety, including labels overlapping the separator at their edges
- Categorical id and label columns
- Missing / incomparable dates (OrderingError)
- Exception hierarchy
"""

import pandas as pd
import pytest
from pydantic import ValidationError as PydanticValidationError

from src.sequencing.config import SequenceConfig
from src.sequencing.errors import OrderingError, SequenceError, ValidationError
from src.sequencing.records import Event, PatientSequence, SequenceFrequency
from src.sequencing.validation import ROW_COLUMN, to_event_frame, validate_events


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_frame(patients, treatments, dates) -> pd.DataFrame:
    return pd.DataFrame(
        {"patient_id": patients, "treatment": treatments, "treatment_date": dates}
    )


def _validate(df: pd.DataFrame, config: SequenceConfig = None) -> None:
    config = config or SequenceConfig()
    validate_events(to_event_frame(df, config), config)


# ---------------------------------------------------------------------------
# Tests: normalisation
# ---------------------------------------------------------------------------

class TestToEventFrame:

    def test_dataframe_columns_renamed(self):
        df = pd.DataFrame({"ipp": ["p1"], "drug": ["A"], "day": [3], "other": ["x"]})
        config = SequenceConfig(patient_column="ipp", treatment_column="drug", date_column="day")
        frame = to_event_frame(df, config)
        assert list(frame.columns) == ["patient_id", "treatment", "treatment_date", ROW_COLUMN]
        assert frame["treatment"].iloc[0] == "A"

    def test_row_positions_recorded(self):
        df = _make_frame(["p1", "p1", "p2"], ["A", "B", "C"], [1, 2, 3])
        df.index = ["x", "y", "z"]
        frame = to_event_frame(df)
        assert frame[ROW_COLUMN].tolist() == [0, 1, 2]

    def test_source_frame_not_modified(self):
        df = _make_frame(["p1"], ["A"], [1])
        to_event_frame(df)
        assert ROW_COLUMN not in df.columns

    def test_mapping_records(self):
        frame = to_event_frame([{"patient_id": "p1", "treatment": "A", "treatment_date": 1}])
        assert frame.iloc[0]["patient_id"] == "p1"
        assert frame.iloc[0][ROW_COLUMN] == 0

    def test_mapping_records_use_configured_names(self):
        config = SequenceConfig(patient_column="ipp")
        frame = to_event_frame([{"ipp": "p9", "treatment": "A", "treatment_date": 1}], config)
        assert frame.iloc[0]["patient_id"] == "p9"

    def test_mapping_missing_patient(self):
        with pytest.raises(ValidationError, match="Row 1"):
            to_event_frame(
                [
                    {"patient_id": "p1", "treatment": "A", "treatment_date": 1},
                    {"treatment": "B", "treatment_date": 2},
                ]
            )

    def test_mapping_missing_treatment(self):
        with pytest.raises(ValidationError, match="Row 0"):
            to_event_frame([{"patient_id": "p1", "treatment_date": 1}])

    def test_unsupported_record_type(self):
        with pytest.raises(ValidationError, match="expected an Event or a mapping"):
            to_event_frame([("p1", "A", 1)])

    def test_empty_iterable(self):
        frame = to_event_frame([])
        assert frame.empty
        assert "treatment_date" in frame.columns


# ---------------------------------------------------------------------------
# Tests: validation rules
# ---------------------------------------------------------------------------

class TestValidateEvents:

    def test_valid_frame_passes(self):
        _validate(_make_frame(["p1", "p2"], ["A", "B"], [1, 2]))

    def test_missing_column(self):
        df = pd.DataFrame({"patient_id": ["p1"], "treatment": ["A"]})
        with pytest.raises(ValidationError, match="treatment_date"):
            _validate(df)

    def test_missing_patient_id(self):
        df = _make_frame(["p1", None, float("nan")], ["A", "B", "C"], [1, 2, 3])
        with pytest.raises(ValidationError, match="rows: 1, 2"):
            _validate(df)

    def test_unhashable_patient_id(self):
        df = _make_frame([["p1"]], ["A"], [1])
        with pytest.raises(ValidationError, match="Unhashable"):
            _validate(df)

    def test_missing_treatment(self):
        df = _make_frame(["p1", "p1"], ["A", None], [1, 2])
        with pytest.raises(ValidationError, match="rows: 1"):
            _validate(df)

    def test_non_string_treatment(self):
        df = _make_frame(["p1"], [42], [1])
        with pytest.raises(ValidationError):
            _validate(df)

    def test_blank_treatment(self):
        df = _make_frame(["p1"], ["   "], [1])
        with pytest.raises(ValidationError, match="Blank"):
            _validate(df)

    def test_label_containing_separator(self):
        df = _make_frame(["p1"], ["Carboplatin, Paclitaxel"], [1])
        with pytest.raises(ValidationError, match="separator"):
            _validate(df)

    def test_separator_check_follows_config(self):
        df = _make_frame(["p1"], ["Carboplatin, Paclitaxel"], [1])
        _validate(df, SequenceConfig(separator=" | "))
        with pytest.raises(ValidationError):
            _validate(_make_frame(["p1"], ["A | B"], [1]), SequenceConfig(separator=" | "))

    @pytest.mark.parametrize("label", ["a-", "-b"])
    def test_label_overlapping_separator_boundary(self, label):
        # "a-" + "--" + "b" and "a" + "--" + "-b" would both render "a---b"
        config = SequenceConfig(separator="--")
        with pytest.raises(ValidationError, match="part of the separator"):
            _validate(_make_frame(["p1", "p1"], [label, "c"], [1, 2]), config)

    def test_default_separator_edges(self):
        with pytest.raises(ValidationError, match="part of the separator"):
            _validate(_make_frame(["p1"], ["Cisplatin,"], [1]))
        with pytest.raises(ValidationError, match="part of the separator"):
            _validate(_make_frame(["p1"], [" Cisplatin"], [1]))

    def test_single_character_separator(self):
        _validate(_make_frame(["p1"], ["a-b"], [1]), SequenceConfig(separator="/"))

    def test_categorical_single_label(self):
        df = _make_frame(["p1", "p2"], pd.Categorical(["A", "A"]), [1, 2])
        _validate(df)

    def test_categorical_patient_id(self):
        df = _make_frame(pd.Categorical(["p1", "p1"]), ["A", "B"], [1, 2])
        _validate(df)

    def test_categorical_blank_label(self):
        df = _make_frame(["p1", "p1"], pd.Categorical(["A", " "]), [1, 2])
        with pytest.raises(ValidationError, match="Blank"):
            _validate(df)

    def test_missing_date(self):
        df = _make_frame(["p1", "p1"], ["A", "B"], [pd.Timestamp("2024-01-01"), pd.NaT])
        with pytest.raises(OrderingError, match="Missing treatment_date"):
            _validate(df)

    def test_incomparable_dates(self):
        df = _make_frame(["p1", "p1"], ["A", "B"], [pd.Timestamp("2024-01-01"), "soon"])
        with pytest.raises(OrderingError, match="cannot be ordered"):
            _validate(df)

    def test_many_bad_rows_truncated(self):
        df = _make_frame([None] * 8, ["A"] * 8, list(range(8)))
        with pytest.raises(ValidationError, match=r"\(8 rows\)"):
            _validate(df)

    def test_empty_frame_passes(self):
        _validate(_make_frame([], [], []))


# ---------------------------------------------------------------------------
# Tests: errors and records
# ---------------------------------------------------------------------------

class TestErrorHierarchy:

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, SequenceError)
        assert issubclass(ValidationError, ValueError)

    def test_ordering_error_is_type_error(self):
        assert issubclass(OrderingError, SequenceError)
        assert issubclass(OrderingError, TypeError)


class TestRecords:

    def test_event_rejects_missing_patient(self):
        with pytest.raises(PydanticValidationError):
            Event(patient_id=None, treatment="A", treatment_date=1)

    def test_event_rejects_blank_label(self):
        with pytest.raises(PydanticValidationError):
            Event(patient_id="p1", treatment=" ", treatment_date=1)

    def test_event_is_frozen(self):
        ev = Event(patient_id="p1", treatment="A", treatment_date=1)
        with pytest.raises(PydanticValidationError):
            ev.treatment = "B"

    def test_patient_sequence_rendering(self):
        seq = PatientSequence(patient_id="p1", treatments=("A", "B"))
        assert seq.sequence == "A, B"
        assert seq.to_dict() == {"patient_id": "p1", "sequence": "A, B"}
        assert PatientSequence("p1", ("A", "B"), separator=" > ").sequence == "A > B"

    def test_sequence_frequency_to_dict(self):
        assert SequenceFrequency("A", 3).to_dict() == {"sequence": "A", "count": 3}
