import pandas as pd

from dwclink.measurements import build_measurements, make_measurement_id
from dwclink.terms import MEASUREMENT_FIELDS

COLUMNS = {"length": "fork length", "weight": "weight", "lifeStage": "life stage"}


def test_missing_values_are_not_emitted(measurement_types):
    source = pd.DataFrame({
        "occurrenceID": ["O1"], "eventID": ["E1"],
        "length": [120], "weight": [None], "lifeStage": ["juvenile"],
    })
    emof = build_measurements(source, measurement_types, COLUMNS)
    assert list(emof.columns) == MEASUREMENT_FIELDS
    assert emof["measurementType"].tolist() == ["fork length", "life stage"]
    assert emof["measurementValue"].tolist() == ["120", "juvenile"]
    assert set(emof["occurrenceID"]) == {"O1"}
    assert set(emof["eventID"]) == {"E1"}


def test_row_count_equals_non_missing_cells(measurement_types):
    source = pd.DataFrame({
        "occurrenceID": ["O1", "O2", "O3"],
        "eventID": ["E1", "E1", "E2"],
        "length": [101.0, None, 87.5],
        "weight": [10.2, None, None],
        "lifeStage": ["adult", None, " "],
    })
    emof = build_measurements(source, measurement_types, COLUMNS)
    assert len(emof) == 4
    assert emof["occurrenceID"].tolist() == ["O1", "O1", "O1", "O3"]
    assert emof["measurementValue"].tolist() == ["101", "10.2", "adult", "87.5"]


def test_dictionary_metadata_and_value_ids(measurement_types):
    source = pd.DataFrame({
        "occurrenceID": ["O1", "O2"], "eventID": ["E1", "E1"],
        "length": [100, None], "weight": [None, None], "lifeStage": ["juvenile", "young of year"],
    })
    emof = build_measurements(source, measurement_types, COLUMNS).set_index("measurementID")

    length = emof.loc[make_measurement_id("E1", "fork length", "O1")]
    assert length["measurementUnit"] == "mm"
    assert pd.isna(length["measurementValueID"])

    juvenile = emof.loc[make_measurement_id("E1", "life stage", "O1")]
    assert juvenile["measurementValueID"] == "http://vocab.nerc.ac.uk/collection/S11/current/S1127/"
    assert juvenile["measurementTypeID"].endswith("LSTAGE01/")

    yoy = emof.loc[make_measurement_id("E1", "life stage", "O2")]
    assert pd.isna(yoy["measurementValueID"])


def test_measurement_id_is_deterministic(measurement_types):
    source = pd.DataFrame({"occurrenceID": ["O1"], "eventID": ["E1"], "length": [120]})
    first = build_measurements(source, measurement_types, COLUMNS)
    second = build_measurements(source.copy(), measurement_types, COLUMNS)
    assert first["measurementID"].tolist() == ["E1-fork_length-O1"]
    assert first.equals(second)


def test_type_missing_from_dictionary_keeps_row(measurement_types):
    source = pd.DataFrame({"occurrenceID": ["O1"], "eventID": ["E1"], "girth": [30]})
    emof = build_measurements(source, measurement_types, {"girth": "girth"})
    assert emof["measurementType"].tolist() == ["girth"]
    assert pd.isna(emof["measurementUnit"].iloc[0])
