# tests/test_cleaning.py
import pandas as pd
import pytest
from dwclink.cleaning import (
    normalize_columns, rename_to_dwc, harmonize_ids, coerce_counts, ensure_nonnegative, parse_dates,
)

def test_normalize_columns_strips_and_underscores():
    df = pd.DataFrame({" seine id ": [1], "so_total(n)": [2]})
    out = normalize_columns(df)
    assert list(out.columns) == ["seine_id", "so_totaln"]

def test_rename_to_dwc_keeps_only_mapped_columns():
    df = pd.DataFrame({"seine_id": ["S1"], "lat": [50.1], "crew": ["AB"]})
    out = rename_to_dwc(df, {"seine_id": "eventID", "lat": "decimalLatitude", "long": "decimalLongitude"})
    assert list(out.columns) == ["eventID", "decimalLatitude"]

def test_rename_to_dwc_accepts_columns_already_named():
    df = pd.DataFrame({"eventID": ["S1"]})
    out = rename_to_dwc(df, {"seine_id": "eventID"}, required=["eventID"])
    assert list(out["eventID"]) == ["S1"]

def test_rename_to_dwc_missing_required_raises():
    df = pd.DataFrame({"lat": [50.1]})
    with pytest.raises(KeyError):
        rename_to_dwc(df, {"seine_id": "eventID"}, required=["eventID"])

def test_harmonize_ids_trim_and_integer_floats():
    df = pd.DataFrame({"eventID": [" S1 ", 12.0, None], "v": [1, 2, 3]})
    out = harmonize_ids(df)
    assert out["eventID"].tolist()[:2] == ["S1", "12"]
    assert pd.isna(out["eventID"].iloc[2])

def test_coerce_counts_missing_is_zero():
    df = pd.DataFrame({"total": [3, None], "retained": [1.0, 2.0]})
    out = coerce_counts(df, ["total", "retained"])
    assert out["total"].tolist() == [3, 0]
    assert out["retained"].dtype.kind == "i"

def test_coerce_counts_rejects_fractions():
    with pytest.raises(ValueError):
        coerce_counts(pd.DataFrame({"total": [1.5]}), ["total"])

def test_ensure_nonnegative():
    with pytest.raises(ValueError):
        ensure_nonnegative(pd.DataFrame({"total": [1, -1]}), ["total"])

def test_parse_dates_blank_stays_missing():
    out = parse_dates(pd.Series(["2017-05-01", " ", None, pd.Timestamp("2017-06-30 14:00")]))
    assert out.tolist() == ["2017-05-01", None, None, "2017-06-30"]

def test_parse_dates_rejects_garbage():
    with pytest.raises(ValueError):
        parse_dates(pd.Series(["2017-05-01", "31/31/2017"]))
