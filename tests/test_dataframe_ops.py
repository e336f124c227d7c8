import pandas as pd
import pytest

from dwclink.dataframe_ops import merge_lookup, duplicated_keys, missing_keys, select_fields


def test_merge_lookup_does_not_multiply_rows():
    left = pd.DataFrame({"name": ["A", "B", "A"], "x": [1, 2, 3]})
    # one-to-many reference: "A" appears twice
    ref = pd.DataFrame({"name": ["A", "A", "B"], "rank": ["species", "genus", "family"]})
    out = merge_lookup(left, ref, "name")
    assert len(out) == 3
    assert out["rank"].tolist() == ["species", "family", "species"]
    assert out["x"].tolist() == [1, 2, 3]


def test_merge_lookup_replaces_existing_columns():
    left = pd.DataFrame({"name": ["A"], "rank": [None]})
    ref = pd.DataFrame({"name": ["A"], "rank": ["species"]})
    out = merge_lookup(left, ref, "name")
    assert list(out.columns) == ["name", "rank"]
    assert out.loc[0, "rank"] == "species"


def test_merge_lookup_requires_key():
    with pytest.raises(KeyError):
        merge_lookup(pd.DataFrame({"x": [1]}), pd.DataFrame({"name": ["A"]}), "name")


def test_key_helpers_report_each_key_once():
    df = pd.DataFrame({"k": ["a", "b", "a", "c", "a", "c"]})
    assert duplicated_keys(df, "k") == ["a", "c"]
    assert missing_keys(df, "k", ["a"]) == ["b", "c"]


def test_select_fields_orders_and_fills():
    out = select_fields(pd.DataFrame({"b": [1], "z": [0]}), ["a", "b"])
    assert list(out.columns) == ["a", "b"]
    assert out.loc[0, "a"] is None
