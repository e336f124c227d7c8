from __future__ import annotations
from typing import Iterable, Optional
import pandas as pd

# -------------------------------
# Column helpers
# -------------------------------

def require_columns(df: pd.DataFrame, columns: Iterable[str], name: str = "frame") -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"{name} is missing columns: {missing}. Available: {list(df.columns)[:20]}...")

def select_fields(df: pd.DataFrame, fields: list[str]) -> pd.DataFrame:
    """
    Return df with exactly `fields` as columns, in that order.
    Fields absent from df are added empty.
    """
    out = df.copy()
    for f in fields:
        if f not in out.columns:
            out[f] = None
    return out[fields].reset_index(drop=True)

# -------------------------------
# Joins
# -------------------------------

def merge_lookup(
    df: pd.DataFrame,
    lookup: pd.DataFrame,
    on: str,
    *,
    columns: Optional[list[str]] = None,
) -> pd.DataFrame:
    """
    Left-join a reference table onto df by `on`.

    The lookup is deduplicated on `on` first (first row wins) so that a
    one-to-many reference never multiplies rows of df. Row order of df is kept.
    """
    require_columns(df, [on], "left frame")
    require_columns(lookup, [on], "lookup")
    keep = [on] + [c for c in (columns or lookup.columns) if c != on]
    ref = lookup[keep].drop_duplicates(subset=on, keep="first")
    # replace, don't suffix, columns the lookup supplies
    left = df.drop(columns=[c for c in keep if c != on and c in df.columns])
    return left.merge(ref, on=on, how="left", validate="many_to_one", sort=False)

# -------------------------------
# Validation / Safety
# -------------------------------

def duplicated_keys(df: pd.DataFrame, column: str) -> list:
    """Distinct values of `column` that occur more than once, in first-seen order."""
    values = df[column]
    return values[values.duplicated()].drop_duplicates().tolist()

def missing_keys(df: pd.DataFrame, column: str, valid: Iterable) -> list:
    """Distinct values of df[column] not present in `valid`, in first-seen order."""
    values = df[column]
    dangling = values[~values.isin(set(valid))]
    return dangling.drop_duplicates().tolist()
