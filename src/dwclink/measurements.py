"""
MeasurementOrFact table: measurement columns of the specimen table pivoted
to one row per (occurrence, measurement type) with a value.
"""
from __future__ import annotations
import logging
from typing import Mapping, Optional

import pandas as pd

from .config import MEASUREMENT_COLUMNS
from .dataframe_ops import merge_lookup, require_columns, select_fields
from .terms import MEASUREMENT_FIELDS
from .vocabulary import MEASUREMENT_TYPE_COLUMNS, VALUE_IDS, get_value_id

logger = logging.getLogger(__name__)


def make_measurement_id(event_id: str, measurement_type: str, occurrence_id: str) -> str:
    """Deterministic identifier for one measurement."""
    slug = "_".join(str(measurement_type).strip().lower().split())
    return f"{event_id}-{slug}-{occurrence_id}"


def _value_text(value) -> Optional[str]:
    # values are published as text; 120.0 is written as "120"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def pivot_measurements(source: pd.DataFrame, columns: Mapping[str, str]) -> pd.DataFrame:
    """
    Wide-to-long: one row per non-missing measurement cell.

    Rows keep the source row order, and within a row the order of `columns`.
    Missing and blank cells produce no row.
    """
    require_columns(source, ["eventID", "occurrenceID"], "measurement source")
    value_cols = [c for c in columns if c in source.columns]
    absent = [c for c in columns if c not in source.columns]
    if absent:
        logger.info("Measurement columns not in source, skipped: %s", absent)
    if not value_cols:
        return pd.DataFrame(columns=["eventID", "occurrenceID", "measurementType", "measurementValue"])

    wide = source[["eventID", "occurrenceID"] + value_cols].reset_index(drop=True)
    # object dtype keeps numbers and terms side by side through the melt
    wide[value_cols] = wide[value_cols].astype(object)
    long = wide.melt(
        id_vars=["eventID", "occurrenceID"],
        value_vars=value_cols,
        var_name="source_column",
        value_name="measurementValue",
        ignore_index=False,
    ).sort_index(kind="mergesort")
    long = long[long["measurementValue"].notna()].copy()
    long["measurementValue"] = long["measurementValue"].map(_value_text)
    long = long[long["measurementValue"].notna()].copy()
    long["measurementType"] = long["source_column"].map(dict(columns))
    return long.drop(columns="source_column").reset_index(drop=True)


def build_measurements(
    source: pd.DataFrame,
    measurement_types: pd.DataFrame,
    measurement_columns: Optional[Mapping[str, str]] = None,
    value_ids: Mapping[str, Mapping[str, str]] = VALUE_IDS,
) -> pd.DataFrame:
    """
    Build the MeasurementOrFact table from the specimen (occurrence source) table.

    Args:
        source: Wide table with eventID, occurrenceID and measurement columns
        measurement_types: Dictionary keyed by measurementType with unit/URI metadata
        measurement_columns: Source column -> measurementType (default: config.MEASUREMENT_COLUMNS)
        value_ids: Vocabulary URIs for categorical values, by measurementType

    Returns:
        DataFrame with MEASUREMENT_FIELDS columns, one row per non-missing cell
    """
    columns = dict(measurement_columns or MEASUREMENT_COLUMNS)
    long = pivot_measurements(source, columns)

    dictionary_cols = [c for c in MEASUREMENT_TYPE_COLUMNS if c in measurement_types.columns]
    if "measurementType" in dictionary_cols and len(long) > 0:
        known = set(measurement_types["measurementType"].dropna())
        unknown = sorted(set(long["measurementType"]) - known)
        if unknown:
            logger.warning("Measurement types missing from dictionary: %s", unknown)
        long = merge_lookup(long, measurement_types, "measurementType", columns=dictionary_cols)

    long["measurementValueID"] = [
        get_value_id(t, v, value_ids) for t, v in zip(long["measurementType"], long["measurementValue"])
    ]
    long["measurementID"] = [
        make_measurement_id(e, t, o)
        for e, t, o in zip(long["eventID"], long["measurementType"], long["occurrenceID"])
    ]
    logger.info("Pivoted %d measurement(s) from %d source row(s)", len(long), len(source))
    return select_fields(long, MEASUREMENT_FIELDS)
