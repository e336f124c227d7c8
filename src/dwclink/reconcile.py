"""
Cross-table constraint checks run before anything is written.

- every primary key is unique within its table;
- events without occurrences are dropped;
- every occurrence resolves to an event, every measurement to an occurrence
  and an event.

A failed check raises; dangling references are reported in full, never
silently dropped.
"""
from __future__ import annotations
import logging
from typing import NamedTuple

import pandas as pd

from .dataframe_ops import duplicated_keys, missing_keys, require_columns
from .errors import DuplicateKeyError, ReferentialIntegrityError
from .terms import PRIMARY_KEYS
from .validators import assert_tables

logger = logging.getLogger(__name__)


class DwcTables(NamedTuple):
    event: pd.DataFrame
    occurrence: pd.DataFrame
    measurement: pd.DataFrame


def assert_unique_keys(df: pd.DataFrame, table: str) -> None:
    column = PRIMARY_KEYS[table]
    require_columns(df, [column], table)
    dups = duplicated_keys(df, column)
    if dups:
        raise DuplicateKeyError(table, column, dups)


def drop_empty_events(events: pd.DataFrame, occurrences: pd.DataFrame) -> pd.DataFrame:
    """Events that produced no occurrence are not publishable."""
    keep = events["eventID"].isin(set(occurrences["eventID"].dropna()))
    if (~keep).any():
        logger.info("Dropped %d event(s) without occurrences", int((~keep).sum()))
    return events[keep].reset_index(drop=True)


def dangling_references(events: pd.DataFrame, occurrences: pd.DataFrame,
                        measurements: pd.DataFrame) -> list[tuple[str, str, list]]:
    event_ids = events["eventID"]
    occurrence_ids = occurrences["occurrenceID"]
    checks = [
        ("occurrence", occurrences, "eventID", event_ids),
        ("measurement", measurements, "occurrenceID", occurrence_ids),
        ("measurement", measurements, "eventID", event_ids),
    ]
    problems = []
    for table, df, column, valid in checks:
        keys = missing_keys(df, column, valid)
        if keys:
            problems.append((table, column, keys))
    return problems


def reconcile(events: pd.DataFrame, occurrences: pd.DataFrame,
              measurements: pd.DataFrame) -> DwcTables:
    """
    Filter and check the three candidate tables.

    Returns:
        DwcTables with empty events removed

    Raises:
        DuplicateKeyError: If eventID, occurrenceID or measurementID repeats
        ReferentialIntegrityError: If any foreign key does not resolve
    """
    for table, df in (("event", events), ("occurrence", occurrences), ("measurement", measurements)):
        assert_unique_keys(df, table)

    events = drop_empty_events(events, occurrences)
    problems = dangling_references(events, occurrences, measurements)
    if problems:
        raise ReferentialIntegrityError(problems)

    assert_tables(events, occurrences, measurements)
    logger.info("Reconciled %d event(s), %d occurrence(s), %d measurement(s)",
                len(events), len(occurrences), len(measurements))
    return DwcTables(events, occurrences.reset_index(drop=True), measurements.reset_index(drop=True))
