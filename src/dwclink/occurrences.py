"""
Occurrence table assembly.

Occurrences come from three sources:

- aggregate catch counts: every fish counted but not retained becomes one
  occurrence with a synthetic sequential identifier;
- individually retained specimens: one occurrence each, identified by the
  dataset prefix plus the specimen's UFN;
- bycatch records: one occurrence each, life-stage codes recoded, rows with
  an explicitly unknown species dropped.
"""
from __future__ import annotations
import logging
from typing import Iterable, Iterator, Optional

import pandas as pd

from .cleaning import coerce_counts, ensure_nonnegative, harmonize_ids
from .config import DatasetConfig
from .dataframe_ops import require_columns, select_fields
from .errors import VocabularyMappingError
from .terms import OCCURRENCE_FIELDS
from .vocabulary import ReferenceData, recode_column, recode_life_stage

logger = logging.getLogger(__name__)

CATCH_COLUMNS = ["eventID", "species_code", "total", "retained"]


class SyntheticIdGenerator:
    """
    Sequential identifiers for individuals that were counted but not retained.

    One generator serves a whole run, so identifiers are never reused.
    """

    def __init__(self, prefix: str, start: int = 1):
        self.prefix = prefix
        self._next = start

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        value = f"{self.prefix}{self._next}"
        self._next += 1
        return value

    def take(self, n: int) -> list[str]:
        return [next(self) for _ in range(n)]

    @property
    def issued(self) -> int:
        return self._next - 1


def catch_wide_to_long(
    catch: pd.DataFrame,
    species_codes: Iterable[str],
    *,
    event_col: str = "eventID",
    total_suffix: str = "_total",
    retained_suffix: str = "_taken",
) -> pd.DataFrame:
    """
    Reshape per-species count column pairs into one row per event and species.

    A survey sheet with columns like ``so_total``/``so_taken`` becomes rows of
    (eventID, species_code, total, retained). Every ``*_total`` and
    ``*_taken`` column is treated as a species count; its prefix must be one
    of `species_codes`. Column names are matched case-insensitively; missing
    counts become zero.

    Args:
        catch: Wide table, one row per event
        species_codes: Known codes (e.g. ["SO", "PI"])
        event_col: Event identifier column in `catch`

    Returns:
        Long DataFrame with CATCH_COLUMNS

    Raises:
        VocabularyMappingError: If a count column's prefix is not a known code
        KeyError: If a species has a retained column but no total column
    """
    require_columns(catch, [event_col], "catch")
    known = {str(code).strip().lower(): code for code in species_codes}
    totals, retained = {}, {}
    for col in catch.columns:
        name = str(col).lower()
        if name.endswith(total_suffix) and len(name) > len(total_suffix):
            totals[name[:-len(total_suffix)]] = col
        elif name.endswith(retained_suffix) and len(name) > len(retained_suffix):
            retained[name[:-len(retained_suffix)]] = col

    prefixes = list(totals) + [p for p in retained if p not in totals]
    unknown = [p for p in prefixes if p not in known]
    if unknown:
        raise VocabularyMappingError("species_code", unknown)
    orphans = [retained[p] for p in retained if p not in totals]
    if orphans:
        raise KeyError(f"Found {orphans} but no matching total column")

    parts = []
    for prefix, total_col in totals.items():
        retained_col = retained.get(prefix)
        part = pd.DataFrame({
            "eventID": catch[event_col].to_numpy(),
            "species_code": known[prefix],
            "total": catch[total_col].to_numpy(),
            "retained": catch[retained_col].to_numpy() if retained_col is not None else 0,
        })
        parts.append(part)
    if not parts:
        return pd.DataFrame(columns=CATCH_COLUMNS)
    long = pd.concat(parts, ignore_index=True)
    long = coerce_counts(long, ["total", "retained"])
    return harmonize_ids(long, "eventID")


def _scientific_names(codes: pd.Series, reference: ReferenceData) -> pd.Series:
    if codes.isna().any():
        raise VocabularyMappingError("species_code", ["<missing>"])
    return recode_column(codes.astype(str).str.strip(), reference.species_codes, "species_code")


def _base_columns(df: pd.DataFrame, config: DatasetConfig) -> pd.DataFrame:
    df["basisOfRecord"] = config.basis_of_record
    df["occurrenceStatus"] = config.occurrence_status
    return df


def unretained_occurrences(aggregate_catch: pd.DataFrame, reference: ReferenceData,
                           config: DatasetConfig, ids: SyntheticIdGenerator) -> pd.DataFrame:
    """
    One occurrence per fish counted but not retained.

    Pairs where retained >= total produce nothing; already-tagged fish are
    not counted twice. Rows are processed in (eventID, species_code) order so
    identical inputs yield identical identifiers.
    """
    require_columns(aggregate_catch, CATCH_COLUMNS, "aggregate catch")
    catch = harmonize_ids(aggregate_catch[CATCH_COLUMNS], "eventID")
    catch = coerce_counts(catch, ["total", "retained"])
    catch = ensure_nonnegative(catch, ["total", "retained"])
    catch["not_retained"] = catch["total"] - catch["retained"]
    catch = catch[catch["not_retained"] > 0].sort_values(["eventID", "species_code"], kind="mergesort").copy()
    catch["scientificName"] = _scientific_names(catch["species_code"], reference)

    records = []
    for row in catch.itertuples(index=False):
        for occurrence_id in ids.take(int(row.not_retained)):
            records.append({
                "occurrenceID": occurrence_id,
                "eventID": row.eventID,
                "scientificName": row.scientificName,
            })
    logger.info("Generated %d synthetic occurrence(s) from %d catch row(s)", len(records), len(catch))
    return pd.DataFrame(records, columns=["occurrenceID", "eventID", "scientificName"])


def assign_specimen_ids(individuals: pd.DataFrame, prefix: str) -> pd.DataFrame:
    """
    Give each retained specimen the occurrenceID ``prefix + ufn``.

    Raises:
        ValueError: If any specimen lacks a UFN
    """
    require_columns(individuals, ["ufn"], "individual records")
    out = harmonize_ids(individuals, "ufn")
    if out["ufn"].isna().any():
        raise ValueError(f"{int(out['ufn'].isna().sum())} individual record(s) have no ufn.")
    out["occurrenceID"] = prefix + out["ufn"].astype(str)
    return out


def prepare_individuals(individuals: pd.DataFrame, reference: ReferenceData,
                        config: DatasetConfig) -> pd.DataFrame:
    """
    Specimen table with occurrenceID, eventID and a recoded lifeStage.

    Other columns (the measurement columns in particular) are kept, so the
    result also serves as the wide measurement source.
    """
    out = individuals
    if "occurrenceID" not in out.columns:
        out = assign_specimen_ids(out, config.occurrence_prefix)
    out = harmonize_ids(out, "eventID")
    if "lifeStage" in out.columns:
        out["lifeStage"] = out["lifeStage"].map(
            lambda v: recode_life_stage(v, reference.life_stage_codes))
    return out


def specimen_occurrences(individuals: pd.DataFrame, reference: ReferenceData,
                         config: DatasetConfig) -> pd.DataFrame:
    """One occurrence per retained, individually identified specimen."""
    specimens = prepare_individuals(individuals, reference, config)
    require_columns(specimens, ["eventID", "species_code"], "individual records")
    out = specimens[["occurrenceID", "eventID"]].copy()
    out["scientificName"] = _scientific_names(specimens["species_code"], reference).to_numpy()
    if "lifeStage" in specimens.columns:
        out["lifeStage"] = specimens["lifeStage"].to_numpy()
    return out


def bycatch_occurrences(bycatch: pd.DataFrame, reference: ReferenceData,
                        config: DatasetConfig, ids: SyntheticIdGenerator) -> pd.DataFrame:
    """
    One occurrence per bycatch record.

    Rows whose species is explicitly marked unknown are dropped. Life-stage
    codes (J, A, Y) are expanded; an unknown code fails the run.
    """
    require_columns(bycatch, ["eventID", "species_code"], "bycatch records")
    records = harmonize_ids(bycatch, "eventID")
    marker = records["species_code"].astype(str).str.strip().str.lower()
    unknown = marker.isin([u.lower() for u in config.unknown_species])
    if unknown.any():
        logger.info("Dropped %d bycatch record(s) with unknown species", int(unknown.sum()))
    records = records[~unknown].copy()

    out = pd.DataFrame({
        "occurrenceID": ids.take(len(records)),
        "eventID": records["eventID"].to_numpy(),
        "scientificName": _scientific_names(records["species_code"], reference).to_numpy(),
    })
    if "lifeStage" in records.columns:
        out["lifeStage"] = [recode_life_stage(v, reference.life_stage_codes) for v in records["lifeStage"]]
    return out


def build_occurrences(
    aggregate_catch: Optional[pd.DataFrame],
    individual_records: Optional[pd.DataFrame],
    bycatch_records: Optional[pd.DataFrame],
    reference: ReferenceData,
    config: DatasetConfig | None = None,
    ids: Optional[SyntheticIdGenerator] = None,
) -> pd.DataFrame:
    """
    Build the candidate Occurrence table from all three sources.

    Args:
        aggregate_catch: Long catch counts (eventID, species_code, total, retained)
        individual_records: Retained specimens (ufn or occurrenceID, eventID, species_code, ...)
        bycatch_records: Bycatch rows (eventID, species_code, lifeStage)
        reference: Species codes and life-stage codes for this run
        config: Dataset settings
        ids: Synthetic identifier generator; one is created from the config if omitted

    Returns:
        DataFrame with OCCURRENCE_FIELDS columns; taxonomy fields are empty
        until `enrich_taxonomy` runs.

    Raises:
        VocabularyMappingError: If a species or life-stage code has no mapping
    """
    config = config or DatasetConfig()
    ids = ids or SyntheticIdGenerator(config.synthetic_prefix)
    parts = []
    if aggregate_catch is not None:
        parts.append(unretained_occurrences(aggregate_catch, reference, config, ids))
    if individual_records is not None:
        parts.append(specimen_occurrences(individual_records, reference, config))
    if bycatch_records is not None:
        parts.append(bycatch_occurrences(bycatch_records, reference, config, ids))
    parts = [p for p in parts if len(p) > 0]
    if not parts:
        return select_fields(pd.DataFrame(columns=OCCURRENCE_FIELDS), OCCURRENCE_FIELDS)

    occurrences = _base_columns(pd.concat(parts, ignore_index=True), config)
    logger.info("Built %d candidate occurrence(s)", len(occurrences))
    return select_fields(occurrences, OCCURRENCE_FIELDS)
