from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

from .cleaning import normalize_columns, prepare
from .config import DatasetConfig, load_dataset_config, RAW_CONFIG_YAML
from .data_io import write_dwc_tables
from .dataframe_ops import select_fields
from .errors import TaxonomyWarning
from .events import build_events
from .ingest import (
    read_events_raw, read_individuals_raw, read_bycatch_raw,
    read_sites, read_species_codes, read_measurement_types,
)
from .measurements import build_measurements
from .occurrences import (
    CATCH_COLUMNS, SyntheticIdGenerator, build_occurrences, catch_wide_to_long, prepare_individuals,
)
from .reconcile import DwcTables, reconcile
from .taxonomy import MatchPolicy, TaxonLookup, WormsClient, enrich_taxonomy, first_match
from .terms import MEASUREMENT_FIELDS
from .vocabulary import ReferenceData

logger = logging.getLogger(__name__)


@dataclass
class RawInputs:
    """Parsed source tables of one dataset, still under their raw column names."""

    events: pd.DataFrame
    sites: Optional[pd.DataFrame] = None
    individuals: Optional[pd.DataFrame] = None
    bycatch: Optional[pd.DataFrame] = None
    # long catch counts (eventID, species_code, total, retained); derived
    # from the wide `<code>_total`/`<code>_taken` event columns when omitted
    catch: Optional[pd.DataFrame] = None


@dataclass
class RunResult:
    tables: DwcTables
    warnings: list[TaxonomyWarning] = field(default_factory=list)
    paths: dict[str, Path] = field(default_factory=dict)


def catch_from_events(raw_events: pd.DataFrame, reference: ReferenceData,
                      config: DatasetConfig) -> pd.DataFrame:
    """Long catch counts from the `<code>_total`/`<code>_taken` columns of the survey sheet."""
    wide = normalize_columns(raw_events)
    id_col = next((raw for raw, dwc in config.event_columns.items()
                   if dwc == "eventID" and raw in wide.columns), "eventID")
    return catch_wide_to_long(wide, reference.species_codes, event_col=id_col)


def convert(inputs: RawInputs, reference: ReferenceData, lookup: TaxonLookup,
            config: DatasetConfig | None = None, policy: MatchPolicy = first_match) -> RunResult:
    """
    Build, enrich and reconcile the three Darwin Core tables. Writes nothing.

    Raises:
        VocabularyMappingError, LookupServiceError, DuplicateKeyError,
        ReferentialIntegrityError: on any fatal inconsistency
    """
    config = config or DatasetConfig()
    events = build_events(inputs.events, inputs.sites, config)

    catch = inputs.catch
    if catch is None:
        catch = catch_from_events(inputs.events, reference, config)
    else:
        columns = {raw: dwc for raw, dwc in config.event_columns.items() if dwc == "eventID"}
        catch = prepare(catch, {**columns, "species_code": "species_code", "total": "total", "retained": "retained"},
                        required=CATCH_COLUMNS)

    individuals = None
    if inputs.individuals is not None:
        columns = {**config.individual_columns, **{c: c for c in config.measurement_columns}}
        individuals = prepare(inputs.individuals, columns, required=["eventID", "ufn", "species_code"])
        individuals = prepare_individuals(individuals, reference, config)

    bycatch = None
    if inputs.bycatch is not None:
        bycatch = prepare(inputs.bycatch, config.bycatch_columns, required=["eventID", "species_code"])

    ids = SyntheticIdGenerator(config.synthetic_prefix)
    occurrences = build_occurrences(catch, individuals, bycatch, reference, config, ids)
    occurrences, issues = enrich_taxonomy(occurrences, lookup, policy)

    if individuals is not None:
        measurements = build_measurements(individuals, reference.measurement_types,
                                          config.measurement_columns, reference.value_ids)
    else:
        measurements = select_fields(pd.DataFrame(), MEASUREMENT_FIELDS)

    tables = reconcile(events, occurrences, measurements)
    return RunResult(tables=tables, warnings=issues)


def run(inputs: RawInputs, reference: ReferenceData, lookup: TaxonLookup,
        output_dir: str | Path | None = None, config: DatasetConfig | None = None,
        policy: MatchPolicy = first_match) -> RunResult:
    """
    Convert and write. Files are written only after every check has passed.
    """
    result = convert(inputs, reference, lookup, config, policy)
    result.paths = write_dwc_tables(result.tables, output_dir)
    if result.warnings:
        logger.warning("Run finished with %d taxonomy warning(s)", len(result.warnings))
    return result


def make_dwc(output_dir: str | Path | None = None, lookup: TaxonLookup | None = None) -> RunResult:
    """Run the conversion from the default raw file locations."""
    config = load_dataset_config() if Path(RAW_CONFIG_YAML).exists() else DatasetConfig()
    inputs = RawInputs(
        events=read_events_raw(),
        sites=read_sites(),
        individuals=read_individuals_raw(),
        bycatch=read_bycatch_raw(),
    )
    reference = ReferenceData.from_frames(read_species_codes(), read_measurement_types())
    return run(inputs, reference, lookup or WormsClient(), output_dir, config)
