from .config import DatasetConfig, load_dataset_config
from .errors import (
    DwcLinkError, VocabularyMappingError, DuplicateKeyError, ReferentialIntegrityError,
    LookupServiceError, TaxonomyWarning, AmbiguousTaxonomyMatch, EmptyTaxonomyMatch,
)
from .vocabulary import ReferenceData
from .events import build_events
from .occurrences import SyntheticIdGenerator, build_occurrences, catch_wide_to_long
from .taxonomy import TaxonLookup, WormsClient, enrich_taxonomy, first_match, unique_match
from .measurements import build_measurements
from .reconcile import DwcTables, reconcile
from .data_io import write_dwc_tables, package_archive
from .pipeline import RawInputs, RunResult, convert, run, make_dwc

__all__ = [
    "DatasetConfig",
    "load_dataset_config",
    "DwcLinkError",
    "VocabularyMappingError",
    "DuplicateKeyError",
    "ReferentialIntegrityError",
    "LookupServiceError",
    "TaxonomyWarning",
    "AmbiguousTaxonomyMatch",
    "EmptyTaxonomyMatch",
    "ReferenceData",
    "build_events",
    "SyntheticIdGenerator",
    "build_occurrences",
    "catch_wide_to_long",
    "TaxonLookup",
    "WormsClient",
    "enrich_taxonomy",
    "first_match",
    "unique_match",
    "build_measurements",
    "DwcTables",
    "reconcile",
    "write_dwc_tables",
    "package_archive",
    "RawInputs",
    "RunResult",
    "convert",
    "run",
    "make_dwc",
]
