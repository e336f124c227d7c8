from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
RAW = DATA / "raw"
PROC = DATA / "processed"

# raw survey filenames (adjust to yours)
RAW_SURVEY_XLSX = RAW / "survey_data.xlsx"
RAW_SITES_CSV = RAW / "sites.csv"
RAW_SPECIES_CSV = RAW / "species_codes.csv"
RAW_MEASUREMENT_TYPES_CSV = RAW / "measurement_types.csv"
RAW_CONFIG_YAML = RAW / "dataset.yaml"

# sheet names inside the survey workbook
SHEET_EVENTS = "seines"
SHEET_INDIVIDUALS = "fish"
SHEET_BYCATCH = "bycatch"

# coordinates
DEFAULT_COORDINATE_UNCERTAINTY_M = 10
IMPUTED_COORDINATE_UNCERTAINTY_M = 1852  # one nautical mile
DEFAULT_COORDINATE_PRECISION = 0.00001

# raw header -> Darwin Core term
EVENT_COLUMNS = {
    "seine_id": "eventID",
    "survey_date": "eventDate",
    "set_time": "eventTime",
    "lat": "decimalLatitude",
    "long": "decimalLongitude",
    "site_id": "locationID",
    "min_depth": "minimumDepthInMeters",
    "max_depth": "maximumDepthInMeters",
    "habitat": "habitat",
}

SITE_COLUMNS = {
    "site_id": "locationID",
    "lat": "decimalLatitude",
    "long": "decimalLongitude",
}

INDIVIDUAL_COLUMNS = {
    "seine_id": "eventID",
    "ufn": "ufn",
    "species": "species_code",
    "life_stage": "lifeStage",
}

BYCATCH_COLUMNS = {
    "seine_id": "eventID",
    "bm_species": "species_code",
    "bm_ageclass": "lifeStage",
}

# raw measurement column -> measurementType
MEASUREMENT_COLUMNS = {
    "fork_length": "fork length",
    "standard_length": "standard length",
    "weight": "weight",
    "lifeStage": "life stage",
}

UNKNOWN_SPECIES = ("unknown", "unk", "uk")


@dataclass(frozen=True)
class DatasetConfig:
    """Settings for one dataset conversion.

    Everything a conversion needs that is not a table: identifier prefixes,
    fixed Darwin Core tags, publishing metadata and the raw-to-DwC column maps.
    """

    occurrence_prefix: str = "hakai-jsp-"
    synthetic_prefix: str = "hakai-jsp-uncaught-"
    basis_of_record: str = "HumanObservation"
    occurrence_status: str = "present"
    geodetic_datum: str = "EPSG:4326"
    sampling_protocol: str = "beach seine"
    license: str = "http://creativecommons.org/licenses/by/4.0/legalcode"
    rights_holder: str = ""
    bibliographic_citation: str = ""
    coordinate_precision: float = DEFAULT_COORDINATE_PRECISION
    coordinate_uncertainty_m: float = DEFAULT_COORDINATE_UNCERTAINTY_M
    imputed_uncertainty_m: float = IMPUTED_COORDINATE_UNCERTAINTY_M
    event_columns: dict[str, str] = field(default_factory=lambda: dict(EVENT_COLUMNS))
    site_columns: dict[str, str] = field(default_factory=lambda: dict(SITE_COLUMNS))
    individual_columns: dict[str, str] = field(default_factory=lambda: dict(INDIVIDUAL_COLUMNS))
    bycatch_columns: dict[str, str] = field(default_factory=lambda: dict(BYCATCH_COLUMNS))
    measurement_columns: dict[str, str] = field(default_factory=lambda: dict(MEASUREMENT_COLUMNS))
    unknown_species: tuple[str, ...] = UNKNOWN_SPECIES


def load_dataset_config(path: str | Path | None = None) -> DatasetConfig:
    """
    Load a DatasetConfig from a YAML file; keys override the defaults.

    Args:
        path: YAML file (default: RAW_CONFIG_YAML)

    Returns:
        DatasetConfig with the file's values applied

    Raises:
        ValueError: If the file contains keys DatasetConfig does not know
    """
    with open(path or RAW_CONFIG_YAML, "r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}
    known = {f.name for f in fields(DatasetConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown dataset config keys: {unknown}")
    if "unknown_species" in overrides:
        overrides["unknown_species"] = tuple(overrides["unknown_species"])
    return replace(DatasetConfig(), **overrides)
