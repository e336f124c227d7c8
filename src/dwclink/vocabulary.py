"""
Controlled vocabularies and the per-run reference data.

- LIFE_STAGE_BY_CODE maps single-letter field codes to controlled life-stage terms.
- VALUE_IDS maps (measurementType, value) to a controlled-vocabulary URI.
- ReferenceData bundles the tables one run needs (species codes, measurement
  type dictionary, value vocabularies). It is passed explicitly; nothing here
  is cached between runs.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping

import pandas as pd

from .errors import VocabularyMappingError

# Exact mapping from field-sheet code to life-stage term
LIFE_STAGE_BY_CODE = {
    "J": "juvenile",
    "A": "adult",
    "Y": "young of year",
}

# NERC S11 (development stage) terms
LIFE_STAGE_VALUE_IDS = {
    "juvenile": "http://vocab.nerc.ac.uk/collection/S11/current/S1127/",
    "adult": "http://vocab.nerc.ac.uk/collection/S11/current/S1116/",
}

VALUE_IDS = {
    "life stage": LIFE_STAGE_VALUE_IDS,
}

MEASUREMENT_TYPE_COLUMNS = [
    "measurementType",
    "measurementTypeID",
    "measurementUnit",
    "measurementUnitID",
]


def recode_life_stage(value, codes: Mapping[str, str] = LIFE_STAGE_BY_CODE):
    """
    Return the controlled life-stage term for a code or an already-expanded term.

    Missing values pass through as None. Anything else raises
    VocabularyMappingError.
    """
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    if not text:
        return None
    if text.upper() in codes:
        return codes[text.upper()]
    if text.lower() in codes.values():
        return text.lower()
    raise VocabularyMappingError("lifeStage", [text])


def recode_column(series: pd.Series, mapping: Mapping[str, str], field_name: str) -> pd.Series:
    """
    Map every non-missing value of ``series`` through ``mapping``.

    Fails with VocabularyMappingError listing all unmapped values; a silent
    pass-through would corrupt the downstream taxonomy.
    """
    present = series.dropna().astype(str).str.strip()
    unmapped = present[~present.isin(list(mapping))].unique()
    if len(unmapped) > 0:
        raise VocabularyMappingError(field_name, unmapped)
    return series.map(lambda v: None if pd.isna(v) else mapping[str(v).strip()])


def get_value_id(measurement_type: str, value, value_ids: Mapping[str, Mapping[str, str]] = VALUE_IDS):
    """Return the vocabulary URI for a categorical measurement value, or None."""
    terms = value_ids.get(measurement_type)
    if terms is None or value is None:
        return None
    return terms.get(str(value))


@dataclass
class ReferenceData:
    """Reference tables for one conversion run."""

    species_codes: dict[str, str]
    measurement_types: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=MEASUREMENT_TYPE_COLUMNS)
    )
    life_stage_codes: dict[str, str] = field(default_factory=lambda: dict(LIFE_STAGE_BY_CODE))
    value_ids: dict[str, dict[str, str]] = field(
        default_factory=lambda: {k: dict(v) for k, v in VALUE_IDS.items()}
    )

    @classmethod
    def from_frames(
        cls,
        species: pd.DataFrame,
        measurement_types: pd.DataFrame | None = None,
        *,
        code_col: str = "species_code",
        name_col: str = "scientificName",
    ) -> "ReferenceData":
        """
        Build reference data from a species-code table and a measurement dictionary.

        Args:
            species: Table with one row per species code
            measurement_types: Table keyed by measurementType (optional)
            code_col: Column holding the short species code
            name_col: Column holding the scientific name

        Raises:
            ValueError: If a species code maps to more than one name
        """
        pairs = species[[code_col, name_col]].dropna().astype(str)
        pairs = pairs.apply(lambda s: s.str.strip())
        conflicting = pairs.groupby(code_col)[name_col].nunique()
        conflicting = conflicting[conflicting > 1]
        if len(conflicting) > 0:
            raise ValueError(f"Species codes with several names: {conflicting.index.tolist()}")
        codes = dict(zip(pairs[code_col], pairs[name_col]))
        if measurement_types is None:
            return cls(species_codes=codes)
        return cls(species_codes=codes, measurement_types=measurement_types.copy())
