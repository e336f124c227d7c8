from __future__ import annotations
from pathlib import Path
import pandas as pd
from .config import (
    RAW_SURVEY_XLSX, RAW_SITES_CSV, RAW_SPECIES_CSV, RAW_MEASUREMENT_TYPES_CSV,
    SHEET_EVENTS, SHEET_INDIVIDUALS, SHEET_BYCATCH,
)

def read_table(path: str | Path, sheet_name: str | None = None) -> pd.DataFrame:
    """Read a delimited text file or an Excel sheet, chosen by file suffix."""
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xlsm", ".xls"):
        return pd.read_excel(path, sheet_name=sheet_name or 0, engine="openpyxl")
    sep = "\t" if path.suffix.lower() in (".tsv", ".txt") else ","
    return pd.read_csv(path, sep=sep)

def read_events_raw(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_SURVEY_XLSX, SHEET_EVENTS)

def read_individuals_raw(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_SURVEY_XLSX, SHEET_INDIVIDUALS)

def read_bycatch_raw(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_SURVEY_XLSX, SHEET_BYCATCH)

def read_sites(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_SITES_CSV)

def read_species_codes(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_SPECIES_CSV)

def read_measurement_types(path: str | None = None) -> pd.DataFrame:
    return read_table(path or RAW_MEASUREMENT_TYPES_CSV)
