from __future__ import annotations
import pandas as pd

def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize column names by stripping whitespace, replacing spaces with underscores,
    and removing special characters.

    Args:
        df: Input DataFrame

    Returns:
        DataFrame with normalized column names
    """
    df = df.copy()
    df.columns = (
        df.columns
        .astype(str)
        .str.strip()
        .str.replace(r"\s+", "_", regex=True)
        .str.replace(r"[^0-9A-Za-z_]", "", regex=True)
    )
    return df

def rename_to_dwc(df: pd.DataFrame, columns: dict[str, str], required: list[str] | None = None) -> pd.DataFrame:
    """
    Rename raw columns to their Darwin Core names, keeping only mapped columns.

    Args:
        df: Input DataFrame with normalized raw column names
        columns: Mapping of raw column name to target name
        required: Target names that must be present after renaming

    Returns:
        DataFrame holding only the mapped columns, under their target names

    Raises:
        KeyError: If a required target column cannot be produced
    """
    present = {raw: dwc for raw, dwc in columns.items() if raw in df.columns}
    # columns already carrying their target name are kept as-is
    for dwc in columns.values():
        if dwc in df.columns and dwc not in present.values():
            present[dwc] = dwc
    out = df[list(present)].rename(columns=present)
    missing = [c for c in (required or []) if c not in out.columns]
    if missing:
        raise KeyError(f"Required columns not found: {missing}. Available: {list(df.columns)[:20]}...")
    return out

def harmonize_ids(df: pd.DataFrame, id_col="eventID") -> pd.DataFrame:
    """
    Standardize ID column values by converting to strings and stripping whitespace.
    Missing values stay missing.

    Args:
        df: Input DataFrame
        id_col: Name of the ID column to harmonize (default: "eventID")

    Returns:
        DataFrame with standardized ID column
    """
    df = df.copy()
    if id_col in df.columns:
        df[id_col] = df[id_col].map(lambda v: v if pd.isna(v) else _id_text(v)).astype(object)
    return df

def _id_text(value) -> str:
    # spreadsheet readers turn integer ids into floats
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()

def coerce_counts(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """
    Cast count columns to integers, treating missing counts as zero.

    Args:
        df: Input DataFrame
        cols: Count columns to cast

    Returns:
        DataFrame with integer count columns

    Raises:
        ValueError: If a count is not a whole number
    """
    df = df.copy()
    for col in cols:
        values = pd.to_numeric(df[col], errors="raise").fillna(0)
        if not (values % 1 == 0).all():
            raise ValueError(f"Non-integer counts found in {col}.")
        df[col] = values.astype(int)
    return df

def ensure_nonnegative(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """
    Validate that count columns contain only non-negative values.

    Args:
        df: Input DataFrame
        cols: Columns to check

    Returns:
        Original DataFrame if validation passes

    Raises:
        ValueError: If negative values are found in specified columns
    """
    if (df[cols] < 0).any().any():
        raise ValueError(f"Negative values found in {cols} columns.")
    return df

def prepare(df: pd.DataFrame, columns: dict[str, str], required: list[str] | None = None,
            id_cols: tuple[str, ...] = ("eventID",)) -> pd.DataFrame:
    """Normalize, rename and harmonize one raw table in a single call."""
    out = rename_to_dwc(normalize_columns(df), columns, required=required)
    for col in id_cols:
        out = harmonize_ids(out, col)
    return out

def parse_dates(series: pd.Series, field_name: str = "eventDate") -> pd.Series:
    """
    Parse date values given in any mix of formats to ISO-8601 date text.

    Missing and blank values stay missing.

    Args:
        series: Raw date values (strings, datetimes or spreadsheet dates)
        field_name: Name used in the error message

    Returns:
        Series of ``YYYY-MM-DD`` strings

    Raises:
        ValueError: If a non-blank value cannot be parsed as a date
    """
    values = series.map(lambda v: (v.strip() or None) if isinstance(v, str) else v)
    parsed = pd.to_datetime(values, errors="coerce", format="mixed")
    bad = parsed.isna() & values.notna()
    if bad.any():
        raise ValueError(f"Unparseable {field_name} values: {values[bad].astype(str).unique()[:10].tolist()}")
    return parsed.map(lambda d: None if pd.isna(d) else d.strftime("%Y-%m-%d"))
