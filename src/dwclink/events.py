"""
Event table: one row per sampling activity (one net deployment).

Coordinates missing from the survey sheet are back-filled from the site
reference table; back-filled events carry the coarser imputed uncertainty.
"""
from __future__ import annotations
import logging

import pandas as pd

from .cleaning import parse_dates, prepare
from .config import DatasetConfig
from .dataframe_ops import select_fields
from .terms import EVENT_FIELDS

logger = logging.getLogger(__name__)

_COORDS = ["decimalLatitude", "decimalLongitude"]


def _time_text(value):
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M:%S")
    return str(value).strip() or None


def site_coordinates(site_reference: pd.DataFrame, config: DatasetConfig) -> pd.DataFrame:
    """Site table indexed by locationID with numeric coordinates; first row per site wins."""
    sites = prepare(site_reference, config.site_columns,
                    required=["locationID"] + _COORDS, id_cols=("locationID",))
    sites[_COORDS] = sites[_COORDS].apply(pd.to_numeric, errors="coerce")
    return sites.drop_duplicates(subset="locationID").set_index("locationID")[_COORDS]


def backfill_coordinates(events: pd.DataFrame, sites: pd.DataFrame, imputed_uncertainty: float) -> pd.DataFrame:
    """
    Fill missing coordinates from `sites` by locationID.

    Only events missing latitude or longitude are touched; both coordinates
    are then taken from the site and the uncertainty is replaced by
    `imputed_uncertainty`.
    """
    out = events.copy()
    missing = out[_COORDS].isna().any(axis=1)
    if "locationID" not in out.columns or not missing.any():
        return out
    site_lat = out["locationID"].map(sites["decimalLatitude"])
    site_lon = out["locationID"].map(sites["decimalLongitude"])
    fill = missing & site_lat.notna() & site_lon.notna()
    out.loc[fill, "decimalLatitude"] = site_lat[fill]
    out.loc[fill, "decimalLongitude"] = site_lon[fill]
    out.loc[fill, "coordinateUncertaintyInMeters"] = imputed_uncertainty
    unresolved = missing & ~fill
    logger.info("Back-filled coordinates for %d event(s) from site reference", int(fill.sum()))
    if unresolved.any():
        logger.warning("%d event(s) have no coordinates and no site match: %s",
                       int(unresolved.sum()), out.loc[unresolved, "eventID"].tolist()[:10])
    return out


def build_events(raw_events: pd.DataFrame, site_reference: pd.DataFrame | None,
                 config: DatasetConfig | None = None) -> pd.DataFrame:
    """
    Build the candidate Event table.

    Args:
        raw_events: Survey sheet, one row per sampling activity
        site_reference: Site table with location id and coordinates, or None
        config: Dataset settings (column maps, publishing metadata)

    Returns:
        DataFrame with EVENT_FIELDS columns. Events without occurrences are
        still present; `reconcile` removes them.
    """
    config = config or DatasetConfig()
    events = prepare(raw_events, config.event_columns, required=["eventID"],
                     id_cols=("eventID", "locationID"))
    for col in _COORDS:
        events[col] = pd.to_numeric(events[col], errors="coerce") if col in events.columns else float("nan")
    for col in ("minimumDepthInMeters", "maximumDepthInMeters"):
        if col in events.columns:
            events[col] = pd.to_numeric(events[col], errors="coerce")

    if "eventDate" in events.columns:
        events["eventDate"] = parse_dates(events["eventDate"], "eventDate")
    if "eventTime" in events.columns:
        events["eventTime"] = events["eventTime"].map(_time_text)

    measured = events[_COORDS].notna().all(axis=1)
    events["coordinateUncertaintyInMeters"] = float("nan")
    events.loc[measured, "coordinateUncertaintyInMeters"] = config.coordinate_uncertainty_m
    if site_reference is not None:
        events = backfill_coordinates(events, site_coordinates(site_reference, config),
                                      config.imputed_uncertainty_m)

    events["geodeticDatum"] = config.geodetic_datum
    events["coordinatePrecision"] = config.coordinate_precision
    events["samplingProtocol"] = config.sampling_protocol
    events["license"] = config.license
    events["rightsHolder"] = config.rights_holder
    events["bibliographicCitation"] = config.bibliographic_citation

    logger.info("Built %d candidate event(s)", len(events))
    return select_fields(events, EVENT_FIELDS)
