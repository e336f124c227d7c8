from __future__ import annotations
import logging
import zipfile
from pathlib import Path
from xml.etree import ElementTree as ET

import pandas as pd

from .config import PROC
from .reconcile import DwcTables
from .terms import (
    EVENT_FIELDS, OCCURRENCE_FIELDS, MEASUREMENT_FIELDS, FILENAMES, ROW_TYPES, term_uri,
)

logger = logging.getLogger(__name__)

FIELDS = {
    "event": EVENT_FIELDS,
    "occurrence": OCCURRENCE_FIELDS,
    "measurement": MEASUREMENT_FIELDS,
}

def write_table(df: pd.DataFrame, fields: list[str], path: Path) -> Path:
    """
    Write one table as comma-delimited UTF-8 text with the given header order.

    Args:
        df: Table to write
        fields: Header, in output order; every field must be a column of df
        path: Destination file

    Returns:
        Path: The written file
    """
    df[fields].to_csv(path, index=False, encoding="utf-8", lineterminator="\n")
    return path

def write_dwc_tables(tables: DwcTables, output_dir: str | Path | None = None) -> dict[str, Path]:
    """
    Write the reconciled event, occurrence and measurement tables.

    Args:
        tables: Output of `reconcile`
        output_dir: Destination directory (default: data/processed)

    Returns:
        dict: table name -> written path
    """
    out = Path(output_dir or PROC)
    out.mkdir(parents=True, exist_ok=True)
    paths = {}
    for name, df in tables._asdict().items():
        paths[name] = write_table(df, FIELDS[name], out / FILENAMES[name])
        logger.info("Wrote %s (%d rows)", paths[name], len(df))
    return paths

def build_meta_xml(core: str = "event", metadata: str | None = None) -> str:
    """
    Darwin Core Archive descriptor for the three written files.

    The core table carries the <id> column; each extension points back to
    the core by its eventID column.
    """
    archive = ET.Element("archive", {"xmlns": "http://rs.tdwg.org/dwc/text/"})
    if metadata:
        archive.set("metadata", metadata)
    for name in ("event", "occurrence", "measurement"):
        fields = FIELDS[name]
        tag = "core" if name == core else "extension"
        node = ET.SubElement(archive, tag, {
            "encoding": "UTF-8",
            "fieldsTerminatedBy": ",",
            "linesTerminatedBy": "\\n",
            "fieldsEnclosedBy": '"',
            "ignoreHeaderLines": "1",
            "rowType": ROW_TYPES[name],
        })
        files = ET.SubElement(node, "files")
        ET.SubElement(files, "location").text = FILENAMES[name]
        ET.SubElement(node, "id" if name == core else "coreid", {"index": str(fields.index("eventID"))})
        for i, field in enumerate(fields):
            ET.SubElement(node, "field", {"index": str(i), "term": term_uri(field)})
    ET.indent(archive)
    return ET.tostring(archive, encoding="unicode", xml_declaration=True)

def package_archive(paths: dict[str, Path], archive_path: str | Path, eml_path: str | Path | None = None) -> Path:
    """
    Zip the written tables and a generated meta.xml into a Darwin Core Archive.

    Args:
        paths: Output of `write_dwc_tables`
        archive_path: Zip file to create
        eml_path: Optional EML metadata file to include as eml.xml

    Returns:
        Path: The archive
    """
    archive_path = Path(archive_path)
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zipf:
        for name, path in paths.items():
            zipf.write(path, arcname=FILENAMES[name])
        zipf.writestr("meta.xml", build_meta_xml(metadata="eml.xml" if eml_path else None))
        if eml_path is not None:
            zipf.write(eml_path, arcname="eml.xml")
    logger.info("Created Darwin Core Archive %s", archive_path)
    return archive_path
