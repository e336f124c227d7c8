"""
Darwin Core headers for the three output tables.

Field order is the column order of the written files; downstream aggregators
read these headers verbatim, so the strings are exact Darwin Core term names.
"""

EVENT_FIELDS = [
    "eventID",
    "eventDate",
    "eventTime",
    "locationID",
    "decimalLatitude",
    "decimalLongitude",
    "geodeticDatum",
    "coordinatePrecision",
    "coordinateUncertaintyInMeters",
    "minimumDepthInMeters",
    "maximumDepthInMeters",
    "habitat",
    "samplingProtocol",
    "license",
    "rightsHolder",
    "bibliographicCitation",
]

OCCURRENCE_FIELDS = [
    "occurrenceID",
    "eventID",
    "basisOfRecord",
    "occurrenceStatus",
    "scientificName",
    "scientificNameID",
    "scientificNameAuthorship",
    "taxonRank",
    "kingdom",
    "lifeStage",
]

MEASUREMENT_FIELDS = [
    "measurementID",
    "eventID",
    "occurrenceID",
    "measurementType",
    "measurementTypeID",
    "measurementValue",
    "measurementValueID",
    "measurementUnit",
    "measurementUnitID",
]

# fields filled in by the taxonomic lookup
TAXON_FIELDS = [
    "scientificNameID",
    "scientificNameAuthorship",
    "taxonRank",
    "kingdom",
]

# primary key of each table
PRIMARY_KEYS = {
    "event": "eventID",
    "occurrence": "occurrenceID",
    "measurement": "measurementID",
}

# output filename of each table
FILENAMES = {
    "event": "event.csv",
    "occurrence": "occurrence.csv",
    "measurement": "extendedmeasurementorfact.csv",
}

# Darwin Core Archive row types, used in meta.xml
ROW_TYPES = {
    "event": "http://rs.tdwg.org/dwc/terms/Event",
    "occurrence": "http://rs.tdwg.org/dwc/terms/Occurrence",
    "measurement": "http://rs.iobis.org/obis/terms/ExtendedMeasurementOrFact",
}

TERM_NAMESPACES = {
    "measurementTypeID": "http://rs.iobis.org/obis/terms/",
    "measurementValueID": "http://rs.iobis.org/obis/terms/",
    "measurementUnitID": "http://rs.iobis.org/obis/terms/",
    "license": "http://purl.org/dc/terms/",
    "rightsHolder": "http://purl.org/dc/terms/",
    "bibliographicCitation": "http://purl.org/dc/terms/",
}
DWC_NAMESPACE = "http://rs.tdwg.org/dwc/terms/"


def term_uri(name: str) -> str:
    return TERM_NAMESPACES.get(name, DWC_NAMESPACE) + name
