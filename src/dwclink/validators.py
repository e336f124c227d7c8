from __future__ import annotations
from pandera import Column, DataFrameSchema, Check

schema_event = DataFrameSchema({
    "eventID": Column(nullable=False, unique=True),
    "decimalLatitude": Column(nullable=True, checks=Check.in_range(-90, 90)),
    "decimalLongitude": Column(nullable=True, checks=Check.in_range(-180, 180)),
    "coordinateUncertaintyInMeters": Column(nullable=True, checks=Check.gt(0)),
})

schema_occurrence = DataFrameSchema({
    "occurrenceID": Column(nullable=False, unique=True),
    "eventID": Column(nullable=False),
    "scientificName": Column(nullable=False),
    "occurrenceStatus": Column(nullable=False, checks=Check.isin(["present", "absent"])),
    "basisOfRecord": Column(nullable=False),
})

schema_measurement = DataFrameSchema({
    "measurementID": Column(nullable=False, unique=True),
    "eventID": Column(nullable=False),
    "occurrenceID": Column(nullable=False),
    "measurementType": Column(nullable=False),
    "measurementValue": Column(nullable=False),
})

def assert_tables(event, occurrence, measurement):
    """Validate the reconciled tables; raises pandera.errors.SchemaErrors listing all failures."""
    schema_event.validate(event, lazy=True)
    schema_occurrence.validate(occurrence, lazy=True)
    schema_measurement.validate(measurement, lazy=True)
