import pandas as pd
import pytest

from dwclink.vocabulary import ReferenceData

NAMES = {
    "SO": "Oncorhynchus nerka",
    "PI": "Oncorhynchus gorbuscha",
    "CU": "Oncorhynchus keta",
    "HE": "Clupea pallasii",
}


def candidate(name_id, authorship, rank="species", kingdom="Animalia"):
    return {
        "scientificNameID": f"urn:lsid:marinespecies.org:taxname:{name_id}",
        "scientificNameAuthorship": authorship,
        "taxonRank": rank,
        "kingdom": kingdom,
    }


ANSWERS = {
    "Oncorhynchus nerka": [candidate(254569, "(Walbaum, 1792)")],
    "Oncorhynchus gorbuscha": [candidate(254567, "(Walbaum, 1792)")],
    "Oncorhynchus keta": [candidate(254568, "(Walbaum, 1792)")],
    "Clupea pallasii": [candidate(293566, "Valenciennes, 1847")],
}


class FakeLookup:
    """In-memory name service; records every batch it is asked for."""

    def __init__(self, answers=None):
        self.answers = ANSWERS if answers is None else answers
        self.calls = []

    def match_names(self, names):
        self.calls.append(list(names))
        return {n: list(self.answers.get(n, [])) for n in names}


@pytest.fixture
def lookup():
    return FakeLookup()


@pytest.fixture
def measurement_types():
    return pd.DataFrame({
        "measurementType": ["fork length", "weight", "life stage"],
        "measurementTypeID": [
            "http://vocab.nerc.ac.uk/collection/P01/current/FL01XX01/",
            "http://vocab.nerc.ac.uk/collection/S06/current/S0600088/",
            "http://vocab.nerc.ac.uk/collection/P01/current/LSTAGE01/",
        ],
        "measurementUnit": ["mm", "g", None],
        "measurementUnitID": [
            "http://vocab.nerc.ac.uk/collection/P06/current/UXMM/",
            "http://vocab.nerc.ac.uk/collection/P06/current/UGRM/",
            None,
        ],
    })


@pytest.fixture
def reference(measurement_types):
    species = pd.DataFrame({"species_code": list(NAMES), "scientificName": list(NAMES.values())})
    return ReferenceData.from_frames(species, measurement_types)


@pytest.fixture
def make_lookup():
    return FakeLookup
