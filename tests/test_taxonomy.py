import pandas as pd
import pytest
import requests

from dwclink.errors import AmbiguousTaxonomyMatch, EmptyTaxonomyMatch, LookupServiceError
from dwclink.taxonomy import WormsClient, enrich_taxonomy, unique_match, WORMS_MAX_NAMES


def occurrences(names):
    return pd.DataFrame({
        "occurrenceID": [f"o{i}" for i in range(len(names))],
        "eventID": "E1",
        "scientificName": names,
    })


def test_one_batched_lookup_for_distinct_names(lookup):
    occ = occurrences(["Oncorhynchus nerka", "Clupea pallasii", "Oncorhynchus nerka"])
    enriched, issues = enrich_taxonomy(occ, lookup)
    assert lookup.calls == [["Clupea pallasii", "Oncorhynchus nerka"]]
    assert issues == []
    assert len(enriched) == 3
    assert enriched["occurrenceID"].tolist() == ["o0", "o1", "o2"]
    assert enriched["scientificNameAuthorship"].tolist() == ["(Walbaum, 1792)", "Valenciennes, 1847",
                                                             "(Walbaum, 1792)"]
    assert enriched["scientificNameID"].iloc[0] == "urn:lsid:marinespecies.org:taxname:254569"
    assert set(enriched["taxonRank"]) == {"species"}


def test_ambiguous_match_keeps_first_and_warns(make_lookup):
    first = {"scientificNameID": "urn:1", "scientificNameAuthorship": "A", "taxonRank": "species"}
    second = {"scientificNameID": "urn:2", "scientificNameAuthorship": "B", "taxonRank": "species"}
    lookup = make_lookup({"Oncorhynchus nerka": [first, second]})
    enriched, issues = enrich_taxonomy(occurrences(["Oncorhynchus nerka"] * 2), lookup)
    assert len(enriched) == 2
    assert enriched["scientificNameID"].tolist() == ["urn:1", "urn:1"]
    assert len(issues) == 1
    assert isinstance(issues[0], AmbiguousTaxonomyMatch)
    assert issues[0].candidates == 2


def test_unique_match_policy_leaves_gap_for_ambiguous_name(make_lookup):
    lookup = make_lookup({"Oncorhynchus nerka": [{"scientificNameID": "urn:1"}, {"scientificNameID": "urn:2"}]})
    enriched, issues = enrich_taxonomy(occurrences(["Oncorhynchus nerka"]), lookup, policy=unique_match)
    assert pd.isna(enriched["scientificNameID"].iloc[0])
    assert isinstance(issues[0], AmbiguousTaxonomyMatch)


def test_no_match_leaves_explicit_gap(make_lookup):
    enriched, issues = enrich_taxonomy(occurrences(["Nomen nudum"]), make_lookup({}))
    assert enriched["scientificName"].tolist() == ["Nomen nudum"]
    assert pd.isna(enriched["scientificNameID"].iloc[0])
    assert isinstance(issues[0], EmptyTaxonomyMatch)


def test_unanswered_name_aborts():
    class Partial:
        def match_names(self, names):
            return {}

    with pytest.raises(LookupServiceError):
        enrich_taxonomy(occurrences(["Oncorhynchus nerka"]), Partial())


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(params)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def aphia(name, aphia_id, rank="Species"):
    return {
        "AphiaID": aphia_id,
        "scientificname": name,
        "authority": "(Walbaum, 1792)",
        "rank": rank,
        "lsid": f"urn:lsid:marinespecies.org:taxname:{aphia_id}",
        "kingdom": "Animalia",
        "valid_name": name,
        "match_type": "exact",
    }


def test_worms_client_normalizes_records():
    session = FakeSession(FakeResponse(payload=[[aphia("Oncorhynchus nerka", 254569)], None]))
    client = WormsClient(session=session)
    result = client.match_names(["Oncorhynchus nerka", "Nomen nudum"])
    assert result["Nomen nudum"] == []
    record = result["Oncorhynchus nerka"][0]
    assert record["scientificNameID"] == "urn:lsid:marinespecies.org:taxname:254569"
    assert record["taxonRank"] == "species"
    assert ("scientificnames[]", "Oncorhynchus nerka") in session.calls[0]
    assert ("marine_only", "false") in session.calls[0]


def test_worms_client_chunks_long_name_lists():
    names = [f"Name {i}" for i in range(WORMS_MAX_NAMES + 1)]
    session = FakeSession(FakeResponse(payload=[[] for _ in range(WORMS_MAX_NAMES)]),
                          FakeResponse(payload=[[]]))
    result = WormsClient(session=session).match_names(names)
    assert len(session.calls) == 2
    assert set(result) == set(names)


def test_worms_client_no_content_means_no_matches():
    session = FakeSession(FakeResponse(status_code=204))
    assert WormsClient(session=session).match_names(["Nomen nudum"]) == {"Nomen nudum": []}


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=503),
    requests.ConnectionError("unreachable"),
    FakeResponse(payload=[[]]),  # two names asked, one answered
])
def test_worms_client_failures_raise_lookup_error(response):
    with pytest.raises(LookupServiceError):
        WormsClient(session=FakeSession(response)).match_names(["Oncorhynchus nerka", "Clupea pallasii"])
