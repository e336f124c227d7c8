"""
Taxonomic enrichment of the Occurrence table.

Distinct scientific names are resolved in one batched lookup per run, the
chosen match for each name is reduced to one reference row, and the
reference fields are joined back onto every occurrence sharing that name.

When a name has zero or several candidate matches, the match policy decides
what to keep (default: the first candidate) and a TaxonomyWarning is
recorded either way.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional, Protocol

import pandas as pd
import requests

from .dataframe_ops import merge_lookup, require_columns
from .errors import AmbiguousTaxonomyMatch, EmptyTaxonomyMatch, LookupServiceError, TaxonomyWarning
from .terms import TAXON_FIELDS

logger = logging.getLogger(__name__)

WORMS_MATCH_URL = "https://www.marinespecies.org/rest/AphiaRecordsByMatchNames"
WORMS_MAX_NAMES = 50

Candidate = dict
MatchPolicy = Callable[[str, list], Optional[Candidate]]


class TaxonLookup(Protocol):
    def match_names(self, names: list[str]) -> dict[str, list[Candidate]]:
        """Return the candidate records for every requested name."""
        ...


def first_match(name: str, candidates: list[Candidate]) -> Optional[Candidate]:
    """Keep the first candidate the service returned."""
    return candidates[0] if candidates else None


def unique_match(name: str, candidates: list[Candidate]) -> Optional[Candidate]:
    """Keep a candidate only when it is the only one; otherwise leave a gap."""
    return candidates[0] if len(candidates) == 1 else None


def worms_candidate(record: dict) -> Candidate:
    """Reduce a WoRMS AphiaRecord to the Darwin Core taxon fields."""
    rank = record.get("rank")
    return {
        "scientificNameID": record.get("lsid"),
        "scientificNameAuthorship": record.get("authority"),
        "taxonRank": rank.lower() if isinstance(rank, str) else rank,
        "kingdom": record.get("kingdom"),
        "acceptedName": record.get("valid_name"),
        "matchType": record.get("match_type"),
    }


class WormsClient:
    """
    Name matching against the World Register of Marine Species REST service.

    Names are sent in chunks of at most WORMS_MAX_NAMES per request.
    Any transport error, error status or short answer raises
    LookupServiceError; there is no cached fallback.
    """

    def __init__(self, url: str = WORMS_MATCH_URL, session: Optional[requests.Session] = None,
                 timeout: float = 60, marine_only: bool = False):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.marine_only = marine_only

    def _match_chunk(self, names: list[str]) -> list[list[dict]]:
        params = [("scientificnames[]", n) for n in names]
        params.append(("marine_only", str(self.marine_only).lower()))
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            # 204: none of the names matched
            if response.status_code == 204:
                return [[] for _ in names]
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LookupServiceError(f"WoRMS name match failed: {e}") from e
        if not isinstance(payload, list) or len(payload) != len(names):
            raise LookupServiceError(
                f"WoRMS returned {len(payload) if isinstance(payload, list) else 'no'} result list(s) "
                f"for {len(names)} name(s)"
            )
        return [records or [] for records in payload]

    def match_names(self, names: list[str]) -> dict[str, list[Candidate]]:
        results: dict[str, list[Candidate]] = {}
        for i in range(0, len(names), WORMS_MAX_NAMES):
            chunk = names[i:i + WORMS_MAX_NAMES]
            for name, records in zip(chunk, self._match_chunk(chunk)):
                results[name] = [worms_candidate(r) for r in records]
        return results


def resolve_names(names: list[str], lookup: TaxonLookup,
                  policy: MatchPolicy = first_match) -> tuple[pd.DataFrame, list[TaxonomyWarning]]:
    """
    Look up `names` in one batch and apply the match policy.

    Returns:
        (reference, warnings): one reference row per name that kept a match,
        keyed by scientificName, and the warnings raised by the matching

    Raises:
        LookupServiceError: If the lookup fails or leaves a name unanswered
    """
    answers = lookup.match_names(names)
    unanswered = [n for n in names if n not in answers]
    if unanswered:
        raise LookupServiceError(f"Lookup returned no answer for: {unanswered}")

    rows, issues = [], []
    for name in names:
        candidates = answers[name] or []
        if len(candidates) == 0:
            issues.append(EmptyTaxonomyMatch(name))
        elif len(candidates) > 1:
            issues.append(AmbiguousTaxonomyMatch(name, len(candidates)))
        chosen = policy(name, candidates)
        if chosen is not None:
            rows.append({"scientificName": name, **{f: chosen.get(f) for f in TAXON_FIELDS}})
    for issue in issues:
        logger.warning("Taxonomy: %s", issue)
    reference = pd.DataFrame(rows, columns=["scientificName"] + TAXON_FIELDS)
    return reference, issues


def enrich_taxonomy(occurrences: pd.DataFrame, lookup: TaxonLookup,
                    policy: MatchPolicy = first_match) -> tuple[pd.DataFrame, list[TaxonomyWarning]]:
    """
    Join authorship, rank and the persistent name identifier onto occurrences.

    Args:
        occurrences: Occurrence table with a scientificName column
        lookup: Name-resolution service (one call per run)
        policy: Chooses a match from the candidates of one name

    Returns:
        (enriched occurrences, taxonomy warnings). Row count and order are unchanged.
    """
    require_columns(occurrences, ["scientificName"], "occurrences")
    names = sorted(occurrences["scientificName"].dropna().astype(str).unique().tolist())
    logger.info("Resolving %d distinct scientific name(s)", len(names))
    if not names:
        return occurrences.copy(), []
    reference, issues = resolve_names(names, lookup, policy)
    columns = list(occurrences.columns)
    enriched = merge_lookup(occurrences, reference, "scientificName", columns=TAXON_FIELDS)
    enriched = enriched[columns + [f for f in TAXON_FIELDS if f not in columns]]
    return enriched, issues
