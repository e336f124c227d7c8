"""
Errors and warnings raised while linking Darwin Core tables.

Fatal conditions derive from DwcLinkError and abort the run before any file
is written. Taxonomy match problems are TaxonomyWarning instances; they are
collected on the run result and logged, not raised.
"""
from __future__ import annotations
from typing import Iterable


def _preview(keys: Iterable, limit: int = 20) -> str:
    keys = list(keys)
    shown = ", ".join(map(repr, keys[:limit]))
    if len(keys) > limit:
        shown += f", ... ({len(keys) - limit} more)"
    return shown


class DwcLinkError(Exception):
    """Base class for all fatal linker errors."""


class VocabularyMappingError(DwcLinkError):
    """A raw categorical code has no entry in its recode table."""

    def __init__(self, field: str, codes: Iterable):
        self.field = field
        self.codes = sorted({str(c) for c in codes})
        super().__init__(f"Unmapped {field} code(s): {_preview(self.codes)}")


class DuplicateKeyError(DwcLinkError):
    """A primary key repeats within its table."""

    def __init__(self, table: str, column: str, keys: Iterable):
        self.table = table
        self.column = column
        self.keys = list(keys)
        super().__init__(f"{table}.{column} has duplicate values: {_preview(self.keys)}")


class ReferentialIntegrityError(DwcLinkError):
    """
    One or more foreign keys do not resolve.

    ``problems`` holds one (table, column, keys) tuple per dangling reference,
    each listing every offending key.
    """

    def __init__(self, problems: list[tuple[str, str, list]]):
        self.problems = problems
        lines = [
            f"{table}.{column}: {len(keys)} unresolved key(s): {_preview(keys)}"
            for table, column, keys in problems
        ]
        super().__init__("Dangling references\n  " + "\n  ".join(lines))

    @property
    def keys(self) -> list:
        return [k for _, _, keys in self.problems for k in keys]


class LookupServiceError(DwcLinkError):
    """The taxonomic name-resolution service failed or answered incompletely."""


class TaxonomyWarning(UserWarning):
    """Base class for non-fatal taxonomic match problems."""

    def __init__(self, name: str, candidates: int):
        self.name = name
        self.candidates = candidates
        super().__init__(self._message())

    def _message(self) -> str:
        return f"{self.name!r}: {self.candidates} candidate match(es)"


class AmbiguousTaxonomyMatch(TaxonomyWarning):
    def _message(self) -> str:
        return f"{self.name!r} matched {self.candidates} taxa; match policy applied"


class EmptyTaxonomyMatch(TaxonomyWarning):
    def __init__(self, name: str):
        super().__init__(name, 0)

    def _message(self) -> str:
        return f"{self.name!r} has no taxonomic match; fields left empty"
