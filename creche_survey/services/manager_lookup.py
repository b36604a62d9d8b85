from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from creche_survey.config.observability import log_debug, log_event
from creche_survey.schemas.datasets import (
    LOOKUP_FACILITY_KEYWORDS,
    LOOKUP_MANAGER_KEYWORDS,
    LOOKUP_TEMPLATE_HEADERS,
    MANAGER_NAMES,
    UNSPECIFIED,
    required_lookup_columns,
)
from creche_survey.schemas.survey import Cell
from creche_survey.services.failures import LookupFileError
from creche_survey.services.survey_utils import cell_to_str, normalize_facility_name

MIN_SHARED_WORDS = 2
MIN_WORD_LENGTH = 3


def _significant_words(normalized: str) -> List[str]:
    return [w for w in normalized.split(" ") if len(w) >= MIN_WORD_LENGTH]


class FacilityManagerLookup:
    """Facility name -> manager table with exact, substring and shared-word matching.

    Fuzzy matching walks entries in insertion order and returns the first hit,
    so short or generic facility names may resolve to the wrong manager.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Dict[str, str] = {}
        for facility, manager in (entries or {}).items():
            self.add(facility, manager)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, str]]) -> "FacilityManagerLookup":
        lookup = cls()
        for record in records:
            lookup.add(record.get("facility", ""), record.get("manager", ""))
        return lookup

    def add(self, facility: str, manager: str) -> None:
        facility, manager = str(facility or "").strip(), str(manager or "").strip()
        if facility and manager:
            self._entries[facility] = manager

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, facility: str) -> str:
        if not facility or not self._entries:
            return UNSPECIFIED
        if facility in self._entries:
            return self._entries[facility]

        wanted = normalize_facility_name(facility)
        if not wanted:
            return UNSPECIFIED
        wanted_words = _significant_words(wanted)
        for name, manager in self._entries.items():
            candidate = normalize_facility_name(name)
            if wanted in candidate or candidate in wanted:
                return manager
            candidate_words = _significant_words(candidate)
            shared = [w for w in wanted_words if w in candidate_words]
            if len(shared) >= MIN_SHARED_WORDS:
                return manager

        log_debug("manager_lookup_miss", facility=facility)
        return UNSPECIFIED


def _find_column(headers: Sequence[Cell], keywords: Sequence[str]) -> Optional[int]:
    found = None
    for index, header in enumerate(headers):
        text = cell_to_str(header).lower()
        if text and any(k in text for k in keywords):
            found = index
    return found


def load_lookup_table(
    headers: Sequence[Cell], rows: Iterable[Sequence[Cell]]
) -> FacilityManagerLookup:
    facility_col = _find_column(headers, LOOKUP_FACILITY_KEYWORDS)
    manager_col = _find_column(headers, LOOKUP_MANAGER_KEYWORDS)
    if facility_col is None or manager_col is None:
        missing = [
            name
            for name, column in zip(required_lookup_columns(), (facility_col, manager_col))
            if column is None
        ]
        raise LookupFileError(
            "Colonnes établissement ou gestionnaire non trouvées dans le fichier",
            details=missing,
        )

    lookup = FacilityManagerLookup()
    for row in rows:
        facility = cell_to_str(row[facility_col]) if facility_col < len(row) else ""
        manager = cell_to_str(row[manager_col]) if manager_col < len(row) else ""
        lookup.add(facility, manager)
    log_event("manager_lookup_loaded", entries=len(lookup))
    return lookup


def lookup_template() -> List[List[str]]:
    """Header row plus one example row per known manager."""
    rows = [list(LOOKUP_TEMPLATE_HEADERS)]
    rows.extend([f"Crèche exemple {i + 1}", manager] for i, manager in enumerate(MANAGER_NAMES))
    return rows
