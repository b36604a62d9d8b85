"""Header-row scanning.

Each header is tested against an ordered table of rules; the first rule that
matches claims the column, so no column is classified twice. Headers no rule
claims stay generic single-column questions.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from creche_survey.config.observability import log_event, log_warning
from creche_survey.schemas.datasets import (
    AGE_HEADER,
    CSP_HEADER,
    DATE_HEADERS,
    FACILITY_HEADER,
    FOLLOW_UP_PREFIX,
    GENDER_HEADER,
    MANAGER_NAMES,
    SATISFACTION_HEADER,
)
from creche_survey.schemas.survey import CheckboxOption, ColumnMapping, ManagerColumn
from creche_survey.services.survey_utils import fold_accents

CHECKBOX_PATTERN = re.compile(r"^(.+?)\s*:\s*\[(.+)\]$")


@dataclass
class _MappingDraft:
    facility_column: Optional[int] = None
    manager_columns: List[ManagerColumn] = field(default_factory=list)
    gender_column: Optional[int] = None
    age_column: Optional[int] = None
    csp_column: Optional[int] = None
    satisfaction_column: Optional[int] = None
    date_column: Optional[int] = None
    checkbox_groups: Dict[str, List[CheckboxOption]] = field(default_factory=dict)

    def add_option(self, stem: str, option: CheckboxOption) -> None:
        self.checkbox_groups.setdefault(stem, []).append(option)

    def freeze(self) -> ColumnMapping:
        groups = {
            stem: sorted(options, key=lambda o: o.index)
            for stem, options in self.checkbox_groups.items()
        }
        return ColumnMapping(
            facility_column=self.facility_column,
            manager_columns=list(self.manager_columns),
            gender_column=self.gender_column,
            age_column=self.age_column,
            csp_column=self.csp_column,
            satisfaction_column=self.satisfaction_column,
            date_column=self.date_column,
            checkbox_groups=groups,
        )


class ColumnRule(NamedTuple):
    name: str
    matches: Callable[[str, _MappingDraft], bool]
    apply: Callable[[_MappingDraft, int, str], None]


def _set_field(name: str) -> Callable[[_MappingDraft, int, str], None]:
    def apply(draft: _MappingDraft, index: int, header: str) -> None:
        setattr(draft, name, index)

    return apply


def _set_if_unset(name: str) -> Callable[[_MappingDraft, int, str], None]:
    def apply(draft: _MappingDraft, index: int, header: str) -> None:
        if getattr(draft, name) is None:
            setattr(draft, name, index)

    return apply


def _is_satisfaction_candidate(header: str, draft: _MappingDraft) -> bool:
    folded = fold_accents(header)
    return "satisfait" in folded and ("creche" in folded or "accueil" in folded)


def _add_manager(draft: _MappingDraft, index: int, header: str) -> None:
    draft.manager_columns.append(ManagerColumn(index=index, label=header))


def _add_checkbox_option(draft: _MappingDraft, index: int, header: str) -> None:
    match = CHECKBOX_PATTERN.match(header)
    draft.add_option(
        match.group(1).strip(), CheckboxOption(index=index, option_label=match.group(2).strip())
    )


def _add_follow_up(draft: _MappingDraft, index: int, header: str) -> None:
    draft.add_option(FOLLOW_UP_PREFIX, CheckboxOption(index=index, option_label=header, free_text=True))


COLUMN_RULES: List[ColumnRule] = [
    ColumnRule("facility", lambda h, d: h == FACILITY_HEADER, _set_field("facility_column")),
    ColumnRule("manager", lambda h, d: h in MANAGER_NAMES, _add_manager),
    ColumnRule("gender", lambda h, d: h == GENDER_HEADER, _set_field("gender_column")),
    ColumnRule("age", lambda h, d: h == AGE_HEADER, _set_field("age_column")),
    ColumnRule("csp", lambda h, d: h == CSP_HEADER, _set_field("csp_column")),
    ColumnRule(
        "satisfaction", lambda h, d: h == SATISFACTION_HEADER, _set_field("satisfaction_column")
    ),
    ColumnRule(
        "satisfaction_fallback", _is_satisfaction_candidate, _set_if_unset("satisfaction_column")
    ),
    ColumnRule(
        "date",
        lambda h, d: d.date_column is None and fold_accents(h) in DATE_HEADERS,
        _set_field("date_column"),
    ),
    ColumnRule("checkbox", lambda h, d: CHECKBOX_PATTERN.match(h) is not None, _add_checkbox_option),
    ColumnRule("follow_up", lambda h, d: h.startswith(FOLLOW_UP_PREFIX), _add_follow_up),
]


def identify_columns(headers: Sequence[Optional[str]]) -> ColumnMapping:
    draft = _MappingDraft()
    for index, raw in enumerate(headers):
        if raw is None:
            continue
        header = str(raw).strip()
        if not header:
            continue
        for rule in COLUMN_RULES:
            if rule.matches(header, draft):
                rule.apply(draft, index, header)
                break

    mapping = draft.freeze()
    log_event(
        "columns_identified",
        facility=mapping.facility_column,
        satisfaction=mapping.satisfaction_column,
        managers=len(mapping.manager_columns),
        checkbox_groups=len(mapping.checkbox_groups),
    )
    if mapping.satisfaction_column is None:
        log_warning("satisfaction_column_missing", "Aucune colonne de satisfaction détectée")
    return mapping
