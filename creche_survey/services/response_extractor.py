from __future__ import annotations

from typing import List, Optional, Sequence

from creche_survey.schemas.datasets import (
    FACILITY_PLACEHOLDER,
    UNCHECKED_VALUES,
    UNIDENTIFIED_FACILITY,
    UNSPECIFIED,
)
from creche_survey.schemas.survey import (
    AnswerEntry,
    Cell,
    CheckboxOption,
    ColumnMapping,
    ColumnRef,
    Response,
)
from creche_survey.services.manager_lookup import FacilityManagerLookup
from creche_survey.services.survey_utils import (
    cell_to_str,
    is_empty_cell,
    is_no_answer,
    normalize_header_key,
    parse_date,
)

GROUP_SEPARATOR = "; "


def is_valid_response(row: Optional[Sequence[Cell]]) -> bool:
    return bool(row) and any(not is_empty_cell(cell) for cell in row)


def _cell(row: Sequence[Cell], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return cell_to_str(row[index])


def _classify_gender(text: str) -> str:
    lower = text.lower()
    if "femme" in lower:
        return "Femme"
    if "homme" in lower:
        return "Homme"
    return UNSPECIFIED


def _selected_options(row: Sequence[Cell], options: List[CheckboxOption]) -> List[str]:
    selected = []
    for option in options:
        text = _cell(row, option.index)
        if not text:
            continue
        if option.free_text:
            if not is_no_answer(text):
                selected.append(f"{option.option_label} : {text}")
        elif text.lower() not in UNCHECKED_VALUES:
            selected.append(option.option_label)
    return selected


def extract_response(
    row: Sequence[Cell],
    mapping: ColumnMapping,
    headers: Sequence[Optional[str]],
    lookup: Optional[FacilityManagerLookup] = None,
    respondent_id: int = 0,
) -> Response:
    facility = UNIDENTIFIED_FACILITY
    manager = UNSPECIFIED

    name = _cell(row, mapping.facility_column)
    if name and name != FACILITY_PLACEHOLDER:
        facility = name
        if lookup is not None:
            manager = lookup.resolve(name)

    # Manager columns only apply when the lookup did not resolve one
    if manager == UNSPECIFIED:
        for column in mapping.manager_columns:
            if _cell(row, column.index):
                manager = column.label
                break

    gender_text = _cell(row, mapping.gender_column)
    date_value = None
    if mapping.date_column is not None and mapping.date_column < len(row):
        date_value = parse_date(row[mapping.date_column])

    answers = {}
    column_order: List[ColumnRef] = []
    fixed = mapping.fixed_columns()
    processed = set()

    for index in range(len(headers)):
        if index in fixed or index in processed:
            continue
        stem = mapping.group_of(index)
        if stem is not None:
            options = mapping.checkbox_groups[stem]
            processed.update(o.index for o in options)
            selected = _selected_options(row, options)
            if selected:
                key = normalize_header_key(stem)
                first_index = options[0].index
                answers[key] = AnswerEntry(
                    value=GROUP_SEPARATOR.join(selected),
                    original_header=stem,
                    column_index=first_index,
                )
                column_order.append(ColumnRef(key=key, index=first_index, header=stem))
            continue

        text = _cell(row, index)
        if not text or is_no_answer(text):
            continue
        header = cell_to_str(headers[index])
        key = normalize_header_key(header)
        answers[key] = AnswerEntry(value=text, original_header=header, column_index=index)
        column_order.append(ColumnRef(key=key, index=index, header=header))

    column_order.sort(key=lambda ref: ref.index)

    return Response(
        id=respondent_id,
        facility=facility,
        manager=manager,
        gender=_classify_gender(gender_text) if gender_text else UNSPECIFIED,
        age=_cell(row, mapping.age_column) or UNSPECIFIED,
        csp=_cell(row, mapping.csp_column) or UNSPECIFIED,
        satisfaction=_cell(row, mapping.satisfaction_column) or UNSPECIFIED,
        date=date_value,
        answers=answers,
        column_order=column_order,
    )
