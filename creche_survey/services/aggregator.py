from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from creche_survey.config.settings import Settings, settings as default_settings
from creche_survey.schemas.datasets import UNIDENTIFIED_FACILITY
from creche_survey.schemas.survey import FacilityStats, Response
from creche_survey.services.classifier import classify_question
from creche_survey.services.survey_metrics import csp_percentages


def select_identified(responses: Sequence[Response]) -> Tuple[List[Response], int]:
    """Drop unidentified rows unless no row names a facility at all.

    Returns the kept responses and the number of dropped ones.
    """
    identified = [r for r in responses if r.facility != UNIDENTIFIED_FACILITY]
    if not identified:
        return list(responses), 0
    return identified, len(responses) - len(identified)


def group_by_facility(responses: Sequence[Response]) -> Dict[str, List[Response]]:
    grouped: Dict[str, List[Response]] = {}
    for response in responses:
        grouped.setdefault(response.facility, []).append(response)
    return grouped


def _increment(tally: Dict[str, int], label: str) -> None:
    tally[label] = tally.get(label, 0) + 1


def ordered_question_keys(
    responses: Sequence[Response], reserved: Tuple[int, int]
) -> List[str]:
    """Question keys by column index, skipping the reserved demographic positions."""
    first_index: Dict[str, int] = {}
    for response in responses:
        for ref in response.column_order:
            first_index.setdefault(ref.key, ref.index)
    start, end = reserved
    keys = [k for k, idx in first_index.items() if not start <= idx <= end]
    return sorted(keys, key=lambda k: first_index[k])


def aggregate_facility(
    responses: Sequence[Response], reserved: Tuple[int, int] = (1, 8)
) -> FacilityStats:
    stats = FacilityStats(total_responses=len(responses))
    for response in responses:
        _increment(stats.satisfaction, response.satisfaction)
        _increment(stats.manager, response.manager)
        _increment(stats.gender, response.gender)
        _increment(stats.csp, response.csp)
    stats.csp_percentages = csp_percentages(stats.csp)

    for key in ordered_question_keys(responses, reserved):
        question = classify_question(key, responses)
        if question.total_responses > 0:
            stats.question_stats[key] = question
    return stats


def aggregate_responses(
    responses: Sequence[Response], settings: Optional[Settings] = None
) -> Dict[str, FacilityStats]:
    settings = settings or default_settings
    reserved = (settings.reserved_column_start, settings.reserved_column_end)
    kept, _ = select_identified(responses)
    return {
        facility: aggregate_facility(group, reserved)
        for facility, group in group_by_facility(kept).items()
    }

