from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional

from creche_survey.schemas.datasets import UNSPECIFIED, UNSPECIFIED_PERIOD
from creche_survey.schemas.survey import Response
from creche_survey.services.survey_utils import normalize_label

DATE_FORMAT = "%d/%m/%Y"


def percent(part: float, total: float) -> int:
    """Whole percentage rounded half up; 0 when ``total`` is not positive."""
    if total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def _is_scored_label(normalized: str) -> bool:
    return bool(normalized) and "non specifie" not in normalized


def _is_satisfied_label(normalized: str) -> bool:
    if "satisfait" not in normalized:
        return False
    return "tres" in normalized or "plutot" in normalized


def satisfaction_score(tally: Optional[Mapping[str, int]]) -> int:
    """Share of respondents in the two highest satisfaction bands, in percent.

    Labels are compared accent- and case-insensitively. "Non spécifié" (in any
    spelling) and blank labels are left out of the denominator.
    """
    if not tally:
        return 0
    satisfied = 0
    total = 0
    for label, count in tally.items():
        if not isinstance(count, (int, float)) or count <= 0:
            continue
        normalized = normalize_label(label or "")
        if not _is_scored_label(normalized):
            continue
        total += count
        if _is_satisfied_label(normalized):
            satisfied += count
    return percent(satisfied, total)


def satisfaction_class(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 75:
        return "good"
    if score >= 50:
        return "average"
    return "poor"


def csp_percentages(csp_tally: Mapping[str, int]) -> Dict[str, int]:
    total = sum(count for label, count in csp_tally.items() if label != UNSPECIFIED)
    return {
        label: percent(count, total)
        for label, count in csp_tally.items()
        if label != UNSPECIFIED and total > 0
    }


def calculate_percentages(answers: Mapping[str, int], total: int) -> Dict[str, Dict[str, int]]:
    return {
        label: {"count": count, "percentage": percent(count, total)}
        for label, count in answers.items()
    }


def survey_period(responses: Iterable[Response]) -> str:
    dates = [r.date for r in responses if r.date is not None]
    if not dates:
        return UNSPECIFIED_PERIOD
    first, last = min(dates), max(dates)
    if first.date() == last.date():
        return first.strftime(DATE_FORMAT)
    return f"{first.strftime(DATE_FORMAT)} - {last.strftime(DATE_FORMAT)}"
