"""Cross-facility roll-ups built from per-facility statistics."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from creche_survey.config.settings import Settings, settings as default_settings
from creche_survey.schemas.datasets import UNSPECIFIED
from creche_survey.schemas.survey import (
    ComparativeAnalysis,
    FacilityRanking,
    FacilityStats,
    GlobalDemographics,
    GlobalMetadata,
    GlobalQuestionStats,
    GlobalSatisfaction,
    GlobalStats,
    ManagerQuestionBreakdown,
    ManagerStats,
    Response,
)
from creche_survey.services.survey_metrics import satisfaction_score, survey_period

TOP_CSP = 6
CSP_LABEL_LIMIT = 25
OTHER_CSP = "Autres CSP"
SMALL_FACILITY_MAX = 10
MEDIUM_FACILITY_MAX = 25


def _merge(target: Dict[str, int], source: Mapping[str, int], skip_unspecified: bool = False) -> None:
    for label, count in source.items():
        if skip_unspecified and label == UNSPECIFIED:
            continue
        target[label] = target.get(label, 0) + count


def aggregate_global_questions(
    facilities: Mapping[str, FacilityStats]
) -> Dict[str, GlobalQuestionStats]:
    merged: Dict[str, GlobalQuestionStats] = {}
    for stats in facilities.values():
        manager = stats.primary_manager
        for key, question in stats.question_stats.items():
            target = merged.get(key)
            if target is None:
                # First facility seen fixes the header and column position
                target = GlobalQuestionStats(
                    question=question.question, column_index=question.column_index
                )
                merged[key] = target
            target.is_open_question = target.is_open_question or question.is_open_question
            target.is_multi_options = target.is_multi_options or question.is_multi_options
            target.establishment_count += 1
            target.total_responses += question.total_responses
            _merge(target.answers, question.answers)

            breakdown = target.by_manager.setdefault(manager, ManagerQuestionBreakdown())
            _merge(breakdown.answers, question.answers)
            breakdown.total_responses += question.total_responses
            for entry in question.responses_list:
                tagged = entry.model_copy(update={"manager": manager})
                target.responses_list.append(tagged)
                breakdown.responses_list.append(tagged)

    return dict(sorted(merged.items(), key=lambda item: item[1].column_index))


def optimize_csp(csp: Mapping[str, int]) -> Dict[str, int]:
    """Keep the largest CSP buckets for charting and fold the rest together."""
    ranked = sorted(csp.items(), key=lambda item: item[1], reverse=True)
    optimized: Dict[str, int] = {}
    for label, count in ranked[:TOP_CSP]:
        if len(label) > CSP_LABEL_LIMIT:
            label = label[: CSP_LABEL_LIMIT - 3] + "..."
        optimized[label] = optimized.get(label, 0) + count
    others = sum(count for _, count in ranked[TOP_CSP:])
    if others > 0:
        optimized[OTHER_CSP] = others
    return optimized


def _demographics(
    facilities: Mapping[str, FacilityStats], responses: Sequence[Response]
) -> GlobalDemographics:
    demographics = GlobalDemographics()
    for stats in facilities.values():
        _merge(demographics.gender, stats.gender, skip_unspecified=True)
        for manager in stats.manager:
            demographics.facilities_by_manager[manager] = (
                demographics.facilities_by_manager.get(manager, 0) + 1
            )
    for response in responses:
        if response.csp and response.csp != UNSPECIFIED:
            demographics.csp[response.csp] = demographics.csp.get(response.csp, 0) + 1
        if response.age and response.age != UNSPECIFIED:
            demographics.age[response.age] = demographics.age.get(response.age, 0) + 1
    demographics.csp_optimized = optimize_csp(demographics.csp)
    return demographics


def _satisfaction(facilities: Mapping[str, FacilityStats]) -> GlobalSatisfaction:
    result = GlobalSatisfaction()
    for stats in facilities.values():
        _merge(result.tally, stats.satisfaction)
        _merge(result.by_manager.setdefault(stats.primary_manager, {}), stats.satisfaction)
    result.score = satisfaction_score(result.tally)
    return result


def manager_stats(facilities: Mapping[str, FacilityStats]) -> Dict[str, ManagerStats]:
    managers: Dict[str, ManagerStats] = {}
    for name, stats in facilities.items():
        entry = managers.setdefault(stats.primary_manager, ManagerStats())
        entry.facilities.append(name)
        entry.total_responses += stats.total_responses
        _merge(entry.satisfaction, stats.satisfaction)
        _merge(entry.gender, stats.gender, skip_unspecified=True)
        _merge(entry.csp, stats.csp, skip_unspecified=True)
    for entry in managers.values():
        entry.satisfaction_score = satisfaction_score(entry.satisfaction)
    return managers


def facility_rankings(facilities: Mapping[str, FacilityStats]) -> List[FacilityRanking]:
    return [
        FacilityRanking(
            name=name,
            manager=stats.primary_manager,
            satisfaction=satisfaction_score(stats.satisfaction),
            total_responses=stats.total_responses,
        )
        for name, stats in facilities.items()
    ]


def _comparative(facilities: Mapping[str, FacilityStats], size: int) -> ComparativeAnalysis:
    rankings = facility_rankings(facilities)
    by_size: Dict[str, List[FacilityRanking]] = {"small": [], "medium": [], "large": []}
    for item in rankings:
        if item.total_responses <= SMALL_FACILITY_MAX:
            by_size["small"].append(item)
        elif item.total_responses <= MEDIUM_FACILITY_MAX:
            by_size["medium"].append(item)
        else:
            by_size["large"].append(item)
    return ComparativeAnalysis(
        top_satisfaction=sorted(rankings, key=lambda r: r.satisfaction, reverse=True)[:size],
        low_satisfaction=sorted(rankings, key=lambda r: r.satisfaction)[:size],
        most_responses=sorted(rankings, key=lambda r: r.total_responses, reverse=True)[:size],
        by_size=by_size,
    )


def aggregate_global(
    facilities: Mapping[str, FacilityStats],
    responses: Sequence[Response],
    settings: Optional[Settings] = None,
) -> GlobalStats:
    settings = settings or default_settings
    return GlobalStats(
        metadata=GlobalMetadata(
            total_facilities=len(facilities),
            total_responses=len(responses),
            survey_period=survey_period(responses),
        ),
        demographics=_demographics(facilities, responses),
        satisfaction=_satisfaction(facilities),
        managers=manager_stats(facilities),
        questions=aggregate_global_questions(facilities),
        comparative=_comparative(facilities, settings.ranking_size),
    )
