from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from creche_survey.schemas.datasets import MANAGER_NAMES, OTHER_MANAGERS, UNSPECIFIED
from creche_survey.schemas.survey import FacilityStats, Response
from creche_survey.services.survey_metrics import (
    satisfaction_class,
    satisfaction_score,
    survey_period,
)

SUMMARY_COLUMNS = [
    "facility",
    "manager",
    "satisfaction",
    "satisfaction_class",
    "total_responses",
    "genders",
    "top_csp",
]

VIEWS = ("name", "satisfaction", "manager", "respondents")


def format_genders(gender: Mapping[str, int]) -> str:
    parts = [f"{label}: {count}" for label, count in gender.items() if label != UNSPECIFIED]
    return ", ".join(parts) or UNSPECIFIED


def format_top_csp(percentages: Mapping[str, int], limit: int = 2) -> str:
    ranked = sorted(percentages.items(), key=lambda item: item[1], reverse=True)[:limit]
    return ", ".join(f"{label}: {pct}%" for label, pct in ranked) or UNSPECIFIED


def facility_summary_frame(facilities: Mapping[str, FacilityStats]) -> pd.DataFrame:
    rows = []
    for name, stats in facilities.items():
        score = satisfaction_score(stats.satisfaction)
        rows.append(
            {
                "facility": name,
                "manager": stats.primary_manager,
                "satisfaction": score,
                "satisfaction_class": satisfaction_class(score),
                "total_responses": stats.total_responses,
                "genders": format_genders(stats.gender),
                "top_csp": format_top_csp(stats.csp_percentages),
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _manager_rank(manager: str) -> int:
    return MANAGER_NAMES.index(manager) if manager in MANAGER_NAMES else len(MANAGER_NAMES)


def sort_view(frame: pd.DataFrame, view: str = "name") -> pd.DataFrame:
    """Order a summary frame the way one of the listing views presents it."""
    if view == "name":
        ordered = frame.sort_values("facility", kind="stable")
    elif view == "satisfaction":
        ordered = frame.sort_values("satisfaction", ascending=False, kind="stable")
    elif view == "respondents":
        ordered = frame.sort_values("total_responses", ascending=False, kind="stable")
    elif view == "manager":
        keyed = frame.assign(_rank=frame["manager"].map(_manager_rank))
        ordered = keyed.sort_values(["_rank", "manager"], kind="stable").drop(columns="_rank")
    else:
        raise ValueError(f"Unknown view '{view}', expected one of {', '.join(VIEWS)}")
    return ordered.reset_index(drop=True)


def group_by_manager(frame: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Facilities per manager in the fixed manager order, best satisfaction first.

    Facilities of unknown managers are gathered under "Autres ou vides".
    """
    labelled = frame.assign(
        group=frame["manager"].where(frame["manager"].isin(MANAGER_NAMES), OTHER_MANAGERS)
    )
    groups: Dict[str, pd.DataFrame] = {}
    for manager in [*MANAGER_NAMES, OTHER_MANAGERS]:
        members = labelled[labelled["group"] == manager].drop(columns="group")
        if not members.empty:
            groups[manager] = members.sort_values(
                "satisfaction", ascending=False, kind="stable"
            ).reset_index(drop=True)
    return groups


def manager_overview(frame: pd.DataFrame) -> pd.DataFrame:
    groups = group_by_manager(frame)
    rows: List[dict] = [
        {
            "manager": manager,
            "facilities": len(members),
            "total_responses": int(members["total_responses"].sum()),
            "average_satisfaction": int(math.floor(members["satisfaction"].mean() + 0.5)),
        }
        for manager, members in groups.items()
    ]
    return pd.DataFrame(
        rows, columns=["manager", "facilities", "total_responses", "average_satisfaction"]
    )


def dataset_summary(
    facilities: Mapping[str, FacilityStats], responses: Optional[Sequence[Response]] = None
) -> Dict[str, object]:
    tally: Dict[str, int] = {}
    for stats in facilities.values():
        for label, count in stats.satisfaction.items():
            tally[label] = tally.get(label, 0) + count
    return {
        "total_responses": sum(stats.total_responses for stats in facilities.values()),
        "total_facilities": len(facilities),
        "global_satisfaction": satisfaction_score(tally),
        "survey_period": survey_period(responses or []),
    }
