from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from creche_survey.schemas.survey import QuestionStats
from creche_survey.services.global_stats import aggregate_global_questions
from creche_survey.services.survey_metrics import calculate_percentages
from creche_survey.viz.base import IVisualizationStrategy, filter_facilities
from creche_survey.viz.theme import apply_theme


class QuestionDistributionStrategy(IVisualizationStrategy):
    """Answer counts of one closed or multi-option question.

    Config:
        - question (str, required): question key (header slug)
        - facility (str, optional): restrict to one facility; all facilities otherwise
        - top_n (int): keep the most frequent answers (default 15)

    Open questions have no tally and are rejected.
    """

    def generate(
        self,
        data: Dict[str, Any],
        config: Dict[str, Any],
        filters: Dict[str, Any],
        settings: Any,
    ) -> Dict[str, Any]:
        key = config.get("question")
        if not key:
            raise ValueError("config.question is required")

        facilities = filter_facilities(data["facilities"], filters)
        facility = config.get("facility")
        question: QuestionStats | None
        if facility:
            if facility not in facilities:
                raise ValueError(f"Établissement '{facility}' introuvable")
            question = facilities[facility].question_stats.get(key)
        else:
            question = aggregate_global_questions(facilities).get(key)
        if question is None:
            raise ValueError(f"Question '{key}' introuvable")
        if not question.answers:
            raise ValueError(f"La question '{question.question}' est une question ouverte")

        top_n = int(config.get("top_n", 15))
        stats = calculate_percentages(question.answers, question.total_responses)
        df_plot = pd.DataFrame(
            [
                {"reponse": label, "effectif": s["count"], "part": s["percentage"]}
                for label, s in stats.items()
            ]
        ).sort_values("effectif", ascending=False, kind="stable").head(top_n)

        apply_theme()
        subtitle = "Choix multiples" if question.is_multi_options else "Question fermée"
        chart = (
            alt.Chart(df_plot)
            .mark_bar(color="#1f77b4")
            .encode(
                y=alt.Y(
                    "reponse:N",
                    sort="-x",
                    title=None,
                    axis=alt.Axis(labelLimit=280, labelPadding=12),
                ),
                x=alt.X("effectif:Q", title="Effectif"),
                tooltip=[
                    alt.Tooltip("reponse:N", title="Réponse"),
                    alt.Tooltip("effectif:Q", title="Effectif"),
                    alt.Tooltip("part:Q", title="Part (%)"),
                ],
            )
            .properties(
                title={"text": question.question, "subtitle": subtitle},
                height={"step": 24},
                width="container",
            )
        )
        return chart.to_dict()
