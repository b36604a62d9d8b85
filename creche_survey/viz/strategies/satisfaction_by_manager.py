from typing import Any, Dict

import altair as alt
import pandas as pd

from creche_survey.services.global_stats import manager_stats
from creche_survey.services.survey_metrics import satisfaction_class
from creche_survey.viz.base import IVisualizationStrategy, filter_facilities
from creche_survey.viz.theme import SATISFACTION_CLASS_COLORS, apply_theme


class SatisfactionByManagerStrategy(IVisualizationStrategy):
    """Satisfaction score per manager, bars sorted best first.

    Config:
        - min_responses (int): hide managers with fewer responses (default 0)
    """

    def generate(
        self,
        data: Dict[str, Any],
        config: Dict[str, Any],
        filters: Dict[str, Any],
        settings: Any,
    ) -> Dict[str, Any]:
        facilities = filter_facilities(data["facilities"], filters)
        if not facilities:
            raise ValueError("Aucun établissement à représenter")
        managers = manager_stats(facilities)

        min_responses = int(config.get("min_responses", 0))
        rows = [
            {
                "gestionnaire": manager,
                "satisfaction": stats.satisfaction_score,
                "classe": satisfaction_class(stats.satisfaction_score),
                "etablissements": len(stats.facilities),
                "reponses": stats.total_responses,
            }
            for manager, stats in managers.items()
            if stats.total_responses >= min_responses
        ]
        if not rows:
            raise ValueError("Aucun gestionnaire ne dépasse le seuil de réponses")
        df_plot = pd.DataFrame(rows)

        apply_theme()
        classes = list(SATISFACTION_CLASS_COLORS)
        chart = (
            alt.Chart(df_plot)
            .mark_bar()
            .encode(
                y=alt.Y(
                    "gestionnaire:N",
                    sort="-x",
                    title="Gestionnaire",
                    axis=alt.Axis(labelLimit=220),
                ),
                x=alt.X(
                    "satisfaction:Q",
                    title="Satisfaction (%)",
                    scale=alt.Scale(domain=[0, 100]),
                ),
                color=alt.Color(
                    "classe:N",
                    scale=alt.Scale(
                        domain=classes, range=[SATISFACTION_CLASS_COLORS[c] for c in classes]
                    ),
                    title="Niveau",
                ),
                tooltip=[
                    alt.Tooltip("gestionnaire:N", title="Gestionnaire"),
                    alt.Tooltip("satisfaction:Q", title="Satisfaction (%)"),
                    alt.Tooltip("etablissements:Q", title="Établissements"),
                    alt.Tooltip("reponses:Q", title="Réponses"),
                ],
            )
            .properties(title="Satisfaction par gestionnaire", height={"step": 24})
        )
        return chart.to_dict()
