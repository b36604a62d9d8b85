from typing import Any, Dict

import altair as alt
import pandas as pd

from creche_survey.services.reporting import facility_summary_frame, sort_view
from creche_survey.viz.base import IVisualizationStrategy, filter_facilities
from creche_survey.viz.theme import SATISFACTION_CLASS_COLORS, apply_theme


class FacilityRankingStrategy(IVisualizationStrategy):
    """Facilities ranked by satisfaction or by number of respondents.

    Config:
        - order ("satisfaction"|"respondents"): ranking metric (default "satisfaction")
        - top_n (int): number of facilities shown (default 20)
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

        order = str(config.get("order") or "satisfaction").lower()
        if order not in {"satisfaction", "respondents"}:
            raise ValueError("order must be 'satisfaction' or 'respondents'")
        top_n = int(config.get("top_n", 20))

        df_plot: pd.DataFrame = sort_view(facility_summary_frame(facilities), order).head(top_n)
        metric = "satisfaction" if order == "satisfaction" else "total_responses"

        apply_theme()
        classes = list(SATISFACTION_CLASS_COLORS)
        x_title = "Satisfaction (%)" if order == "satisfaction" else "Réponses"
        chart = (
            alt.Chart(df_plot)
            .mark_bar()
            .encode(
                y=alt.Y(
                    "facility:N",
                    sort=list(df_plot["facility"]),
                    title="Établissement",
                    axis=alt.Axis(labelLimit=280, labelPadding=12),
                ),
                x=alt.X(f"{metric}:Q", title=x_title),
                color=alt.Color(
                    "satisfaction_class:N",
                    scale=alt.Scale(
                        domain=classes, range=[SATISFACTION_CLASS_COLORS[c] for c in classes]
                    ),
                    title="Niveau",
                ),
                tooltip=[
                    alt.Tooltip("facility:N", title="Établissement"),
                    alt.Tooltip("manager:N", title="Gestionnaire"),
                    alt.Tooltip("satisfaction:Q", title="Satisfaction (%)"),
                    alt.Tooltip("total_responses:Q", title="Réponses"),
                ],
            )
            .properties(title="Classement des établissements", height={"step": 22})
        )
        return chart.to_dict()
