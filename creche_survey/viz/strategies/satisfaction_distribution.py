from typing import Any, Dict

import altair as alt
import pandas as pd

from creche_survey.schemas.datasets import UNSPECIFIED
from creche_survey.services.survey_metrics import percent, satisfaction_score
from creche_survey.viz.base import IVisualizationStrategy, filter_facilities
from creche_survey.viz.theme import SATISFACTION_LEVEL_COLORS, apply_theme


class SatisfactionDistributionStrategy(IVisualizationStrategy):
    """
    Répartition des niveaux de satisfaction, pour un établissement ou pour l'ensemble.

    Config attendue:
      - facility (str, optionnel): établissement ciblé; absent = tous les établissements.
      - include_unspecified (bool, défaut False): garder la barre "Non spécifié".
    Filtres: "manager" restreint aux établissements d'un gestionnaire.
    """

    def generate(
        self,
        data: Dict[str, Any],
        config: Dict[str, Any],
        filters: Dict[str, Any],
        settings: Any,
    ) -> Dict[str, Any]:
        facilities = filter_facilities(data["facilities"], filters)
        facility = config.get("facility")
        if facility:
            if facility not in facilities:
                raise ValueError(f"Établissement '{facility}' introuvable")
            facilities = {facility: facilities[facility]}

        tally: Dict[str, int] = {}
        for stats in facilities.values():
            for label, count in stats.satisfaction.items():
                tally[label] = tally.get(label, 0) + count
        if not config.get("include_unspecified", False):
            tally.pop(UNSPECIFIED, None)
        if not tally:
            raise ValueError("Aucune donnée de satisfaction à représenter")

        total = sum(tally.values())
        df_plot = pd.DataFrame(
            [
                {"niveau": label, "effectif": count, "part": percent(count, total)}
                for label, count in tally.items()
            ]
        )

        apply_theme()
        known = [level for level in SATISFACTION_LEVEL_COLORS if level in tally]
        others = sorted(level for level in tally if level not in SATISFACTION_LEVEL_COLORS)
        domain = known + others
        palette = [SATISFACTION_LEVEL_COLORS.get(level, "#D1D5DB") for level in domain]

        score = satisfaction_score(tally)
        chart = (
            alt.Chart(df_plot)
            .mark_bar()
            .encode(
                x=alt.X("niveau:N", sort=domain, title="Niveau de satisfaction"),
                y=alt.Y("effectif:Q", title="Effectif"),
                color=alt.Color(
                    "niveau:N", scale=alt.Scale(domain=domain, range=palette), legend=None
                ),
                tooltip=[
                    alt.Tooltip("niveau:N", title="Niveau"),
                    alt.Tooltip("effectif:Q", title="Effectif"),
                    alt.Tooltip("part:Q", title="Part (%)"),
                ],
            )
            .properties(
                title=f"Satisfaction ({score}% satisfaits)",
                width="container",
            )
        )
        return chart.to_dict()
