from typing import Any, Dict

import altair as alt
import pandas as pd

from creche_survey.schemas.datasets import UNSPECIFIED
from creche_survey.services.global_stats import optimize_csp
from creche_survey.services.survey_metrics import percent
from creche_survey.viz.base import IVisualizationStrategy, filter_facilities
from creche_survey.viz.theme import apply_theme


class CspDistributionStrategy(IVisualizationStrategy):
    """
    Répartition des catégories socio-professionnelles (graphique en anneau).

    Config attendue:
      - facility (str, optionnel): établissement ciblé; absent = tous les établissements.
    Les six CSP principales sont conservées, les autres regroupées dans "Autres CSP".
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

        csp: Dict[str, int] = {}
        for stats in facilities.values():
            for label, count in stats.csp.items():
                if label != UNSPECIFIED:
                    csp[label] = csp.get(label, 0) + count
        if not csp:
            raise ValueError("Aucune CSP renseignée")

        optimized = optimize_csp(csp)
        total = sum(optimized.values())
        df_plot = pd.DataFrame(
            [
                {"csp": label, "effectif": count, "part": percent(count, total)}
                for label, count in optimized.items()
            ]
        )

        apply_theme()
        chart = (
            alt.Chart(df_plot)
            .mark_arc(innerRadius=60)
            .encode(
                theta=alt.Theta("effectif:Q", stack=True),
                color=alt.Color("csp:N", title="CSP", sort=list(optimized)),
                tooltip=[
                    alt.Tooltip("csp:N", title="CSP"),
                    alt.Tooltip("effectif:Q", title="Effectif"),
                    alt.Tooltip("part:Q", title="Part (%)"),
                ],
            )
            .properties(title="Catégories socio-professionnelles")
        )
        return chart.to_dict()
