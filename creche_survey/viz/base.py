from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping

from creche_survey.schemas.survey import FacilityStats


class IVisualizationStrategy(ABC):
    """Strategy for producing a Vega-Lite spec from analysis results.

    data: {"facilities": Dict[str, FacilityStats], "responses": List[Response]}
    config: chart-specific configuration
    filters: optional filter parameters applied before visualization
        ("manager" keeps the facilities of one manager)

    To add a new chart: create a strategy class in creche_survey/viz/strategies/, implement
    generate, document required config, and register the key in creche_survey/viz/__init__.py.
    """

    @abstractmethod
    def generate(
        self, data: Dict[str, Any], config: Dict[str, Any], filters: Dict[str, Any], settings: Any
    ) -> Dict[str, Any]:
        ...


def filter_facilities(
    facilities: Mapping[str, FacilityStats], filters: Mapping[str, Any]
) -> Dict[str, FacilityStats]:
    manager = (filters or {}).get("manager")
    if not manager:
        return dict(facilities)
    return {name: stats for name, stats in facilities.items() if stats.primary_manager == manager}
