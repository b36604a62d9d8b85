from typing import Dict, List, Optional

from creche_survey.viz.base import IVisualizationStrategy


class ChartRegistry:
    def __init__(self) -> None:
        self._strategies: Dict[str, IVisualizationStrategy] = {}

    def register(self, key: str, strategy: IVisualizationStrategy) -> None:
        if key in self._strategies:
            raise KeyError(f"Chart key already registered: {key}")
        self._strategies[key] = strategy

    def get(self, key: str) -> Optional[IVisualizationStrategy]:
        return self._strategies.get(key)

    def list_keys(self) -> List[str]:
        return sorted(self._strategies)


charts = ChartRegistry()
