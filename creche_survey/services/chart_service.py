from datetime import datetime, timezone
from typing import Any, Dict, Optional

from creche_survey.config.observability import log_error, log_event, timed
from creche_survey.config.settings import settings
from creche_survey.services.analysis_service import AnalysisResult
from creche_survey.viz.registry import charts
import creche_survey.viz  # noqa: F401 ensures default strategies registered


class UnknownChartKeyError(KeyError):
    pass


def generate_chart(
    result: AnalysisResult,
    chart_key: str,
    config: Optional[Dict[str, Any]] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    strategy = charts.get(chart_key)
    if not strategy:
        log_error("invalid_chart_key", f"Unsupported chart key: {chart_key}")
        raise UnknownChartKeyError(f"Unsupported chart key: {chart_key}")

    with timed("generate_spec"):
        spec = strategy.generate(
            data={"facilities": result.facilities, "responses": result.responses},
            config=config or {},
            filters=filters or {},
            settings=settings,
        )

    log_event("chart_generated", chart_key=chart_key)
    return {
        "chart_key": chart_key,
        "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "spec": spec,
    }
