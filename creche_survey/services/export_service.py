from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from creche_survey.config.observability import log_event
from creche_survey.config.settings import Settings, settings as default_settings
from creche_survey.schemas.survey import ExportSummary, FacilityStats, Response, SurveyExport
from creche_survey.services.failures import StructuralValidationError
from creche_survey.services.validators import missing_export_keys

GENERATOR = "creche-survey"


def build_export(
    facilities: Mapping[str, FacilityStats],
    responses: Sequence[Response],
    export_date: Optional[datetime] = None,
) -> SurveyExport:
    summary = ExportSummary(
        total_responses=sum(stats.total_responses for stats in facilities.values()),
        total_etablissements=len(facilities),
        export_date=export_date or datetime.now(),
        generator=GENERATOR,
    )
    return SurveyExport(
        summary=summary, etablissements=dict(facilities), raw_responses=list(responses)
    )


def export_to_dict(export: SurveyExport) -> Dict[str, Any]:
    return export.model_dump(mode="json", by_alias=True)


def export_to_json(export: SurveyExport, settings: Optional[Settings] = None) -> str:
    settings = settings or default_settings
    return json.dumps(export_to_dict(export), ensure_ascii=False, indent=settings.export_indent)


def export_filename(export_date: Optional[datetime] = None) -> str:
    stamp = (export_date or datetime.now()).strftime("%Y-%m-%d")
    return f"resultats_enquete_creches_{stamp}.json"


def write_export(
    export: SurveyExport, path: Union[str, Path], settings: Optional[Settings] = None
) -> Path:
    path = Path(path)
    path.write_text(export_to_json(export, settings), encoding="utf-8")
    log_event("export_written", path=path, facilities=len(export.etablissements))
    return path


def load_export(payload: Any) -> Tuple[Dict[str, FacilityStats], List[Response]]:
    """Validate a previously exported structure and return its typed content."""
    missing = missing_export_keys(payload)
    if missing:
        raise StructuralValidationError(
            "Structure de fichier JSON invalide : clés manquantes", details=missing
        )
    try:
        export = SurveyExport.model_validate(payload)
    except ValidationError as exc:
        raise StructuralValidationError(
            "Structure de fichier JSON invalide",
            details=[f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()],
        ) from exc
    log_event(
        "export_loaded",
        facilities=len(export.etablissements),
        responses=len(export.raw_responses),
    )
    return export.etablissements, export.raw_responses


def load_export_text(text: str) -> Tuple[Dict[str, FacilityStats], List[Response]]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StructuralValidationError("Fichier JSON illisible", details=[str(exc)]) from exc
    return load_export(payload)
