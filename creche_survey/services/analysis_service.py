"""Single entry point turning a loaded file into facility statistics."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from creche_survey.config.observability import log_event, log_warning, timed
from creche_survey.config.settings import Settings, settings as default_settings
from creche_survey.schemas.survey import (
    Cell,
    ColumnMapping,
    FacilityStats,
    GlobalStats,
    Response,
    SurveyExport,
)
from creche_survey.services import data_loader, export_service
from creche_survey.services.aggregator import aggregate_responses, select_identified
from creche_survey.services.column_mapper import identify_columns
from creche_survey.services.failures import (  # noqa: F401 re-exported for callers
    AnalysisFailure,
    InputEmptyError,
    LookupFileError,
    NoValidResponsesError,
    StructuralValidationError,
)
from creche_survey.services.global_stats import aggregate_global
from creche_survey.services.manager_lookup import FacilityManagerLookup, load_lookup_table
from creche_survey.services.response_extractor import extract_response, is_valid_response

JSON_EXTENSION = ".json"


@dataclass
class AnalysisResult:
    facilities: Dict[str, FacilityStats]
    responses: List[Response]
    mapping: Optional[ColumnMapping] = None
    dropped_unidentified: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def total_responses(self) -> int:
        return len(self.responses)

    def global_stats(self, settings: Optional[Settings] = None) -> GlobalStats:
        return aggregate_global(self.facilities, self.responses, settings)

    def to_export(self) -> SurveyExport:
        return export_service.build_export(self.facilities, self.responses)


def analyze_grid(
    headers: Sequence[Optional[str]],
    rows: Sequence[Sequence[Cell]],
    lookup: Optional[FacilityManagerLookup] = None,
    settings: Optional[Settings] = None,
) -> AnalysisResult:
    settings = settings or default_settings
    if not headers or not rows:
        raise InputEmptyError("Le fichier est vide")

    with timed("identify_columns"):
        mapping = identify_columns(headers)

    with timed("extract_responses"):
        responses = [
            extract_response(row, mapping, headers, lookup=lookup, respondent_id=position)
            for position, row in enumerate(rows, start=1)
            if is_valid_response(row)
        ]
    if not responses:
        raise NoValidResponsesError("Aucune réponse valide trouvée dans le fichier")

    kept, dropped = select_identified(responses)
    with timed("aggregate_responses"):
        facilities = aggregate_responses(kept, settings)

    log_event(
        "dataset_analyzed",
        responses=len(kept),
        facilities=len(facilities),
        dropped_unidentified=dropped,
    )
    return AnalysisResult(
        facilities=facilities, responses=kept, mapping=mapping, dropped_unidentified=dropped
    )


def load_lookup_file(path: Union[str, Path]) -> FacilityManagerLookup:
    headers, rows = data_loader.read_path_to_grid(path)
    if not headers:
        raise LookupFileError("Le fichier de mapping est vide")
    return load_lookup_table(headers, rows)


def _try_lookup(path: Optional[Union[str, Path]], warnings: List[str]) -> Optional[FacilityManagerLookup]:
    if path is None:
        return None
    try:
        return load_lookup_file(path)
    except LookupFileError as exc:
        log_warning("lookup_file_ignored", exc.message, path=path)
        warnings.append(exc.message)
        return None


def analyze_bytes(
    data: bytes,
    filename: Optional[str],
    lookup: Optional[FacilityManagerLookup] = None,
    settings: Optional[Settings] = None,
) -> AnalysisResult:
    """Analyze a spreadsheet, or reload a previous JSON export as-is."""
    if (filename or "").lower().endswith(JSON_EXTENSION):
        with timed("load_export"):
            facilities, responses = export_service.load_export_text(
                data.decode("utf-8-sig", errors="replace")
            )
        return AnalysisResult(facilities=facilities, responses=responses)

    with timed("load_dataset"):
        headers, rows = data_loader.read_bytes_to_grid(data, filename)
    return analyze_grid(headers, rows, lookup=lookup, settings=settings)


def analyze_file(
    path: Union[str, Path],
    lookup_path: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
) -> AnalysisResult:
    path = Path(path)
    warnings: List[str] = []
    lookup = _try_lookup(lookup_path, warnings)
    result = analyze_bytes(path.read_bytes(), path.name, lookup=lookup, settings=settings)
    result.warnings.extend(warnings)
    return result
