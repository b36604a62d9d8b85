from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from creche_survey.schemas.datasets import UNSPECIFIED

# A spreadsheet cell as handed back by the decoding layer
Cell = Union[str, int, float, datetime, None]


class SurveyModel(BaseModel):
    """Base for every survey entity: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ManagerColumn(SurveyModel):
    index: int
    label: str


class CheckboxOption(SurveyModel):
    index: int
    option_label: str
    free_text: bool = Field(
        default=False, description="Keep the cell text next to the option when checked"
    )


class ColumnMapping(SurveyModel):
    """Positions of the well-known columns of one header row."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    facility_column: Optional[int] = None
    manager_columns: List[ManagerColumn] = Field(default_factory=list)
    gender_column: Optional[int] = None
    age_column: Optional[int] = None
    csp_column: Optional[int] = None
    satisfaction_column: Optional[int] = None
    date_column: Optional[int] = None
    checkbox_groups: Dict[str, List[CheckboxOption]] = Field(default_factory=dict)

    def fixed_columns(self) -> Set[int]:
        """Indices consumed by single-valued fields and manager columns."""
        fixed = {
            idx
            for idx in (
                self.facility_column,
                self.gender_column,
                self.age_column,
                self.csp_column,
                self.satisfaction_column,
                self.date_column,
            )
            if idx is not None
        }
        fixed.update(m.index for m in self.manager_columns)
        return fixed

    def group_of(self, index: int) -> Optional[str]:
        for stem, options in self.checkbox_groups.items():
            if any(o.index == index for o in options):
                return stem
        return None


class AnswerEntry(SurveyModel):
    value: str
    original_header: str
    column_index: int


class ColumnRef(SurveyModel):
    key: str
    index: int
    header: str


class Response(SurveyModel):
    id: int = Field(0, description="1-based position of the row among data rows")
    facility: str
    manager: str = UNSPECIFIED
    gender: str = UNSPECIFIED
    age: str = UNSPECIFIED
    csp: str = UNSPECIFIED
    satisfaction: str = UNSPECIFIED
    date: Optional[datetime] = None
    answers: Dict[str, AnswerEntry] = Field(default_factory=dict)
    column_order: List[ColumnRef] = Field(default_factory=list)


class OpenResponse(SurveyModel):
    answer: str
    respondent_id: int
    gender: str
    csp: str
    manager: Optional[str] = None


class QuestionStats(SurveyModel):
    question: str = ""
    column_index: int = 0
    answers: Dict[str, int] = Field(default_factory=dict)
    total_responses: int = 0
    responses_list: List[OpenResponse] = Field(default_factory=list)
    is_open_question: bool = False
    is_multi_options: bool = False

    @property
    def kind(self) -> str:
        if self.is_multi_options:
            return "multi"
        if self.is_open_question:
            return "open"
        return "closed"


class FacilityStats(SurveyModel):
    total_responses: int = 0
    satisfaction: Dict[str, int] = Field(default_factory=dict)
    manager: Dict[str, int] = Field(default_factory=dict)
    gender: Dict[str, int] = Field(default_factory=dict)
    csp: Dict[str, int] = Field(default_factory=dict)
    csp_percentages: Dict[str, int] = Field(default_factory=dict)
    question_stats: Dict[str, QuestionStats] = Field(default_factory=dict)

    @property
    def primary_manager(self) -> str:
        return next(iter(self.manager), UNSPECIFIED)

    def _questions_of_kind(self, kind: str) -> Dict[str, QuestionStats]:
        return {k: q for k, q in self.question_stats.items() if q.kind == kind}

    @property
    def open_questions(self) -> Dict[str, QuestionStats]:
        return self._questions_of_kind("open")

    @property
    def closed_questions(self) -> Dict[str, QuestionStats]:
        return self._questions_of_kind("closed")

    @property
    def multi_options_questions(self) -> Dict[str, QuestionStats]:
        return self._questions_of_kind("multi")


class ManagerQuestionBreakdown(SurveyModel):
    answers: Dict[str, int] = Field(default_factory=dict)
    total_responses: int = 0
    responses_list: List[OpenResponse] = Field(default_factory=list)


class GlobalQuestionStats(QuestionStats):
    establishment_count: int = 0
    by_manager: Dict[str, ManagerQuestionBreakdown] = Field(default_factory=dict)


class GlobalMetadata(SurveyModel):
    total_facilities: int
    total_responses: int
    survey_period: str


class GlobalDemographics(SurveyModel):
    gender: Dict[str, int] = Field(default_factory=dict)
    age: Dict[str, int] = Field(default_factory=dict)
    csp: Dict[str, int] = Field(default_factory=dict)
    csp_optimized: Dict[str, int] = Field(default_factory=dict)
    facilities_by_manager: Dict[str, int] = Field(default_factory=dict)


class GlobalSatisfaction(SurveyModel):
    tally: Dict[str, int] = Field(default_factory=dict)
    by_manager: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    score: int = 0


class ManagerStats(SurveyModel):
    facilities: List[str] = Field(default_factory=list)
    total_responses: int = 0
    satisfaction: Dict[str, int] = Field(default_factory=dict)
    satisfaction_score: int = 0
    gender: Dict[str, int] = Field(default_factory=dict)
    csp: Dict[str, int] = Field(default_factory=dict)


class FacilityRanking(SurveyModel):
    name: str
    manager: str
    satisfaction: int
    total_responses: int


class ComparativeAnalysis(SurveyModel):
    top_satisfaction: List[FacilityRanking] = Field(default_factory=list)
    low_satisfaction: List[FacilityRanking] = Field(default_factory=list)
    most_responses: List[FacilityRanking] = Field(default_factory=list)
    by_size: Dict[str, List[FacilityRanking]] = Field(default_factory=dict)


class GlobalStats(SurveyModel):
    metadata: GlobalMetadata
    demographics: GlobalDemographics
    satisfaction: GlobalSatisfaction
    managers: Dict[str, ManagerStats]
    questions: Dict[str, GlobalQuestionStats]
    comparative: ComparativeAnalysis


class ExportSummary(SurveyModel):
    total_responses: int
    total_etablissements: int
    export_date: datetime
    generator: str = "creche-survey"


class SurveyExport(SurveyModel):
    summary: Optional[ExportSummary] = None
    etablissements: Dict[str, FacilityStats]
    raw_responses: List[Response]
