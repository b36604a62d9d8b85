from typing import List, Optional

from creche_survey.schemas.errors import ErrorCode


class AnalysisFailure(ValueError):
    code = "analysis_failure"

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class InputEmptyError(AnalysisFailure):
    code = ErrorCode.INPUT_EMPTY


class NoValidResponsesError(AnalysisFailure):
    code = ErrorCode.NO_VALID_RESPONSES


class StructuralValidationError(AnalysisFailure):
    code = ErrorCode.STRUCTURAL_VALIDATION


class LookupFileError(AnalysisFailure):
    """Raised for an unusable facility/manager file; callers downgrade it to a warning."""

    code = ErrorCode.LOOKUP_FILE
