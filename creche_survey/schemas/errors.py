from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorCode:
    INPUT_EMPTY = "input_empty"
    NO_VALID_RESPONSES = "no_valid_responses"
    STRUCTURAL_VALIDATION = "structural_validation"
    LOOKUP_FILE = "lookup_file"
    INVALID_FILE_TYPE = "invalid_file_type"
    DATASET_TOO_LARGE = "dataset_too_large"
    FILE_UNREADABLE = "file_unreadable"
    INVALID_CHART_KEY = "invalid_chart_key"
    CHART_ERROR = "chart_error"
    PAYLOAD_ERROR = "payload_error"


class ErrorResponse(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable description")
    details: Optional[List[str]] = Field(default=None, description="Specific field issues")
    supported_chart_keys: Optional[List[str]] = Field(
        default=None, description="Available chart keys when invalid chart key provided"
    )
