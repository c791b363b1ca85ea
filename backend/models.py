from typing import Any, Optional

from pydantic import BaseModel, Field

#=========================
#REQUEST / RESPONSE MODELS
#=========================


class AnalyzeRequest(BaseModel):
    data: Optional[Any] = Field(None, description="Arbitrary JSON payload to analyze")


class AnalyzeResponse(BaseModel):
    analysis: str


class ErrorResponse(BaseModel):
    error: str


def is_missing(value: Any) -> bool:
    """Absent, null, false, zero and blank-string parameters count as missing"""
    if value is None or isinstance(value, (bool, int, float)):
        return not value
    if isinstance(value, str):
        return value.strip() == ""
    return False
