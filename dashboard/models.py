from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

#=========================
#DASHBOARD MODELS
#=========================


class AnalysisRecord(BaseModel):
    """One finished analysis, as rendered and persisted to history"""
    model_config = ConfigDict(frozen=True)

    query: str
    timestamp: str
    summary: str
    insights: List[str] = Field(default_factory=list)


class HistoryEntry(AnalysisRecord):
    """An AnalysisRecord read back from the history table"""
    id: str
    created_at: Optional[str] = None


class RawDataEnvelope(BaseModel):
    """Fetched payload waiting to be analyzed; never persisted"""
    model_config = ConfigDict(frozen=True)

    data: Any
    query: str


class UserSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    is_anonymous: bool = False


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    kind: Literal["success", "error"] = "success"


class DataRequest(BaseModel):
    """A data-source fetch that has been accepted but not yet sent to the proxy"""
    model_config = ConfigDict(frozen=True)

    source: Literal["news", "stock"]
    value: str

    @property
    def query(self) -> str:
        label = "News" if self.source == "news" else "Stock"
        return f"{label}: {self.value}"
