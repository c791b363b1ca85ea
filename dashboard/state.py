"""
Dashboard state and the named actions that move it.

The Streamlit script keeps one DashboardState per browser session and only
ever replaces it with reduce(state, action).

Slow work runs in two script runs: the *Started action is rendered first with
its in-flight flag set, then the proxy call finishes it on the next run.
An analysis that has been shown but not yet persisted waits in `unsaved`.
"""
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from dashboard.models import (
    AnalysisRecord,
    DataRequest,
    HistoryEntry,
    Notification,
    RawDataEnvelope,
    UserSession,
)


class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: Optional[UserSession] = None
    raw_data: Optional[RawDataEnvelope] = None
    current_analysis: Optional[AnalysisRecord] = None
    history: Tuple[HistoryEntry, ...] = ()
    loading_data: bool = False
    analyzing: bool = False
    error: str = ""
    notification: Optional[Notification] = None
    pending_fetch: Optional[DataRequest] = None
    unsaved: Optional[AnalysisRecord] = None


# =========================
# ACTIONS
# =========================

class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SignedIn(_Action):
    user: UserSession


class SignedOut(_Action):
    pass


class FetchStarted(_Action):
    request: Optional[DataRequest] = None


class FetchSucceeded(_Action):
    envelope: RawDataEnvelope
    message: str = "Data source loaded successfully!"


class FetchFailed(_Action):
    message: str


class AnalysisStarted(_Action):
    pass


class AnalysisSucceeded(_Action):
    record: AnalysisRecord


class AnalysisFailed(_Action):
    message: str


class SaveFinished(_Action):
    pass


class ValidationFailed(_Action):
    message: str


class HistoryLoaded(_Action):
    entries: List[HistoryEntry]


class AnalysisSelected(_Action):
    record: AnalysisRecord


class Notify(_Action):
    message: str
    kind: Literal["success", "error"] = "success"


class NotificationDismissed(_Action):
    pass


Action = Union[
    SignedIn,
    SignedOut,
    FetchStarted,
    FetchSucceeded,
    FetchFailed,
    AnalysisStarted,
    AnalysisSucceeded,
    AnalysisFailed,
    SaveFinished,
    ValidationFailed,
    HistoryLoaded,
    AnalysisSelected,
    Notify,
    NotificationDismissed,
]


def reduce(state: DashboardState, action: Action) -> DashboardState:
    """Apply one action and return the next state"""
    if isinstance(action, SignedIn):
        return DashboardState(user=action.user)
    if isinstance(action, SignedOut):
        return DashboardState()
    if isinstance(action, FetchStarted):
        return state.model_copy(update={
            "loading_data": True,
            "pending_fetch": action.request,
            "error": "",
            "raw_data": None,
            "current_analysis": None,
        })
    if isinstance(action, FetchSucceeded):
        return state.model_copy(update={
            "loading_data": False,
            "pending_fetch": None,
            "raw_data": action.envelope,
            "notification": Notification(message=action.message),
        })
    if isinstance(action, FetchFailed):
        return state.model_copy(update={
            "loading_data": False,
            "pending_fetch": None,
            "error": action.message,
        })
    if isinstance(action, AnalysisStarted):
        return state.model_copy(update={"analyzing": True, "error": ""})
    if isinstance(action, AnalysisSucceeded):
        return state.model_copy(update={
            "analyzing": False,
            "current_analysis": action.record,
            "unsaved": action.record,
        })
    if isinstance(action, AnalysisFailed):
        return state.model_copy(update={"analyzing": False, "error": action.message})
    if isinstance(action, SaveFinished):
        return state.model_copy(update={"unsaved": None})
    if isinstance(action, ValidationFailed):
        return state.model_copy(update={"error": action.message})
    if isinstance(action, HistoryLoaded):
        return state.model_copy(update={"history": tuple(action.entries)})
    if isinstance(action, AnalysisSelected):
        return state.model_copy(update={"current_analysis": action.record})
    if isinstance(action, Notify):
        return state.model_copy(update={
            "notification": Notification(message=action.message, kind=action.kind),
        })
    if isinstance(action, NotificationDismissed):
        return state.model_copy(update={"notification": None})
    raise ValueError(f"Unknown action: {type(action).__name__}")
