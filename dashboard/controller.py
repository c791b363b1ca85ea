"""
Dashboard operations

Each method takes the current DashboardState, performs one user operation
against the proxy and the history store, and returns the resulting state.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from dashboard.history import HistoryError, HistoryStore
from dashboard.models import DataRequest, RawDataEnvelope
from dashboard.parsing import build_analysis_record
from dashboard.proxy_client import ProxyClient, ProxyClientError
from dashboard.state import (
    AnalysisFailed,
    AnalysisStarted,
    AnalysisSucceeded,
    DashboardState,
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    Notify,
    SaveFinished,
    ValidationFailed,
    reduce,
)

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network request failed. Check if the backend server is running."
SAVE_FAILED_MESSAGE = "Failed to save analysis to history."
HISTORY_LOAD_FAILED_MESSAGE = "Could not load analysis history."
FILE_STUB_STATUS = "File processed for pipeline (POC)"


class DashboardController:
    """
    Slow operations come in two halves. request_*/start_analysis only validate
    and mark the work as in flight, so the next render shows disabled controls.
    complete_fetch/complete_analysis then talk to the proxy, and save_analysis
    persists a result once it has been rendered.
    """

    def __init__(
        self,
        proxy: ProxyClient,
        history: Optional[HistoryStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.proxy = proxy
        self.history = history
        self.clock = clock

    # =========================
    # DATA SOURCES
    # =========================

    def request_news(self, state: DashboardState, topic: str) -> DashboardState:
        topic = (topic or "").strip()
        if not topic:
            return reduce(state, ValidationFailed(message="Please enter a news topic."))
        return reduce(state, FetchStarted(request=DataRequest(source="news", value=topic)))

    def request_stock(self, state: DashboardState, symbol: str) -> DashboardState:
        symbol = (symbol or "").strip().upper()
        if not symbol:
            return reduce(state, ValidationFailed(message="Please enter a stock symbol."))
        return reduce(state, FetchStarted(request=DataRequest(source="stock", value=symbol)))

    def complete_fetch(self, state: DashboardState) -> DashboardState:
        request = state.pending_fetch
        if request is None:
            return state

        loader = self.proxy.fetch_news if request.source == "news" else self.proxy.fetch_stock
        try:
            data = loader(request.value)
        except ProxyClientError as e:
            logger.error(f"Data fetch failed for {request.query}: {e.message}")
            if e.network:
                return reduce(state, FetchFailed(message=NETWORK_ERROR_MESSAGE))
            return reduce(state, FetchFailed(message=f"An error occurred: {e.message}."))
        return reduce(state, FetchSucceeded(envelope=RawDataEnvelope(data=data, query=request.query)))

    def use_uploaded_file(self, state: DashboardState, file_name: Optional[str]) -> DashboardState:
        """Stub data source: only the file name reaches the analysis"""
        if not file_name:
            return reduce(state, ValidationFailed(message="Please select a file first."))
        envelope = RawDataEnvelope(
            data={"status": FILE_STUB_STATUS, "fileName": file_name},
            query=f"File: {file_name}",
        )
        return reduce(state, FetchSucceeded(
            envelope=envelope,
            message=f'File "{file_name}" uploaded successfully!',
        ))

    # =========================
    # ANALYSIS
    # =========================

    def start_analysis(self, state: DashboardState) -> DashboardState:
        if state.raw_data is None:
            return reduce(state, ValidationFailed(message="No data to analyze."))
        return reduce(state, AnalysisStarted())

    def complete_analysis(self, state: DashboardState) -> DashboardState:
        """Ask the proxy for the analysis; the result is left in `unsaved` for save_analysis"""
        if not state.analyzing or state.raw_data is None:
            return state
        try:
            text = self.proxy.analyze(state.raw_data.data)
        except ProxyClientError as e:
            logger.error(f"AI analysis failed: {e.message}")
            message = NETWORK_ERROR_MESSAGE if e.network else e.message
            return reduce(state, AnalysisFailed(message=f"AI Analysis Error: {message}."))

        record = build_analysis_record(text, state.raw_data.query, now=self.clock())
        return reduce(state, AnalysisSucceeded(record=record))

    def save_analysis(self, state: DashboardState) -> DashboardState:
        """Persist the rendered analysis; failure only notifies"""
        record = state.unsaved
        if record is None:
            return state
        state = reduce(state, SaveFinished())
        if self.history is None or state.user is None:
            return state
        try:
            self.history.add(state.user.uid, record)
        except HistoryError as e:
            logger.error(f"History save error: {e}")
            return reduce(state, Notify(message=SAVE_FAILED_MESSAGE, kind="error"))
        return state
