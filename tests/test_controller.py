"""Tests for DashboardController with fake proxy and history collaborators."""

from datetime import datetime

import pytest

from dashboard.controller import (
    NETWORK_ERROR_MESSAGE,
    SAVE_FAILED_MESSAGE,
    DashboardController,
)
from dashboard.history import HistoryError
from dashboard.models import DataRequest, RawDataEnvelope, UserSession
from dashboard.proxy_client import ProxyClientError
from dashboard.state import DashboardState, SignedIn, reduce

NOW = datetime(2026, 10, 19, 9, 0, 0)
USER = UserSession(uid="u-1", email="ana@example.com", email_verified=True)


class FakeProxy:
    def __init__(self, news=None, stock=None, analysis=None, error=None):
        self.news = news
        self.stock = stock
        self.analysis = analysis
        self.error = error
        self.calls = []

    def _answer(self, name, value):
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return value

    def fetch_news(self, topic):
        return self._answer(("news", topic), self.news)

    def fetch_stock(self, symbol):
        return self._answer(("stock", symbol), self.stock)

    def analyze(self, data):
        return self._answer(("analyze", data), self.analysis)


class FakeHistory:
    def __init__(self, fail=False, events=None):
        self.fail = fail
        self.events = events if events is not None else []
        self.saved = []

    def add(self, user_id, record):
        self.events.append("save")
        if self.fail:
            raise HistoryError("permission denied")
        self.saved.append((user_id, record))
        return str(len(self.saved))


@pytest.fixture
def state():
    return reduce(DashboardState(), SignedIn(user=USER))


@pytest.fixture
def loaded(state):
    return state.model_copy(update={"raw_data": RawDataEnvelope(data={"a": 1}, query="News: AI")})


def _controller(proxy, history=None):
    return DashboardController(proxy, history, clock=lambda: NOW)


def _fetch_news(controller, state, topic):
    return controller.complete_fetch(controller.request_news(state, topic))


def _analyze(controller, state):
    return controller.complete_analysis(controller.start_analysis(state))


# ── Data sources ───────────────────────────────────────────────────────────

def test_request_news_marks_fetch_in_flight_without_calling_proxy(state):
    proxy = FakeProxy(news={"articles": []})
    rendered = _controller(proxy).request_news(state, "  AI chips ")

    assert rendered.loading_data is True
    assert rendered.pending_fetch == DataRequest(source="news", value="AI chips")
    assert proxy.calls == []


def test_fetch_news_success(state):
    proxy = FakeProxy(news={"articles": [{"title": "T"}]})
    result = _fetch_news(_controller(proxy), state, "  AI chips ")

    assert proxy.calls == [("news", "AI chips")]
    assert result.raw_data == RawDataEnvelope(data={"articles": [{"title": "T"}]}, query="News: AI chips")
    assert result.loading_data is False
    assert result.pending_fetch is None
    assert result.notification.message == "Data source loaded successfully!"


def test_fetch_news_requires_topic(state):
    proxy = FakeProxy()
    result = _controller(proxy).request_news(state, "   ")
    assert result.error == "Please enter a news topic."
    assert result.loading_data is False
    assert proxy.calls == []


def test_fetch_stock_uppercases_symbol(state):
    proxy = FakeProxy(stock={"Symbol": "AAPL"})
    controller = _controller(proxy)
    result = controller.complete_fetch(controller.request_stock(state, "aapl"))
    assert proxy.calls == [("stock", "AAPL")]
    assert result.raw_data.query == "Stock: AAPL"


def test_fetch_stock_requires_symbol(state):
    result = _controller(FakeProxy()).request_stock(state, "")
    assert result.error == "Please enter a stock symbol."


def test_fetch_error_uses_proxy_message(state):
    proxy = FakeProxy(error=ProxyClientError("Failed to fetch stock data"))
    controller = _controller(proxy)
    result = controller.complete_fetch(controller.request_stock(state, "AAPL"))
    assert result.error == "An error occurred: Failed to fetch stock data."
    assert result.raw_data is None
    assert result.loading_data is False
    assert result.pending_fetch is None


def test_fetch_network_error(state):
    proxy = FakeProxy(error=ProxyClientError("connection refused", network=True))
    result = _fetch_news(_controller(proxy), state, "AI")
    assert result.error == NETWORK_ERROR_MESSAGE


def test_fetch_clears_previous_analysis(state):
    state = state.model_copy(update={"error": "old"})
    result = _fetch_news(_controller(FakeProxy(news={})), state, "AI")
    assert result.error == ""
    assert result.current_analysis is None


def test_complete_fetch_without_request_is_a_no_op(state):
    proxy = FakeProxy(news={})
    assert _controller(proxy).complete_fetch(state) == state
    assert proxy.calls == []


def test_uploaded_file_stub(state):
    result = _controller(FakeProxy()).use_uploaded_file(state, "report.pdf")
    assert result.raw_data.data == {"status": "File processed for pipeline (POC)", "fileName": "report.pdf"}
    assert result.raw_data.query == "File: report.pdf"
    assert result.notification.message == 'File "report.pdf" uploaded successfully!'


def test_uploaded_file_required(state):
    result = _controller(FakeProxy()).use_uploaded_file(state, None)
    assert result.error == "Please select a file first."


# ── Analysis ───────────────────────────────────────────────────────────────

def test_analyze_requires_data(state):
    proxy = FakeProxy()
    result = _analyze(_controller(proxy), state)
    assert result.error == "No data to analyze."
    assert result.analyzing is False
    assert proxy.calls == []


def test_start_analysis_marks_in_flight_without_calling_proxy(loaded):
    proxy = FakeProxy(analysis="Summary: ok")
    rendered = _controller(proxy).start_analysis(loaded)

    assert rendered.analyzing is True
    assert proxy.calls == []


def test_analysis_is_rendered_before_it_is_saved(loaded):
    events = []
    history = FakeHistory(events=events)
    proxy = FakeProxy(analysis="Summary: Good.\nKey Insights:\n1. One\n2. Two")
    controller = _controller(proxy, history)

    result = _analyze(controller, loaded)
    events.append("rendered")
    controller.save_analysis(result)

    assert events == ["rendered", "save"]
    assert result.unsaved == result.current_analysis


def test_analyze_parses_and_saves(loaded):
    history = FakeHistory()
    proxy = FakeProxy(analysis="Summary: Good.\nKey Insights:\n1. One\n2. Two")
    controller = _controller(proxy, history)

    result = _analyze(controller, loaded)

    assert proxy.calls == [("analyze", {"a": 1})]
    assert result.analyzing is False
    assert result.current_analysis.summary == "Good."
    assert result.current_analysis.insights == ["One", "Two"]
    assert result.current_analysis.query == "News: AI"
    assert result.current_analysis.timestamp == "10/19/2026, 09:00:00 AM"
    assert history.saved == []

    saved = controller.save_analysis(result)
    assert history.saved == [("u-1", result.current_analysis)]
    assert saved.unsaved is None
    assert saved.current_analysis == result.current_analysis


def test_analyze_save_failure_only_notifies(loaded):
    controller = _controller(FakeProxy(analysis="Summary: ok"), FakeHistory(fail=True))
    result = controller.save_analysis(_analyze(controller, loaded))

    assert result.current_analysis.summary == "ok"
    assert result.unsaved is None
    assert result.error == ""
    assert result.notification.message == SAVE_FAILED_MESSAGE
    assert result.notification.kind == "error"


def test_save_without_unsaved_record_is_a_no_op(state):
    history = FakeHistory()
    assert _controller(FakeProxy(), history).save_analysis(state) == state
    assert history.saved == []


def test_analyze_with_empty_text(loaded):
    result = _analyze(_controller(FakeProxy(analysis=None), FakeHistory()), loaded)
    assert result.current_analysis.summary == "No content returned from AI."


def test_analyze_error(loaded):
    history = FakeHistory()
    proxy = FakeProxy(error=ProxyClientError("Failed to analyze data"))
    controller = _controller(proxy, history)

    result = _analyze(controller, loaded)

    assert result.error == "AI Analysis Error: Failed to analyze data."
    assert result.analyzing is False
    assert result.current_analysis is None
    assert result.unsaved is None
    assert controller.save_analysis(result) == result
    assert history.saved == []


def test_analyze_without_store_still_renders(loaded):
    controller = _controller(FakeProxy(analysis="Summary: ok"))
    result = controller.save_analysis(_analyze(controller, loaded))
    assert result.current_analysis.summary == "ok"
    assert result.unsaved is None
