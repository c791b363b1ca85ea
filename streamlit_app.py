"""
Streamlit entry point for the AI Knowledge Worker dashboard.

Signs the user in through Supabase, fetches news or stock data through the
proxy, asks the proxy's AI endpoint for an analysis and keeps every result in
the user's history. All dashboard data lives in one DashboardState per browser
session, changed only through the actions in dashboard.state.
"""

from __future__ import annotations

import logging

import streamlit as st
from dotenv import load_dotenv

from dashboard import supabase_client
from dashboard.auth import AuthFailure, AuthService
from dashboard.config import config
from dashboard.controller import HISTORY_LOAD_FAILED_MESSAGE, DashboardController
from dashboard.history import HistoryStore
from dashboard.models import AnalysisRecord, UserSession
from dashboard.parsing import format_analysis_text
from dashboard.proxy_client import ProxyClient
from dashboard.state import (
    AnalysisSelected,
    DashboardState,
    HistoryLoaded,
    NotificationDismissed,
    Notify,
    SignedIn,
    SignedOut,
    reduce,
)

load_dotenv()

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
LOGGER = logging.getLogger(__name__)

AUTH_MODES = {
    "signIn": ("Sign in to access your dashboard", "Sign In"),
    "register": ("Create a new account", "Register"),
    "forgot": ("Reset your password", "Send Reset Email"),
}


@st.cache_resource(show_spinner=False)
def _get_proxy() -> ProxyClient:
    """One proxy client per Streamlit process; it holds no user data."""
    return ProxyClient()


# =========================
# SESSION STATE
# =========================

def _init_session_state() -> None:
    """Initialize keys stored in st.session_state."""
    if "dashboard" not in st.session_state:
        st.session_state.dashboard = DashboardState()
    if "pending_actions" not in st.session_state:
        st.session_state.pending_actions = []
    if "supabase" not in st.session_state:
        st.session_state.supabase = supabase_client.new_client()
    if "auth_mode" not in st.session_state:
        st.session_state.auth_mode = "signIn"
    if "history_store" not in st.session_state:
        st.session_state.history_store = None
    if "history_subscription" not in st.session_state:
        st.session_state.history_subscription = None
    if "session_restored" not in st.session_state:
        st.session_state.session_restored = False


def _state() -> DashboardState:
    return st.session_state.dashboard


def _dispatch(action) -> None:
    st.session_state.dashboard = reduce(st.session_state.dashboard, action)


def _queue(action) -> None:
    """Subscription callbacks queue actions; they are applied before the next render."""
    st.session_state.pending_actions.append(action)


def _drain_pending() -> None:
    pending = st.session_state.pending_actions
    st.session_state.pending_actions = []
    for action in pending:
        _dispatch(action)


def _auth() -> AuthService:
    return AuthService(st.session_state.supabase)


def _start_session(user: UserSession) -> None:
    """Sign the user in and open the single history subscription for this session."""
    _stop_history()
    _dispatch(SignedIn(user=user))
    if user.is_anonymous or not user.email_verified:
        return
    store = HistoryStore(st.session_state.supabase, config.APP_ID, config.HISTORY_TABLE)
    st.session_state.history_store = store
    st.session_state.history_subscription = store.subscribe(
        user.uid,
        on_change=lambda entries: _queue(HistoryLoaded(entries=entries)),
        on_error=lambda exc: _queue(Notify(message=HISTORY_LOAD_FAILED_MESSAGE, kind="error")),
    )


def _stop_history() -> None:
    subscription = st.session_state.history_subscription
    if subscription is not None:
        subscription.cancel()
    st.session_state.history_subscription = None
    st.session_state.history_store = None


def _sign_out() -> None:
    _stop_history()
    _auth().sign_out()
    st.session_state.pending_actions = []
    _dispatch(SignedOut())


def _restore_session() -> None:
    """Run once per browser session: refresh-token sign-in, else anonymous."""
    if st.session_state.session_restored:
        return
    st.session_state.session_restored = True
    user = _auth().restore_session(config.INITIAL_REFRESH_TOKEN)
    if user is not None:
        _start_session(user)


def _controller() -> DashboardController:
    return DashboardController(_get_proxy(), st.session_state.history_store)


# =========================
# AUTH SCREENS
# =========================

def _set_auth_mode(mode: str) -> None:
    st.session_state.auth_mode = mode


def _render_auth_screen() -> None:
    mode = st.session_state.auth_mode
    subtitle, submit_label = AUTH_MODES[mode]

    st.header("Autonomous AI Worker")
    st.caption(subtitle)

    sign_in_col, register_col = st.columns(2)
    sign_in_col.button("Sign In", on_click=_set_auth_mode, args=("signIn",), use_container_width=True)
    register_col.button("Register", on_click=_set_auth_mode, args=("register",), use_container_width=True)

    with st.form("auth_form"):
        email = st.text_input("Email Address")
        password = ""
        if mode != "forgot":
            password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(submit_label, use_container_width=True)

    if submitted:
        auth = _auth()
        with st.spinner("Processing..."):
            try:
                if mode == "signIn":
                    user = auth.sign_in(email, password)
                    if user is not None:
                        _start_session(user)
                        st.rerun()
                elif mode == "register":
                    st.success(auth.register(email, password))
                else:
                    st.success(auth.send_password_reset(email))
            except AuthFailure as exc:
                st.error(exc.message)

    if mode == "signIn":
        st.button("Forgot Password?", on_click=_set_auth_mode, args=("forgot",))


def _render_verify_screen(user: UserSession) -> None:
    st.header("Please Verify Your Email")
    st.write(
        f"A verification link has been sent to **{user.email}**. "
        "Please check your inbox and click the link to activate your account."
    )
    if st.button("Back to Sign In"):
        _sign_out()
        st.rerun()


# =========================
# DASHBOARD
# =========================

def _render_notification() -> None:
    notification = _state().notification
    if notification is None:
        return
    icon = "✅" if notification.kind == "success" else "⚠️"
    st.toast(notification.message, icon=icon)
    _dispatch(NotificationDismissed())


def _render_analysis(analysis: AnalysisRecord | None) -> None:
    if analysis is None or not analysis.summary:
        st.caption("Your AI-generated summary and key insights will appear here.")
        return

    st.subheader(f"Analysis for: {analysis.query}")
    st.markdown("#### Summary")
    st.write(analysis.summary)

    if analysis.insights:
        st.markdown("#### Key Insights")
        for position, insight in enumerate(analysis.insights, start=1):
            st.markdown(f"**{position}.** {insight}")

    st.download_button(
        "Download report",
        data=format_analysis_text(analysis.summary, analysis.insights),
        file_name="analysis.txt",
        mime="text/plain",
    )


@st.fragment(run_every=config.HISTORY_REFRESH_SECONDS)
def _render_history() -> None:
    """Live history panel; periodic runs pull a fresh snapshot, full reruns reuse a recent one."""
    subscription = st.session_state.history_subscription
    if subscription is not None:
        subscription.refresh(max_age=config.HISTORY_REFRESH_SECONDS / 2)
    _drain_pending()

    st.subheader("Analysis History")
    st.caption("Review your past analyses.")
    history = _state().history
    if not history:
        st.caption("Your analysis history will appear here.")
        return
    for entry in history:
        if st.button(f"{entry.query} · {entry.timestamp}", key=f"history-{entry.id}", use_container_width=True):
            _dispatch(AnalysisSelected(record=entry))
            st.rerun()


def _render_data_sources() -> None:
    state = _state()
    controller = _controller()

    st.subheader("1. Choose Data Source")
    st.caption("Select a file or fetch from an API.")
    uploaded = st.file_uploader("Upload a document")
    if st.button("Use Uploaded File", disabled=uploaded is None, use_container_width=True):
        _apply(controller.use_uploaded_file(state, uploaded.name if uploaded else None))

    st.divider()
    topic = st.text_input("News Topic", placeholder="e.g., 'AI advancements'")
    if st.button("Fetch News", disabled=state.loading_data or not topic, use_container_width=True):
        _apply(controller.request_news(state, topic))

    symbol = st.text_input("Stock Symbol", placeholder="e.g., 'AAPL'")
    if st.button("Fetch Stock Info", disabled=state.loading_data or not symbol, use_container_width=True):
        _apply(controller.request_stock(state, symbol))

    st.subheader("2. Generate Insights")
    st.caption("Analyze the selected data source.")
    if st.button(
        "Analyze with AI",
        disabled=state.raw_data is None or state.analyzing,
        use_container_width=True,
    ):
        _apply(controller.start_analysis(state))


def _run_pending_work(slot) -> None:
    """Finish in-flight work after the page has rendered with its controls disabled."""
    state = _state()
    controller = _controller()
    if state.pending_fetch is not None:
        with slot, st.spinner("Processing..."):
            _apply(controller.complete_fetch(state))
    elif state.analyzing:
        with slot, st.spinner("Processing..."):
            _apply(controller.complete_analysis(state))
    elif state.unsaved is not None:
        _apply(controller.save_analysis(state))


def _apply(new_state: DashboardState) -> None:
    st.session_state.dashboard = new_state
    st.rerun()


def _render_dashboard(user: UserSession) -> None:
    header_col, logout_col = st.columns([4, 1])
    header_col.title("AI Knowledge Worker")
    header_col.caption(f"Welcome, {user.email}")
    if logout_col.button("Logout"):
        _sign_out()
        st.rerun()

    _drain_pending()
    _render_notification()

    left, right = st.columns([1, 2], gap="large")
    with left:
        _render_data_sources()
        work_slot = st.empty()
    with right:
        state = _state()
        if state.error:
            st.error(state.error)
        _render_analysis(state.current_analysis)
        st.divider()
        _render_history()

    _run_pending_work(work_slot)


def main() -> None:
    st.set_page_config(page_title="AI Knowledge Worker", layout="wide")
    _init_session_state()

    if st.session_state.supabase is None:
        st.error(
            "Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY "
            "in your environment and restart the app."
        )
        return

    _restore_session()
    user = _state().user

    if user is None or user.is_anonymous:
        _render_auth_screen()
    elif not user.email_verified:
        _render_verify_screen(user)
    else:
        _render_dashboard(user)


if __name__ == "__main__":
    main()
