"""
Per-user analysis history

Rows live in one Supabase table scoped by (app_id, user_id), the equivalent
of an /artifacts/<app>/users/<uid>/history collection. Subscriptions receive
a fresh newest-first snapshot on creation, after every write made through the
store, and whenever refresh() is called (optionally only once the last one
is older than a given age).
"""
import logging
import time
from typing import Callable, Dict, List, Optional

import httpx
from supabase import PostgrestAPIError

from dashboard.models import AnalysisRecord, HistoryEntry

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[HistoryEntry]], None]
ErrorCallback = Callable[[Exception], None]

STORE_ERRORS = (PostgrestAPIError, httpx.HTTPError)


class HistoryError(Exception):
    pass


class HistorySubscription:
    """Cancellation handle returned by HistoryStore.subscribe"""

    def __init__(
        self,
        store: "HistoryStore",
        user_id: str,
        on_change: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.store = store
        self.user_id = user_id
        self.on_change = on_change
        self.on_error = on_error
        self.active = True
        self.last_read: Optional[float] = None

    def refresh(self, max_age: Optional[float] = None) -> None:
        """
        Re-read the user's history and deliver it.

        With max_age, a snapshot read less than max_age seconds ago is kept
        and no query is made.
        """
        if not self.active:
            return
        now = self.store.clock()
        if max_age is not None and self.last_read is not None and now - self.last_read < max_age:
            return
        self.last_read = now
        try:
            entries = self.store.list(self.user_id)
        except HistoryError as e:
            logger.error(f"Error fetching history: {e}")
            if self.on_error is not None:
                self.on_error(e)
            return
        self.on_change(entries)

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.store._release(self)


class HistoryStore:
    def __init__(
        self,
        client,
        app_id: str,
        table: str = "analysis_history",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.app_id = app_id
        self.table = table
        self.clock = clock
        self._subscriptions: List[HistorySubscription] = []

    def _scoped(self, user_id: str) -> Dict[str, str]:
        return {"app_id": self.app_id, "user_id": user_id}

    def add(self, user_id: str, record: AnalysisRecord) -> str:
        """Insert one record and return its generated id"""
        row = {**self._scoped(user_id), **record.model_dump()}
        try:
            response = self.client.table(self.table).insert(row).execute()
        except STORE_ERRORS as e:
            raise HistoryError(f"Failed to save analysis: {e}") from e

        if not response.data:
            raise HistoryError("Insert returned no row")
        entry_id = str(response.data[0]["id"])
        logger.info(f"Saved analysis {entry_id} for user {user_id}")
        self._notify(user_id)
        return entry_id

    def list(self, user_id: str) -> List[HistoryEntry]:
        """All of a user's records, newest first"""
        try:
            response = (
                self.client.table(self.table)
                .select("id, query, timestamp, summary, insights, created_at")
                .eq("app_id", self.app_id)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except STORE_ERRORS as e:
            raise HistoryError(f"Failed to load history: {e}") from e

        entries = []
        for row in response.data or []:
            entries.append(HistoryEntry(
                id=str(row["id"]),
                query=row.get("query") or "",
                timestamp=row.get("timestamp") or "",
                summary=row.get("summary") or "",
                insights=list(row.get("insights") or []),
                created_at=row.get("created_at"),
            ))
        return entries

    def subscribe(
        self,
        user_id: str,
        on_change: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> HistorySubscription:
        subscription = HistorySubscription(self, user_id, on_change, on_error)
        self._subscriptions.append(subscription)
        subscription.refresh()
        return subscription

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    def _notify(self, user_id: str) -> None:
        for subscription in list(self._subscriptions):
            if subscription.user_id == user_id:
                subscription.refresh()

    def _release(self, subscription: HistorySubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
