"""
views.py
List-view controllers: fetch lifecycle, filter/sort/pagination state and the
client-side search for the users, active-parking and parking-history screens.

Controllers are plain objects kept in st.session_state; app.py only renders them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date
from typing import Callable

import config
from models import Err, ErrorKind, Filters, HistoryRecord, Ok, Pagination, ParkingSession, Result, User

AUTH_FAILED = "Authentication failed. Please login again."
ADMIN_REQUIRED = "Access denied. Admin privileges required."
NO_TOKEN = "No authentication token found"
NETWORK_ERROR = "Network error. Please try again."


def matches_search(search: str, fields: list[str]) -> bool:
    """Case-insensitive substring match of search against any of fields; '' matches all."""
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in (f or "").lower() for f in fields)


def to_iso_midnight(day: str) -> str:
    return f"{date.fromisoformat(day).isoformat()}T00:00:00.000Z"


class AutoRefresh:
    """
    Fixed-interval timer; only ticks while mounted.

    `slack` absorbs fragment reruns that Streamlit schedules a little before
    the interval has fully elapsed.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic, slack: float = 1.0):
        self.interval = interval
        self.slack = slack
        self._clock = clock
        self._last: float | None = None
        self.mounted = False

    def mount(self) -> None:
        self.mounted = True

    def unmount(self) -> None:
        self.mounted = False
        self._last = None

    def due(self) -> bool:
        if not self.mounted:
            return False
        return self._last is None or self._clock() - self._last >= self.interval - self.slack

    def mark(self) -> None:
        self._last = self._clock()


class ListViewController:
    resource = "records"
    auto_refresh_seconds: float | None = None

    def __init__(self, client, page_size: int = config.HISTORY_PAGE_SIZE):
        self.client = client
        self.items: list = []
        self.filters = Filters()
        self.pagination = Pagination(limit=page_size)
        self.loading = False
        self.error: str | None = None
        self.loaded = False
        self._seq = 0
        self.timer = AutoRefresh(self.auto_refresh_seconds) if self.auto_refresh_seconds else None

    # ---------- hooks for the concrete views ----------

    def query(self) -> dict:
        return {}

    def fetch(self, params: dict) -> Result:
        raise NotImplementedError

    def search_fields(self, item) -> list[str]:
        return []

    def matches(self, item) -> bool:
        return True

    # ---------- fetch lifecycle ----------

    def begin(self) -> int:
        """Start a request and return its sequence number."""
        self._seq += 1
        self.loading = True
        return self._seq

    def complete(self, seq: int, result: Result) -> bool:
        """
        Apply the result of request `seq`. Responses older than the newest
        issued request are dropped. Returns True when state was updated.
        """
        if seq != self._seq:
            logging.info(f"Dropping stale {self.resource} response #{seq} (latest is #{self._seq})")
            return False

        match result:
            case Ok(data=items, pagination=pagination):
                self.items = list(items or [])
                if pagination is not None:
                    self.pagination = pagination
                self.error = None
                self.loaded = True
            case Err(kind=ErrorKind.NETWORK):
                self.error = NETWORK_ERROR
            case Err(kind=ErrorKind.HTTP, code=401):
                self.error = AUTH_FAILED
            case Err(kind=ErrorKind.HTTP, code=403):
                self.error = ADMIN_REQUIRED
            case Err(kind=ErrorKind.HTTP, code=code):
                self.error = f"HTTP error! status: {code}"
            case Err():
                self.error = f"Failed to fetch {self.resource}"
        return True

    def refresh(self) -> None:
        seq = self.begin()
        try:
            if not self.client.store.get_token():
                self.error = NO_TOKEN
                return
            logging.info(f"Fetching {self.resource} (request #{seq})")
            self.complete(seq, self.fetch(self.query()))
        finally:
            if seq == self._seq:
                self.loading = False
            if self.timer is not None:
                self.timer.mark()

    def tick(self) -> bool:
        """Refresh if the auto-refresh interval has elapsed; returns True when it did."""
        if self.timer is None or not self.timer.due():
            return False
        self.refresh()
        return True

    # ---------- filters & pagination ----------

    def apply_filters(self) -> None:
        self.pagination = replace(self.pagination, page=1)
        self.refresh()

    def clear_filters(self) -> None:
        self.filters = Filters()
        self.pagination = replace(self.pagination, page=1)
        self.refresh()

    def set_page(self, page: int) -> None:
        self.pagination = replace(self.pagination, page=page)

    @property
    def visible_items(self) -> list:
        return [
            item for item in self.items
            if matches_search(self.filters.search, self.search_fields(item)) and self.matches(item)
        ]


class UsersView(ListViewController):
    resource = "users data"
    auto_refresh_seconds = config.REFRESH_SECONDS

    def fetch(self, params: dict) -> Result:
        return self.client.list_users()

    def search_fields(self, item: User) -> list[str]:
        fields = [item.username, item.email]
        for v in item.vehicles:
            fields.extend([v.plate, v.description])
        return fields

    def matches(self, item: User) -> bool:
        return self.filters.role == "all" or item.role == self.filters.role


class ActiveParkingView(ListViewController):
    resource = "active parking sessions"
    auto_refresh_seconds = config.REFRESH_SECONDS

    def fetch(self, params: dict) -> Result:
        return self.client.active_sessions()

    def search_fields(self, item: ParkingSession) -> list[str]:
        return [item.vehicle_plate, item.vehicle_description, item.user_id]

    def matches(self, item: ParkingSession) -> bool:
        return self.filters.status == "all" or item.payment_status == self.filters.status


class ParkingHistoryView(ListViewController):
    resource = "parking history"

    def query(self) -> dict:
        f = self.filters
        params = {
            "limit": str(self.pagination.limit),
            "page": str(self.pagination.page),
            "sortBy": f.sort_by,
            "sortOrder": f.sort_order,
        }
        if f.status != "all":
            params["status"] = f.status
        if f.start_date:
            params["startDate"] = to_iso_midnight(f.start_date)
        if f.end_date:
            params["endDate"] = to_iso_midnight(f.end_date)
        return params

    def fetch(self, params: dict) -> Result:
        return self.client.parking_history(params)

    def search_fields(self, item: HistoryRecord) -> list[str]:
        return [item.vehicle_plate, item.vehicle_description, item.user_name, item.user_email]
