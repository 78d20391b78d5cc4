from __future__ import annotations

import pytest

import auth
import db
from models import Ok, User, Vehicle


@pytest.fixture()
def store(tmp_path, monkeypatch) -> auth.AuthStore:
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "smartpark_test.db")
    db.init_db()
    return auth.AuthStore("browser-a")


@pytest.fixture()
def admin() -> User:
    return User(
        user_id="U-1",
        username="Rina",
        email="rina@smartpark.id",
        role="admin",
        vehicles=(Vehicle("B 1234 XYZ", "Black Avanza"),),
    )


class FakeClient:
    """Stands in for api.ApiClient; returns queued results and records calls."""

    def __init__(self, store, results=None):
        self.store = store
        self.results = list(results or [])
        self.calls: list[tuple] = []

    def _next(self, *call):
        self.calls.append(call)
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return Ok([])

    def login(self, email, password):
        return self._next("login", email, password)

    def list_users(self):
        return self._next("list_users")

    def active_sessions(self):
        return self._next("active_sessions")

    def parking_history(self, params):
        return self._next("parking_history", params)

    def assign_rfid(self, user_id, rfid):
        return self._next("assign_rfid", user_id, rfid)

    def remove_rfid(self, user_id):
        return self._next("remove_rfid", user_id)


@pytest.fixture()
def signed_in(store, admin) -> auth.AuthStore:
    store.save("tok-123", admin)
    return store


@pytest.fixture()
def make_client():
    def _make(store, *results):
        return FakeClient(store, results)

    return _make
