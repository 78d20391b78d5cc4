"""
api.py
HTTP client for the SmartPark backend.

Every call returns a Result (models.Ok / models.Err); transport errors,
non-2xx statuses and unsuccessful envelopes are all converted here.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx

import config
from models import Err, ErrorKind, HistoryRecord, LoginData, Ok, Pagination, ParkingSession, Result, User


def authenticated_options(store, options: dict | None = None) -> dict:
    """
    Return request options with the bearer token attached (when there is one).
    Headers already present in options take precedence.
    """
    options = dict(options or {})
    headers = {"Content-Type": "application/json"}
    token = store.get_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    headers.update(options.get("headers") or {})
    options["headers"] = headers
    return options


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""


class ApiClient:
    def __init__(
        self,
        store,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.store = store
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    # ---------- transport ----------

    def _send(self, method: str, path: str, *, authenticated: bool = True, **options) -> Result:
        if authenticated:
            options = authenticated_options(self.store, options)
        else:
            options.setdefault("headers", {"Content-Type": "application/json"})

        try:
            response = self._http.request(method, path, **options)
        except httpx.HTTPError as e:
            logging.error(f"{method} {path} failed: {e}")
            return Err(ErrorKind.NETWORK, str(e))

        if not response.is_success:
            logging.error(f"{method} {path} returned HTTP {response.status_code}")
            return Err(ErrorKind.HTTP, _error_message(response), response.status_code)

        try:
            body = response.json()
        except ValueError:
            logging.error(f"{method} {path} returned a non-JSON body")
            return Err(ErrorKind.ENVELOPE, "", response.status_code)

        if not isinstance(body, dict) or body.get("status") != "success":
            message = body.get("message", "") if isinstance(body, dict) else ""
            logging.error(f"{method} {path} returned an unsuccessful envelope")
            return Err(ErrorKind.ENVELOPE, str(message or ""), response.status_code)

        pagination = None
        if isinstance(body.get("pagination"), dict):
            pagination = Pagination.from_api(body["pagination"])
        return Ok(body.get("data"), pagination)

    def _send_records(self, path: str, parse: Callable[[dict], object], **options) -> Result:
        result = self._send("GET", path, **options)
        if isinstance(result, Err):
            return result
        try:
            items = [parse(raw) for raw in result.data or []]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.error(f"GET {path} returned malformed records: {e}")
            return Err(ErrorKind.ENVELOPE, "", 200)
        return Ok(items, result.pagination)

    # ---------- endpoints ----------

    def login(self, email: str, password: str) -> Result:
        result = self._send(
            "POST", "/api/users/login", authenticated=False, json={"email": email, "password": password}
        )
        if isinstance(result, Err):
            return result
        try:
            data = result.data
            return Ok(LoginData(token=str(data["token"]), user=User.from_api(data["user"])))
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Login response is malformed: {e}")
            return Err(ErrorKind.ENVELOPE, "", 200)

    def list_users(self) -> Result:
        return self._send_records("/api/users/all", User.from_api)

    def active_sessions(self) -> Result:
        return self._send_records("/api/parking/admin/active", ParkingSession.from_api)

    def parking_history(self, params: dict) -> Result:
        return self._send_records("/api/parking/admin/history", HistoryRecord.from_api, params=params)

    def assign_rfid(self, user_id: str, rfid: str) -> Result:
        return self._send("POST", "/api/users/admin/rfid", json={"userID": user_id, "rfid": rfid})

    def remove_rfid(self, user_id: str) -> Result:
        return self._send("DELETE", f"/api/users/admin/rfid/{user_id}")
