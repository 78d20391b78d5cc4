"""
rfid.py
RFID modal: add / edit / remove the tag of a single user.
"""

from __future__ import annotations

import logging
from typing import Callable

from models import Err, ErrorKind, Ok, Result, User
from views import ADMIN_REQUIRED, AUTH_FAILED, NETWORK_ERROR, NO_TOKEN

CLOSED = "closed"
ADD = "add"
EDIT = "edit"

USER_NOT_FOUND = "User not found."
TAG_TAKEN = "RFID already assigned to another user."
NO_TAG = "User doesn't have an RFID assigned."


def _message(result: Err, specific: dict[int, str]) -> str:
    if result.kind == ErrorKind.NETWORK:
        return NETWORK_ERROR
    if result.kind == ErrorKind.HTTP:
        if result.code == 401:
            return AUTH_FAILED
        if result.code == 403:
            return ADMIN_REQUIRED
        if result.code in specific:
            return specific[result.code]
        return result.message or f"HTTP error! status: {result.code}"
    return result.message or "An error occurred while managing RFID"


def input_key(user_id: str) -> str:
    return f"rfid_value_{user_id}"


class RfidModal:
    def __init__(self, client, on_success: Callable[[], None]):
        self.client = client
        self.on_success = on_success
        self.mode = CLOSED
        self.user: User | None = None
        self.value = ""
        self.loading = False
        self.error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.mode != CLOSED

    @property
    def can_remove(self) -> bool:
        return self.mode == EDIT and bool(self.user and self.user.rfid)

    def open(self, user: User, widget_state=None) -> None:
        # Text typed into an earlier, abandoned dialog must not outlive it
        if widget_state is not None:
            widget_state.pop(input_key(user.user_id), None)
        self.user = user
        self.mode = EDIT if user.rfid else ADD
        self.value = user.rfid or ""
        self.error = None
        self.loading = False

    def close(self) -> None:
        self.mode = CLOSED
        self.user = None
        self.value = ""
        self.error = None

    def cancel(self) -> None:
        if self.loading:
            return
        self.close()

    def _run(self, action: str, call: Callable[[], Result], specific: dict[int, str]) -> bool:
        if not self.client.store.get_token():
            self.error = NO_TOKEN
            return False

        self.loading = True
        self.error = None
        try:
            result = call()
            match result:
                case Ok():
                    logging.info(f"RFID {action} succeeded for user {self.user.user_id}")
                    self.on_success()
                    self.close()
                    return True
                case Err():
                    logging.error(f"RFID {action} failed for user {self.user.user_id}: {result}")
                    self.error = _message(result, specific)
                    return False
        finally:
            self.loading = False
        return False

    def submit(self, tag: str) -> bool:
        """Assign (or replace) the tag. Blank values never reach the backend."""
        if self.loading or not self.is_open or self.user is None:
            return False
        tag = (tag or "").strip()
        self.value = tag
        if not tag:
            return False
        user_id = self.user.user_id
        return self._run(
            "assign",
            lambda: self.client.assign_rfid(user_id, tag),
            {404: USER_NOT_FOUND, 409: TAG_TAKEN},
        )

    def remove(self) -> bool:
        if self.loading or not self.is_open or self.user is None:
            return False
        user_id = self.user.user_id
        return self._run(
            "removal",
            lambda: self.client.remove_rfid(user_id),
            {404: USER_NOT_FOUND, 400: NO_TAG},
        )
