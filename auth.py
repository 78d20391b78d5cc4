"""
auth.py
Auth store (token + user of the signed-in admin, kept in SQLite) and the login flow.

Storage problems never escape from here: a store that cannot be read is
treated as "signed out".
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass

import db
from models import Err, ErrorKind, LoginData, Ok, User

TOKEN_KEY = "token"
USER_KEY = "user"

ROLE_DENIED = "Access denied. You are not authorized as admin."


def init_storage() -> bool:
    """Create the store table; an unusable database leaves every browser signed out."""
    try:
        db.init_db()
        return True
    except sqlite3.Error as e:
        logging.warning(f"Auth store unavailable, continuing signed out: {e}")
        return False


class AuthStore:
    """Read/write access to the auth session persisted for one browser."""

    def __init__(self, session_id: str, backend=db):
        self.session_id = session_id
        self._db = backend

    def get_token(self) -> str | None:
        try:
            return self._db.get_value(self.session_id, TOKEN_KEY) or None
        except sqlite3.Error as e:
            logging.warning(f"Auth store unavailable while reading token: {e}")
            return None

    def get_user(self) -> User | None:
        try:
            raw = self._db.get_value(self.session_id, USER_KEY)
            if not raw:
                return None
            return User.from_api(json.loads(raw))
        except sqlite3.Error as e:
            logging.warning(f"Auth store unavailable while reading user: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logging.warning(f"Stored user record is corrupt, ignoring it: {e}")
        return None

    def save(self, token: str, user: User) -> None:
        self._db.set_value(self.session_id, TOKEN_KEY, token)
        self._db.set_value(self.session_id, USER_KEY, json.dumps(user.to_api()))

    def clear(self) -> None:
        try:
            self._db.delete_values(self.session_id, TOKEN_KEY, USER_KEY)
        except sqlite3.Error as e:
            logging.warning(f"Could not clear auth store: {e}")

    def is_authenticated_admin(self) -> bool:
        token = self.get_token()
        user = self.get_user()
        return bool(token and user and user.is_admin)


@dataclass(frozen=True)
class LoginOutcome:
    ok: bool
    error: str | None = None
    role_denied: bool = False
    user: User | None = None


def login(client, store: AuthStore, email: str, password: str) -> LoginOutcome:
    """
    Sign in against the backend. Only admins get their token/user persisted;
    any other role is turned away without touching the store.
    """
    email = email.strip()
    if not email or not password:
        return LoginOutcome(ok=False, error="Email and password are required")

    match client.login(email, password):
        case Ok(data=LoginData(token=token, user=user)):
            if not user.is_admin:
                logging.info(f"Login refused for non-admin account {email} (role={user.role})")
                return LoginOutcome(ok=False, error=ROLE_DENIED, role_denied=True)
            try:
                store.save(token, user)
            except sqlite3.Error as e:
                logging.error(f"Could not persist session for {email}: {e}")
                return LoginOutcome(ok=False, error="Could not save your session. Please try again.")
            logging.info(f"Admin {user.username} signed in")
            return LoginOutcome(ok=True, user=user)
        case Err(kind=ErrorKind.NETWORK):
            return LoginOutcome(ok=False, error="Network error. Please try again.")
        case Err(message=message):
            return LoginOutcome(ok=False, error=message or "Login failed.")
        case _:
            return LoginOutcome(ok=False, error="Login failed.")


def logout(store: AuthStore) -> None:
    store.clear()
