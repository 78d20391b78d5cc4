"""
models.py
Records mirrored from the SmartPark API and the tagged request result (Ok / Err).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

ROLES = ("user", "admin")
PAYMENT_STATUSES = ("pending", "paid")

# Sort fields accepted by the history endpoint, with their UI labels
HISTORY_SORT_FIELDS = {
    "in_date": "Check-in Date",
    "out_date": "Check-out Date",
    "total_billing": "Total Billing",
    "payment_status": "Payment Status",
}
SORT_ORDERS = {
    "desc": "Newest First",
    "asc": "Oldest First",
}


@dataclass(frozen=True)
class Vehicle:
    plate: str
    description: str

    @classmethod
    def from_api(cls, raw: dict) -> "Vehicle":
        return cls(plate=str(raw.get("plate") or ""), description=str(raw.get("description") or ""))


@dataclass(frozen=True)
class User:
    user_id: str
    username: str
    email: str
    role: str  # 'user' or 'admin'
    vehicles: tuple[Vehicle, ...] = ()
    rfid: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_api(cls, raw: dict) -> "User":
        return cls(
            user_id=str(raw["userID"]),
            username=str(raw.get("username") or ""),
            email=str(raw.get("email") or ""),
            role=str(raw.get("role") or "user"),
            vehicles=tuple(Vehicle.from_api(v) for v in raw.get("vehicles") or []),
            rfid=raw.get("rfid") or None,
        )

    def to_api(self) -> dict:
        """Inverse of from_api; used when persisting the signed-in user."""
        out = {
            "userID": self.user_id,
            "username": self.username,
            "email": self.email,
            "vehicles": [{"plate": v.plate, "description": v.description} for v in self.vehicles],
            "role": self.role,
        }
        if self.rfid:
            out["rfid"] = self.rfid
        return out


@dataclass(frozen=True)
class ParkingSession:
    park_id: str
    user_id: str
    vehicle_plate: str
    vehicle_description: str
    in_date: str
    out_date: str | None
    payment_status: str  # 'pending' or 'paid'
    total_billing: float

    @staticmethod
    def _common(raw: dict) -> dict:
        return dict(
            park_id=str(raw["parkID"]),
            user_id=str(raw.get("userID") or ""),
            vehicle_plate=str(raw.get("vehicle_plate") or ""),
            vehicle_description=str(raw.get("vehicle_description") or ""),
            in_date=str(raw["in_date"]),
            out_date=raw.get("out_date") or None,
            payment_status=str(raw.get("payment_status") or "pending"),
            total_billing=float(raw.get("total_billing") or 0),
        )

    @classmethod
    def from_api(cls, raw: dict) -> "ParkingSession":
        return cls(**cls._common(raw))


@dataclass(frozen=True)
class HistoryRecord(ParkingSession):
    user_name: str = ""
    user_email: str = ""

    @classmethod
    def from_api(cls, raw: dict) -> "HistoryRecord":
        return cls(
            **cls._common(raw),
            user_name=str(raw.get("user_name") or ""),
            user_email=str(raw.get("user_email") or ""),
        )


@dataclass(frozen=True)
class Pagination:
    total: int = 0
    page: int = 1
    limit: int = 20
    pages: int = 1

    @classmethod
    def from_api(cls, raw: dict) -> "Pagination":
        total = int(raw.get("total") or 0)
        limit = int(raw.get("limit") or 20)
        pages = raw.get("pages")
        if pages is None:
            pages = max(1, math.ceil(total / limit))
        return cls(total=total, page=int(raw.get("page") or 1), limit=limit, pages=int(pages))


# ---------- Request results ----------

class ErrorKind(str, Enum):
    NETWORK = "network"    # no response
    HTTP = "http"          # non-2xx status
    ENVELOPE = "envelope"  # 2xx but status != "success" or unparsable body


@dataclass(frozen=True)
class Ok:
    data: Any = None
    pagination: Pagination | None = None


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""
    code: int | None = None


Result = Ok | Err


@dataclass(frozen=True)
class LoginData:
    token: str
    user: User


@dataclass
class Filters:
    search: str = ""
    status: str = "all"  # payment status
    role: str = "all"
    start_date: str = ""  # YYYY-MM-DD
    end_date: str = ""
    sort_by: str = "in_date"
    sort_order: str = "desc"
