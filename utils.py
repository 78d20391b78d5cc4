"""
utils.py
Formatting helpers, table builders and summary metrics for the dashboard.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd

from models import HistoryRecord, Pagination, ParkingSession, User


def parse_timestamp(value: str) -> datetime:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime(value: str | None) -> str:
    if not value:
        return "-"
    try:
        return parse_timestamp(value).astimezone().strftime("%d/%m/%Y %H:%M:%S")
    except ValueError:
        return value


def format_duration(start: str, end: str | None = None, now: datetime | None = None) -> str:
    """
    Elapsed time as 'Xh Ym'. Without an end the session is still open and
    the duration runs until now.
    """
    try:
        begin = parse_timestamp(start)
        finish = parse_timestamp(end) if end else (now or datetime.now(timezone.utc))
    except ValueError:
        return "-"
    minutes = int((finish - begin).total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def format_currency(amount: float) -> str:
    # id-ID IDR style: 'Rp 12.500,00'
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"Rp {text}"


def showing_range(pagination: Pagination, count: int) -> str:
    if pagination.total == 0 or count == 0:
        return f"Showing 0 of {pagination.total}"
    first = (pagination.page - 1) * pagination.limit + 1
    last = min(pagination.page * pagination.limit, pagination.total)
    return f"Showing {first} to {last} of {pagination.total}"


# ---------- Tables ----------

USER_COLUMNS = ["userID", "username", "email", "role", "vehicles", "rfid"]
ACTIVE_COLUMNS = ["vehicle", "userID", "check_in", "duration", "payment_status", "current_bill"]
HISTORY_COLUMNS = ["vehicle", "user", "check_in", "check_out", "duration", "payment_status", "total_billing"]


def users_frame(users: list[User]) -> pd.DataFrame:
    rows = [
        {
            "userID": u.user_id,
            "username": u.username,
            "email": u.email,
            "role": u.role.capitalize(),
            "vehicles": ", ".join(f"{v.plate} ({v.description})" for v in u.vehicles) or "No vehicles",
            "rfid": u.rfid or "Not assigned",
        }
        for u in users
    ]
    return pd.DataFrame(rows, columns=USER_COLUMNS)


def active_frame(sessions: list[ParkingSession], now: datetime | None = None) -> pd.DataFrame:
    rows = [
        {
            "vehicle": f"{s.vehicle_plate} - {s.vehicle_description}",
            "userID": s.user_id,
            "check_in": format_datetime(s.in_date),
            "duration": format_duration(s.in_date, now=now),
            "payment_status": s.payment_status.capitalize(),
            "current_bill": format_currency(s.total_billing),
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=ACTIVE_COLUMNS)


def history_frame(records: list[HistoryRecord]) -> pd.DataFrame:
    rows = [
        {
            "vehicle": f"{r.vehicle_plate} - {r.vehicle_description}",
            "user": f"{r.user_name} <{r.user_email}>",
            "check_in": format_datetime(r.in_date),
            "check_out": format_datetime(r.out_date),
            "duration": format_duration(r.in_date, r.out_date) if r.out_date else "-",
            "payment_status": r.payment_status.capitalize(),
            "total_billing": format_currency(r.total_billing),
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def billing_summary(sessions: list[ParkingSession]) -> dict:
    """Counts per payment status and total billing over the fetched records."""
    df = pd.DataFrame(
        [{"payment_status": s.payment_status, "total_billing": s.total_billing} for s in sessions],
        columns=["payment_status", "total_billing"],
    )
    counts = df["payment_status"].value_counts()
    return {
        "count": int(len(df)),
        "paid": int(counts.get("paid", 0)),
        "pending": int(counts.get("pending", 0)),
        "total_billing": float(df["total_billing"].sum()) if not df.empty else 0.0,
    }


def user_summary(users: list[User]) -> dict:
    """Role counts, vehicles and RFID coverage over the fetched users."""
    df = pd.DataFrame(
        [{"role": u.role, "vehicles": len(u.vehicles), "rfid": bool(u.rfid)} for u in users],
        columns=["role", "vehicles", "rfid"],
    )
    roles = df["role"].value_counts()
    return {
        "regular": int(roles.get("user", 0)),
        "admins": int(roles.get("admin", 0)),
        "vehicles": int(df["vehicles"].sum()) if not df.empty else 0,
        "with_rfid": int(df["rfid"].sum()) if not df.empty else 0,
    }
