"""
app.py
Streamlit SmartPark Admin dashboard (admin-only).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

import streamlit as st

import api
import auth
import config
import guard
import rfid
import utils
import views
from models import HISTORY_SORT_FIELDS, PAYMENT_STATUSES, ROLES, SORT_ORDERS

logging.basicConfig(level=logging.INFO)
st.set_page_config(page_title="SmartPark Admin", layout="wide")

TABS = {
    "overview": "Dashboard",
    "users": "Users",
    "active-parking": "Active Parking",
    "parking-history": "Parking History",
}


def init_once():
    # An unusable store only means nobody stays signed in
    auth.init_storage()


def browser_session_id() -> str:
    """Identify this browser: the session cookie when present, else an id kept for the Streamlit session."""
    sid = st.context.cookies.get(config.SESSION_COOKIE)
    if sid:
        return sid
    if "browser_sid" not in st.session_state:
        st.session_state.browser_sid = uuid.uuid4().hex
    return st.session_state.browser_sid


def get_context():
    # One auth store / client / set of controllers per browser session
    if "store" not in st.session_state:
        store = auth.AuthStore(browser_session_id())
        client = api.ApiClient(store)
        users = views.UsersView(client)
        st.session_state.store = store
        st.session_state.client = client
        st.session_state.views = {
            "users": users,
            "active-parking": views.ActiveParkingView(client),
            "parking-history": views.ParkingHistoryView(client),
        }
        st.session_state.rfid_modal = rfid.RfidModal(client, on_success=users.refresh)
    if "tab" not in st.session_state:
        st.session_state.tab = "overview"
    return st.session_state


def current_path() -> str:
    return "/" + str(st.query_params.get("page", "dashboard")).strip("/")


def navigate(path: str):
    st.query_params["page"] = path.strip("/")
    st.rerun()


def reset_session():
    for key in ("store", "client", "views", "rfid_modal", "tab", "bounced"):
        st.session_state.pop(key, None)


def logout(ctx):
    auth.logout(ctx.store)
    ctx.client.close()
    reset_session()
    navigate(config.LOGIN_PATH)


# ---------- Login ----------

def login_screen(ctx):
    st.title("🅿️ SmartPark Admin")
    st.caption("Intelligent parking management system for the modern world.")

    col1, col2 = st.columns([1, 1])
    with col1:
        st.subheader("Sign In")
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password")
        if st.button("Sign In", type="primary"):
            with st.spinner("Signing in..."):
                outcome = auth.login(ctx.client, ctx.store, email, password)
            if outcome.ok:
                navigate(config.DASHBOARD_PATH)
            elif outcome.role_denied:
                st.error(f"**{outcome.error}**")
            else:
                st.error(outcome.error)

    with col2:
        st.info("Admin Only Credential")


# ---------- Shared view pieces ----------

def load(view: views.ListViewController):
    with st.spinner(f"Loading {view.resource}..."):
        view.refresh()


def error_panel(view: views.ListViewController) -> bool:
    if not view.error:
        return False
    st.error(f"Error: {view.error}")
    if st.button("Retry", key=f"retry_{view.resource}", type="primary"):
        load(view)
        st.rerun()
    return True


def mount_only(ctx, active: str):
    for name, view in ctx.views.items():
        if view.timer is None:
            continue
        if name == active:
            view.timer.mount()
        else:
            view.timer.unmount()


# ---------- Overview ----------

def overview_page():
    st.header("📊 Dashboard Overview")
    st.write(
        "Welcome to the SmartPark Admin Dashboard. Monitor parking activity, manage users "
        "and access key data in real time from one place."
    )

    st.divider()
    st.subheader("Quick Actions")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.caption("View and manage all users")
        if st.button("👥 Manage Users", use_container_width=True):
            st.session_state.tab = "users"
            st.rerun()
    with c2:
        st.caption("Monitor current parking sessions")
        if st.button("🚗 Active Parking", use_container_width=True):
            st.session_state.tab = "active-parking"
            st.rerun()
    with c3:
        st.caption("View parking records")
        if st.button("📋 Parking History", use_container_width=True):
            st.session_state.tab = "parking-history"
            st.rerun()


# ---------- Users ----------

@st.dialog("Manage RFID")
def rfid_dialog(modal: rfid.RfidModal):
    user = modal.user
    if user is None:
        return
    st.subheader(f"{'Add RFID' if modal.mode == rfid.ADD else 'Edit RFID'} - {user.username}")
    if modal.error:
        st.error(modal.error)

    value = st.text_input(
        "RFID Tag",
        value=modal.value,
        placeholder="Enter RFID tag identifier",
        disabled=modal.loading,
        key=rfid.input_key(user.user_id),
    )

    c1, c2, c3 = st.columns(3)
    with c1:
        remove = modal.can_remove and st.button("Remove RFID", disabled=modal.loading)
    with c2:
        cancel = st.button("Cancel", disabled=modal.loading)
    with c3:
        label = "Add RFID" if modal.mode == rfid.ADD else "Update RFID"
        save = st.button(label, type="primary", disabled=modal.loading or not value.strip())

    if cancel:
        modal.cancel()
        st.rerun()
    if remove:
        with st.spinner("Removing..."):
            done = modal.remove()
        st.rerun(scope="app" if done else "fragment")
    if save:
        with st.spinner("Saving..."):
            done = modal.submit(value)
        st.rerun(scope="app" if done else "fragment")


@st.fragment(run_every=config.REFRESH_SECONDS)
def users_body(view: views.UsersView):
    if view.tick():
        logging.info("Users view refreshed")
    if error_panel(view):
        return

    users = view.items
    st.caption(f"{len(users)} users")
    rows = view.visible_items
    if rows:
        st.dataframe(utils.users_frame(rows), use_container_width=True, hide_index=True)
    elif users:
        st.caption("No users match your search criteria.")
    else:
        st.caption("No users found.")

    st.subheader("User Statistics")
    stats = utils.user_summary(users)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Regular Users", stats["regular"])
    c2.metric("Admin Users", stats["admins"])
    c3.metric("Total Vehicles", stats["vehicles"])
    c4.metric("Users with RFID", stats["with_rfid"])


def rfid_section(view: views.UsersView, modal: rfid.RfidModal):
    colA, colB = st.columns([1, 2])
    with colA:
        st.subheader("Select user")
        options = {f"{u.username} ({u.email})": u for u in view.visible_items}
        chosen = st.selectbox("User", options=["(none)"] + list(options.keys()))
    with colB:
        if chosen != "(none)":
            user = options[chosen]
            st.subheader("RFID")
            st.write(f"Current tag: **{user.rfid or 'Not assigned'}**")
            if st.button("Edit RFID" if user.rfid else "Add RFID", type="primary"):
                modal.open(user, st.session_state)
                rfid_dialog(modal)


def users_page(ctx):
    st.header("👥 Users Management")
    view = ctx.views["users"]

    with st.sidebar:
        st.subheader("Search & Filters")
        view.filters.search = st.text_input(
            "Search", placeholder="Search by name, email, or vehicle...", key="users_search"
        )
        view.filters.role = st.selectbox(
            "Filter by Role", ["all", *ROLES], format_func=lambda r: "All Roles" if r == "all" else r.capitalize(),
            key="users_role",
        )

    users_body(view)
    if not view.error:
        st.divider()
        rfid_section(view, ctx.rfid_modal)


# ---------- Active parking ----------

@st.fragment(run_every=config.REFRESH_SECONDS)
def active_parking_body(view: views.ActiveParkingView):
    if view.tick():
        logging.info("Active parking view refreshed")
    if error_panel(view):
        return

    summary = utils.billing_summary(view.items)
    c1, c2, c3 = st.columns(3)
    c1.metric("Active sessions", summary["count"])
    c2.metric("Pending payment", summary["pending"])
    c3.metric("Total current billing", utils.format_currency(summary["total_billing"]))

    rows = view.visible_items
    if rows:
        st.dataframe(utils.active_frame(rows), use_container_width=True, hide_index=True)
    elif view.items:
        st.caption("No sessions match your search criteria.")
    else:
        st.caption("No active parking sessions.")


def active_parking_page(ctx):
    st.header("🚗 Active Parking Sessions")
    view = ctx.views["active-parking"]

    with st.sidebar:
        st.subheader("Search & Filters")
        view.filters.search = st.text_input(
            "Search Sessions", placeholder="Search by vehicle plate, description, or user ID...",
            key="active_search",
        )
        view.filters.status = st.selectbox(
            "Filter by Payment Status", ["all", *PAYMENT_STATUSES],
            format_func=lambda s: "All Status" if s == "all" else s.capitalize(),
            key="active_status",
        )

    active_parking_body(view)


# ---------- Parking history ----------

HISTORY_WIDGET_DEFAULTS = {
    "history_status": "all",
    "history_start": None,
    "history_end": None,
    "history_sort_by": "in_date",
    "history_sort_order": "desc",
}


def _apply_history_filters(view: views.ParkingHistoryView):
    start = st.session_state.get("history_start")
    end = st.session_state.get("history_end")
    view.filters.status = st.session_state.get("history_status", "all")
    view.filters.start_date = start.isoformat() if isinstance(start, date) else ""
    view.filters.end_date = end.isoformat() if isinstance(end, date) else ""
    view.filters.sort_by = st.session_state.get("history_sort_by", "in_date")
    view.filters.sort_order = st.session_state.get("history_sort_order", "desc")
    view.apply_filters()


def _clear_history_filters(view: views.ParkingHistoryView):
    for key, default in HISTORY_WIDGET_DEFAULTS.items():
        st.session_state[key] = default
    st.session_state["history_search"] = ""
    view.clear_filters()


def _goto_page(view: views.ParkingHistoryView, page: int):
    view.set_page(page)
    view.refresh()


def parking_history_page(ctx):
    st.header("📋 Parking History")
    view = ctx.views["parking-history"]

    with st.sidebar:
        st.subheader("Search & Filters")
        view.filters.search = st.text_input("Search", placeholder="Search by vehicle, user...", key="history_search")
        st.selectbox(
            "Payment Status", ["all", *PAYMENT_STATUSES],
            format_func=lambda s: "All Status" if s == "all" else s.capitalize(),
            key="history_status",
        )
        st.date_input("Start Date", value=None, key="history_start")
        st.date_input("End Date", value=None, key="history_end")
        st.selectbox("Sort By", list(HISTORY_SORT_FIELDS), format_func=HISTORY_SORT_FIELDS.get, key="history_sort_by")
        st.selectbox("Sort Order", list(SORT_ORDERS), format_func=SORT_ORDERS.get, key="history_sort_order")
        c1, c2 = st.columns(2)
        c1.button("Apply Filters", type="primary", on_click=_apply_history_filters, args=(view,))
        c2.button("Clear Filters", on_click=_clear_history_filters, args=(view,))

    if not view.loaded and view.error is None:
        load(view)
    if error_panel(view):
        return

    st.caption(f"Total: {view.pagination.total} records")
    summary = utils.billing_summary(view.items)
    c1, c2, c3 = st.columns(3)
    c1.metric("Paid", summary["paid"])
    c2.metric("Pending", summary["pending"])
    c3.metric("Total billing (this page)", utils.format_currency(summary["total_billing"]))

    rows = view.visible_items
    if rows:
        st.dataframe(utils.history_frame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No parking history found.")

    p = view.pagination
    st.caption(utils.showing_range(p, len(view.items)))
    c1, c2, c3 = st.columns([1, 2, 1])
    c1.button("Previous", disabled=p.page <= 1, on_click=_goto_page, args=(view, p.page - 1))
    c2.write(f"Page {p.page} of {p.pages}")
    c3.button("Next", disabled=p.page >= p.pages, on_click=_goto_page, args=(view, p.page + 1))


# ---------- Not found ----------

def not_found_page(ctx):
    st.title("404")
    st.header("Page Not Found")
    st.write("The page you are looking for doesn't exist or has been moved.")

    level = guard.capability(ctx.store.get_token(), ctx.store.get_user())
    st.subheader("Helpful links")
    if level >= guard.Capability.ADMIN:
        cols = st.columns(len(TABS))
        for col, (tab, label) in zip(cols, TABS.items()):
            if col.button(label, key=f"nf_{tab}", use_container_width=True):
                st.session_state.tab = tab
                navigate(config.DASHBOARD_PATH)
    elif level >= guard.Capability.TOKEN_ONLY:
        if st.button("Go to Dashboard", type="primary"):
            navigate(config.DASHBOARD_PATH)
    else:
        if st.button("Sign In", type="primary"):
            navigate(config.LOGIN_PATH)


# ---------- Dashboard ----------

def dashboard(ctx):
    user = ctx.store.get_user()

    st.sidebar.title("🅿️ SmartPark Admin")
    st.sidebar.caption(f"Welcome, {user.username if user else ''}")

    tabs = list(TABS)
    ctx.tab = st.sidebar.radio("Navigate", tabs, index=tabs.index(ctx.tab), format_func=TABS.get)

    if st.sidebar.button("Logout"):
        logout(ctx)

    mount_only(ctx, ctx.tab)

    if ctx.tab == "users":
        users_page(ctx)
    elif ctx.tab == "active-parking":
        active_parking_page(ctx)
    elif ctx.tab == "parking-history":
        parking_history_page(ctx)
    else:
        overview_page()


# --------- App entry ---------

def run():
    init_once()
    ctx = get_context()

    path = current_path()
    cookies = dict(st.context.cookies)
    session_token = ctx.store.get_token()

    target = guard.edge_redirect(path, cookies, dict(st.context.headers), session_token=session_token)
    # After a page-level rejection the login screen must not bounce back to /dashboard
    if target and not (target == config.DASHBOARD_PATH and ctx.get("bounced")):
        navigate(target)

    route = guard.resolve_route(path)
    if route == config.LOGIN_PATH:
        login_screen(ctx)
        return
    if route == "not_found":
        not_found_page(ctx)
        return

    target = guard.require_admin(ctx.store)
    if target:
        # A stored non-admin session would bounce between /login and /dashboard
        ctx.store.clear()
        ctx.bounced = True
        navigate(target)

    ctx.bounced = False

    dashboard(ctx)


if __name__ == "__main__":
    run()
