from __future__ import annotations

import auth
import guard
from models import User


def test_capability_levels(admin) -> None:
    regular = User(user_id="U-2", username="Budi", email="budi@x.id", role="user")
    assert guard.capability(None) == guard.Capability.ANONYMOUS
    assert guard.capability("", admin) == guard.Capability.ANONYMOUS
    assert guard.capability("tok") == guard.Capability.TOKEN_ONLY
    assert guard.capability("tok", regular) == guard.Capability.TOKEN_ONLY
    assert guard.capability("tok", admin) == guard.Capability.ADMIN


def test_protected_path_without_token_redirects_to_login() -> None:
    assert guard.edge_redirect("/dashboard", {}, {}) == "/login"
    assert guard.edge_redirect("/dashboard/users", {}, {"Authorization": "Bearer "}) == "/login"


def test_protected_path_accepts_cookie_or_bearer_header() -> None:
    assert guard.edge_redirect("/dashboard", {"token": "tok"}, {}) is None
    assert guard.edge_redirect("/dashboard", {}, {"authorization": "Bearer tok"}) is None


def test_unprotected_paths_pass_through() -> None:
    assert guard.edge_redirect("/somewhere", {}, {}) is None
    assert guard.edge_redirect("/admin", {}, {}, prefixes=("/dashboard",)) is None
    assert guard.edge_redirect("/admin/users", {}, {}, prefixes=("/admin",)) == "/login"


def test_login_with_token_cookie_goes_to_dashboard() -> None:
    assert guard.edge_redirect("/login", {"token": "tok"}, {}) == "/dashboard"
    assert guard.edge_redirect("/login", {}, {"Authorization": "Bearer tok"}) is None


def test_non_admin_token_passes_edge_but_not_page(store) -> None:
    store.save("tok-user", User(user_id="U-2", username="Budi", email="budi@x.id", role="user"))
    assert guard.edge_redirect("/dashboard", {"token": store.get_token()}, {}) is None
    assert guard.require_admin(store) == "/login"


def test_page_check_accepts_admin(signed_in) -> None:
    assert guard.require_admin(signed_in) is None


def test_page_check_rejects_signed_out(store) -> None:
    assert guard.require_admin(store) == "/login"


def test_resolve_route() -> None:
    assert guard.resolve_route("") == "/dashboard"
    assert guard.resolve_route("/login") == "/login"
    assert guard.resolve_route("dashboard/") == "/dashboard"
    assert guard.resolve_route("/profile") == "not_found"


def test_session_token_passes_edge_check() -> None:
    assert guard.edge_redirect("/dashboard", {}, {}, session_token="tok") is None
    assert guard.edge_redirect("/login", {}, {}, session_token="tok") == "/dashboard"


def test_other_browser_is_rejected_by_both_checks(signed_in) -> None:
    other = auth.AuthStore("browser-b")
    assert guard.edge_redirect("/dashboard", {}, {}, session_token=other.get_token()) == "/login"
    assert guard.require_admin(other) == "/login"
    assert guard.require_admin(signed_in) is None
