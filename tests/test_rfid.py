from __future__ import annotations

import pytest

import rfid
from models import Err, ErrorKind, Ok, User


@pytest.fixture()
def refreshed():
    return []


@pytest.fixture()
def tagged_user() -> User:
    return User(user_id="U-5", username="Dewi", email="dewi@x.id", role="user", rfid="04A1B2")


@pytest.fixture()
def untagged_user() -> User:
    return User(user_id="U-6", username="Eko", email="eko@x.id", role="user")


def _modal(client, refreshed):
    return rfid.RfidModal(client, on_success=lambda: refreshed.append(True))


def test_open_picks_mode_from_existing_tag(signed_in, make_client, refreshed, tagged_user, untagged_user) -> None:
    modal = _modal(make_client(signed_in), refreshed)
    assert not modal.is_open

    modal.open(untagged_user)
    assert modal.mode == rfid.ADD
    assert modal.value == ""
    assert not modal.can_remove

    modal.open(tagged_user)
    assert modal.mode == rfid.EDIT
    assert modal.value == "04A1B2"
    assert modal.can_remove


def test_reopening_drops_text_typed_in_abandoned_dialog(signed_in, make_client, refreshed, tagged_user) -> None:
    modal = _modal(make_client(signed_in), refreshed)
    widget_state = {rfid.input_key("U-5"): "typed then cancelled", rfid.input_key("U-6"): "other user"}

    modal.open(tagged_user, widget_state)
    assert rfid.input_key("U-5") not in widget_state
    assert widget_state[rfid.input_key("U-6")] == "other user"
    assert modal.value == "04A1B2"


@pytest.mark.parametrize("tag", ["", "   ", "\t\n"])
def test_blank_tag_never_reaches_backend(signed_in, make_client, refreshed, untagged_user, tag) -> None:
    client = make_client(signed_in)
    modal = _modal(client, refreshed)
    modal.open(untagged_user)
    assert modal.submit(tag) is False
    assert client.calls == []
    assert modal.is_open


def test_submit_success_refreshes_and_closes(signed_in, make_client, refreshed, untagged_user) -> None:
    client = make_client(signed_in, Ok())
    modal = _modal(client, refreshed)
    modal.open(untagged_user)
    assert modal.submit("  04FFEE  ") is True
    assert client.calls == [("assign_rfid", "U-6", "04FFEE")]
    assert refreshed == [True]
    assert not modal.is_open
    assert modal.loading is False


@pytest.mark.parametrize(
    "code, message",
    [
        (401, "Authentication failed. Please login again."),
        (403, "Access denied. Admin privileges required."),
        (404, "User not found."),
        (409, "RFID already assigned to another user."),
    ],
)
def test_submit_errors_keep_modal_open(signed_in, make_client, refreshed, untagged_user, code, message) -> None:
    modal = _modal(make_client(signed_in, Err(ErrorKind.HTTP, "", code)), refreshed)
    modal.open(untagged_user)
    assert modal.submit("04FFEE") is False
    assert modal.error == message
    assert modal.is_open
    assert refreshed == []


def test_submit_other_error_uses_server_message(signed_in, make_client, refreshed, untagged_user) -> None:
    modal = _modal(make_client(signed_in, Err(ErrorKind.HTTP, "Invalid RFID format", 422)), refreshed)
    modal.open(untagged_user)
    modal.submit("zz")
    assert modal.error == "Invalid RFID format"


def test_remove_without_tag_stays_open_with_error(signed_in, make_client, refreshed, tagged_user) -> None:
    client = make_client(signed_in, Err(ErrorKind.HTTP, "", 400))
    modal = _modal(client, refreshed)
    modal.open(tagged_user)
    assert modal.remove() is False
    assert client.calls == [("remove_rfid", "U-5")]
    assert modal.error == "User doesn't have an RFID assigned."
    assert modal.is_open
    assert refreshed == []


def test_remove_success_refreshes_and_closes(signed_in, make_client, refreshed, tagged_user) -> None:
    modal = _modal(make_client(signed_in, Ok()), refreshed)
    modal.open(tagged_user)
    assert modal.remove() is True
    assert refreshed == [True]
    assert modal.mode == rfid.CLOSED


def test_in_flight_request_blocks_duplicates_and_cancel(signed_in, make_client, refreshed, tagged_user) -> None:
    client = make_client(signed_in)
    modal = _modal(client, refreshed)
    modal.open(tagged_user)
    modal.loading = True

    assert modal.submit("04FFEE") is False
    assert modal.remove() is False
    modal.cancel()
    assert modal.is_open
    assert client.calls == []


def test_cancel_closes(signed_in, make_client, refreshed, tagged_user) -> None:
    modal = _modal(make_client(signed_in), refreshed)
    modal.open(tagged_user)
    modal.cancel()
    assert not modal.is_open
    assert modal.user is None


def test_submit_without_token(store, make_client, refreshed, untagged_user) -> None:
    client = make_client(store)
    modal = _modal(client, refreshed)
    modal.open(untagged_user)
    assert modal.submit("04FFEE") is False
    assert modal.error == "No authentication token found"
    assert client.calls == []
