import pytest
from sqlalchemy.exc import OperationalError

import app.acme.auth as auth_module
from app.acme.auth import CALLBACK_ROUTE_ERROR, AuthError, authenticate, get_user
from tests.conftest import login


def test_wrong_password_is_invalid_credentials(seeded, client):
    r = login(client, password="wrong-password")
    assert r.status_code == 401
    assert r.json == {"message": "Invalid credentials."}


def test_unknown_user_is_invalid_credentials(seeded, client):
    r = login(client, email="nobody@example.com")
    assert r.status_code == 401
    assert r.json == {"message": "Invalid credentials."}


@pytest.mark.parametrize("email,password", [("user@nextmail.com", "12345"), ("not-an-email", "123456"), ("", "")])
def test_malformed_credentials_rejected_before_lookup(seeded, client, email, password):
    r = login(client, email=email, password=password)
    assert r.status_code == 401
    assert r.json["message"] == "Invalid credentials."


def test_email_is_case_insensitive(seeded, client):
    r = login(client, email="  USER@NextMail.com ")
    assert r.status_code == 303


def test_login_redirects_to_callback(seeded, client):
    r = client.post(
        "/login",
        data={"email": "user@nextmail.com", "password": "123456", "callbackUrl": "/dashboard/customers"},
    )
    assert r.status_code == 303
    assert r.headers["Location"].endswith("/dashboard/customers")


def test_store_failure_during_lookup_is_generic(app, client, monkeypatch):
    def _broken_get_user(s, email):
        raise AuthError(CALLBACK_ROUTE_ERROR)

    monkeypatch.setattr(auth_module, "get_user", _broken_get_user)
    r = login(client)
    assert r.status_code == 401
    assert r.json == {"message": "Something went wrong."}


def test_get_user_wraps_store_errors(app):
    class _BrokenSession:
        def execute(self, *a, **kw):
            raise OperationalError("SELECT", {}, Exception("db down"))

    with app.app_context():
        with pytest.raises(AuthError) as ei:
            get_user(_BrokenSession(), "user@nextmail.com")
    assert ei.value.type == CALLBACK_ROUTE_ERROR


def test_uncategorized_error_propagates(app, monkeypatch):
    def _explode(s, email, password):
        raise ValueError("unexpected")

    monkeypatch.setattr(auth_module, "sign_in", _explode)
    with pytest.raises(ValueError):
        authenticate(None, {"email": "user@nextmail.com", "password": "123456"})
