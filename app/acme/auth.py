from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from flask import Blueprint, current_app, g, jsonify, redirect, request, session
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from app.acme.constants import DASHBOARD_PATH
from app.acme.db import db_session
from app.acme.models import User
from app.acme.security import ensure_csrf_token
from app.acme.validation import is_valid_email

bp = Blueprint("auth", __name__)

CREDENTIALS_SIGNIN = "CredentialsSignin"
CALLBACK_ROUTE_ERROR = "CallbackRouteError"

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Categorized sign-in failure. `type` names the category."""

    def __init__(self, type: str, message: str | None = None) -> None:
        super().__init__(message or type)
        self.type = type


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/static/", "/health", "/healthz")):
        g.current_user = None
        return

    user_id = session.get("user_id")
    if not user_id:
        g.current_user = None
        return

    try:
        user = db_session().get(User, str(user_id))
    except SQLAlchemyError as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        user = None
    if user is None:
        session.pop("user_id", None)
    g.current_user = user


def get_user(s: Session, email: str) -> User | None:
    try:
        return s.execute(select(User).where(User.email == email)).scalar_one_or_none()
    except SQLAlchemyError as e:
        current_app.logger.exception("Failed to fetch user: %s", e)
        raise AuthError(CALLBACK_ROUTE_ERROR, "Failed to fetch user.") from e


def sign_in(s: Session, email: str | None, password: str | None) -> User:
    """
    Credentials provider: checks the credential shape, then the stored hash.
    On success the user id goes into the session.
    """
    email = (email or "").strip().lower()
    password = password or ""
    if not is_valid_email(email) or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError(CREDENTIALS_SIGNIN)

    user = get_user(s, email)
    if user is None or not check_password_hash(user.password_hash, password):
        current_app.logger.info("Invalid credentials (email=%s request_id=%s)", email, getattr(g, "request_id", None))
        raise AuthError(CREDENTIALS_SIGNIN)

    session.pop("user_id", None)
    session["user_id"] = user.id
    session.permanent = True
    return user


def authenticate(s: Session, form: Mapping[str, Any]) -> str | None:
    """
    Login form action. Returns a short message for categorized auth failures and None on
    success; anything uncategorized propagates.
    """
    try:
        sign_in(s, form.get("email"), form.get("password"))
    except AuthError as e:
        if e.type == CREDENTIALS_SIGNIN:
            return "Invalid credentials."
        return "Something went wrong."
    return None


def _safe_redirect_target(raw: str | None) -> str:
    # Only allow local paths to avoid open redirects.
    nxt = (raw or "").strip()
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return DASHBOARD_PATH


@bp.get("/login")
def login_get():
    return {
        "page": "login",
        "csrf_token": ensure_csrf_token(),
        "callbackUrl": _safe_redirect_target(request.args.get("callbackUrl")),
    }


@bp.post("/login")
def login_post():
    s = db_session()
    message = authenticate(s, request.form)
    if message:
        return jsonify({"message": message}), 401
    target = request.form.get("redirectTo") or request.form.get("callbackUrl")
    return redirect(_safe_redirect_target(target), code=303)


@bp.post("/dashboard/logout")
def logout():
    session.pop("user_id", None)
    return redirect("/", code=303)
