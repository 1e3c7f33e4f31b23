"""
Session-bound CSRF token for state-changing requests behind the gate.
"""
import secrets

from flask import Request, jsonify, request, session

from app.acme.gate import is_gated

UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Unsafe-method routes that accept requests without a session CSRF token.
CSRF_EXEMPT_PATHS = frozenset({"/login", "/dashboard/logout", "/seed"})


def ensure_csrf_token() -> str:
    """Return the session's CSRF token, minting one on first use."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def submitted_csrf_token(req: Request) -> str | None:
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    if not token and req.is_json:
        token = (req.get_json(silent=True) or {}).get("csrf_token")
    return token or None


def validate_csrf(req: Request) -> bool:
    if req.path in CSRF_EXEMPT_PATHS:
        return True
    token = submitted_csrf_token(req)
    expected = session.get("csrf_token")
    return bool(token and expected and secrets.compare_digest(str(token), str(expected)))


def csrf_guard():
    """before_request hook. Paths outside the gate (API, images, probes) are not checked."""
    if not is_gated(request.path):
        return None
    ensure_csrf_token()
    session.permanent = True
    if request.method in UNSAFE_METHODS and not validate_csrf(request):
        return jsonify({"error": "CSRF token missing or invalid."}), 400
    return None
