"""
Route-level authorization gate.

Per request there are two outcomes: permit, or deny with a redirect. `/seed`, `/query` and
`/debug-env` are let through for everyone; that is an operational bypass kept for
compatibility and it leaves those routes unauthenticated.
"""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

from app.acme.constants import DASHBOARD_PATH, LOGIN_PATH

# Paths the gate never looks at (public assets, JSON API, probes).
UNGATED_PREFIXES = ("/api/", "/static/", "/customers/")
UNGATED_PATHS = frozenset({"/health", "/healthz"})
UNGATED_SUFFIXES = (".png",)

BYPASS_PATHS = frozenset({"/seed", "/query", "/debug-env"})


@dataclass(frozen=True)
class GateDecision:
    permitted: bool
    redirect_to: str | None = None


PERMIT = GateDecision(permitted=True)


def is_gated(path: str) -> bool:
    if path in UNGATED_PATHS:
        return False
    if path.startswith(UNGATED_PREFIXES):
        return False
    return not path.endswith(UNGATED_SUFFIXES)


def login_redirect(callback_path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'callbackUrl': callback_path})}"


def authorize(path: str, logged_in: bool) -> GateDecision:
    if path in BYPASS_PATHS:
        return PERMIT

    if path.startswith(DASHBOARD_PATH):
        if logged_in:
            return PERMIT
        return GateDecision(permitted=False, redirect_to=login_redirect(path))

    if logged_in:
        # Already on the login page: let it render instead of bouncing forever.
        if path == LOGIN_PATH:
            return PERMIT
        return GateDecision(permitted=False, redirect_to=DASHBOARD_PATH)

    return PERMIT
