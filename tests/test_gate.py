"""Unit tests for the route-level authorization gate."""

import pytest

from app.acme.gate import authorize, is_gated, login_redirect


@pytest.mark.parametrize("path", ["/dashboard", "/dashboard/invoices", "/dashboard/customers/abc/edit"])
def test_dashboard_denied_without_session(path):
    d = authorize(path, logged_in=False)
    assert d.permitted is False
    assert d.redirect_to == login_redirect(path)


@pytest.mark.parametrize("path", ["/dashboard", "/dashboard/invoices/create"])
def test_dashboard_permitted_with_session(path):
    assert authorize(path, logged_in=True).permitted is True


@pytest.mark.parametrize("path", ["/seed", "/query", "/debug-env"])
@pytest.mark.parametrize("logged_in", [True, False])
def test_operational_routes_always_permitted(path, logged_in):
    d = authorize(path, logged_in=logged_in)
    assert d.permitted is True
    assert d.redirect_to is None


def test_logged_in_elsewhere_redirects_to_dashboard():
    d = authorize("/", logged_in=True)
    assert d.permitted is False
    assert d.redirect_to == "/dashboard"


def test_logged_in_on_login_page_is_permitted():
    assert authorize("/login", logged_in=True).permitted is True


@pytest.mark.parametrize("path", ["/", "/login", "/anything"])
def test_anonymous_outside_dashboard_permitted(path):
    assert authorize(path, logged_in=False).permitted is True


def test_login_redirect_encodes_callback():
    assert login_redirect("/dashboard/invoices") == "/login?callbackUrl=%2Fdashboard%2Finvoices"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/upload", False),
        ("/customers/amy-burns.png", False),
        ("/hero.png", False),
        ("/health", False),
        ("/dashboard", True),
        ("/seed", True),
        ("/", True),
    ],
)
def test_is_gated(path, expected):
    assert is_gated(path) is expected
