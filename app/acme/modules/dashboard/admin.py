from __future__ import annotations

from flask import Blueprint

from app.acme.db import db_session
from app.acme.modules.dashboard.queries import fetch_card_data, fetch_latest_invoices, fetch_revenue

bp = Blueprint("dashboard", __name__)


@bp.get("/dashboard")
def overview():
    s = db_session()
    return {
        "cards": fetch_card_data(s),
        "revenue": fetch_revenue(s),
        "latest_invoices": fetch_latest_invoices(s),
    }
