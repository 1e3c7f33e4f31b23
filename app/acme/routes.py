import traceback

from flask import Blueprint, current_app, jsonify

from app.acme.config import is_production_env
from app.acme.constants import QUERY_PROBE_AMOUNT
from app.acme.db import db_session
from app.acme.modules.invoices.queries import fetch_probe_invoices
from app.acme.seed import seed_database

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return {"app": "Acme", "login": "/login", "dashboard": "/dashboard"}


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for k8s/DO probes. No DB access, minimal overhead.
    """
    return "ok", 200


@bp.get("/query")
def query_probe():
    """Fixed diagnostic: invoices of exactly 666 cents with their customer name."""
    try:
        return jsonify(fetch_probe_invoices(db_session(), QUERY_PROBE_AMOUNT))
    except Exception as e:
        current_app.logger.exception("Query probe failed: %s", e)
        return jsonify({"error": str(e)}), 500


@bp.route("/seed", methods=["GET", "POST"])
def seed():
    try:
        counts = seed_database(db_session(), timeout_seconds=float(current_app.config.get("SEED_TIMEOUT_SECONDS") or 30))
    except Exception as e:
        current_app.logger.exception("Seed error: %s", e)
        body = {"error": str(e), "message": "Failed to seed database"}
        if not is_production_env(current_app.config.get("ENV")):
            body["stack"] = traceback.format_exc()
        return jsonify(body), 500
    return jsonify({"message": "Database seeded successfully", "counts": counts})


@bp.get("/debug-env")
def debug_env():
    """Non-secret runtime facts only."""
    cfg = current_app.config
    engine = current_app.extensions.get("sqlalchemy_engine")
    return {
        "env": cfg.get("ENV"),
        "database_dialect": engine.dialect.name if engine is not None else None,
        "database_url_set": bool((cfg.get("DATABASE_URL") or "").strip()),
        "secret_key_set": bool(cfg.get("SECRET_KEY")) and cfg.get("SECRET_KEY") != "change-me",
        "storage_backend": cfg.get("STORAGE_BACKEND"),
    }
