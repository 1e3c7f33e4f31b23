import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, jsonify, redirect, request

from app.acme.auth import bp as auth_bp, load_current_user
from app.acme.config import is_production_env, load_config
from app.acme.db import init_db, teardown_db_session
from app.acme.errors import ActionError, DataFetchError, NotFoundError
from app.acme.gate import authorize, is_gated
from app.acme.modules.customers.admin import bp as customers_bp
from app.acme.modules.dashboard.admin import bp as dashboard_bp
from app.acme.modules.invoices.admin import bp as invoices_bp
from app.acme.routes import bp as routes_bp
from app.acme.security import csrf_guard
from app.acme.uploads import bp as uploads_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, static_folder=None)
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
    )

    # Production guardrails (fail fast with clear logs)
    if is_production_env(app.config.get("ENV")):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os

        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(uploads_bp)

    # Order matters: user first, then the gate (needs g.current_user), then CSRF.
    app.before_request(load_current_user)

    @app.before_request
    def _authorization_gate():
        if not is_gated(request.path):
            return None
        decision = authorize(request.path, getattr(g, "current_user", None) is not None)
        if decision.permitted:
            return None
        return redirect(decision.redirect_to)

    app.before_request(csrf_guard)

    @app.after_request
    def _revalidated_paths_header(response):
        paths = getattr(g, "revalidated_paths", None)
        if paths:
            response.headers["X-Revalidated-Paths"] = ",".join(paths)
        return response

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(NotFoundError)
    def _err_not_found(e):  # type: ignore[no-redef]
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(DataFetchError)
    def _err_data_fetch(e):  # type: ignore[no-redef]
        # List-page error boundary: generic text plus where "Try again" should go.
        app.logger.error("Data fetch failed: %s (request_id=%s)", e, getattr(g, "request_id", None))
        return jsonify({"error": "Something went wrong!", "detail": str(e), "retry": request.path}), 500

    @app.errorhandler(ActionError)
    def _err_action(e):  # type: ignore[no-redef]
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"error": "Internal Server Error"}), 500

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        return jsonify({"error": "Request too large. Maximum size is 25MB."}), 413

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
