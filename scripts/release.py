"""
Release phase: schema migrations, then the demo seed.

Refuses to run without DATABASE_URL, and refuses SQLite when ENV is production. Seeding can
be switched off with SEED_ON_RELEASE=0 (it is idempotent, so leaving it on is safe).

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.acme.config import is_production_env


def release_database_url() -> str:
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    if is_production_env(os.environ.get("ENV")) and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to release against a sqlite DATABASE_URL in production.")
    return db_url


def migrate(db_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


def run_release() -> None:
    db_url = release_database_url()
    print(f"=== Acme release (ENV={os.environ.get('ENV') or '(unset)'}) ===", flush=True)

    print("Upgrading schema to head...", flush=True)
    migrate(db_url)

    if (os.environ.get("SEED_ON_RELEASE") or "1").strip() != "1":
        print("SEED_ON_RELEASE disabled; skipping demo data.", flush=True)
        return

    print("Loading demo data...", flush=True)
    from scripts.init_db import seed_only

    seed_only(database_url=db_url)
    print("=== Acme release done ===", flush=True)


if __name__ == "__main__":
    run_release()
