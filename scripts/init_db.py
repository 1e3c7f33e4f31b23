"""
Load the demo users/customers/invoices/revenue into DATABASE_URL (idempotent).

Usage:
  python scripts/init_db.py
"""
import logging
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.acme.db import build_engine, build_sessionmaker
from app.acme.seed import seed_database


def seed_only(*, database_url: str | None = None) -> dict[str, int]:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///acme.db").strip()
    timeout = float((os.environ.get("SEED_TIMEOUT_SECONDS") or "30").strip())

    # Direct engine/session so this can run in release without importing app.wsgi.
    engine = build_engine(db_url)
    s = build_sessionmaker(engine)()
    try:
        counts = seed_database(s, timeout_seconds=timeout)
    finally:
        s.close()
        engine.dispose()

    print("Initialized database (seed_only).")
    print(", ".join(f"{k}={v}" for k, v in counts.items()))
    return counts


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
