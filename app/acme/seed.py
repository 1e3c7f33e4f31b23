"""
Idempotent demo-data load.

Users, customers and revenue are inserted only when their key is missing (existing rows are
left alone); invoices are wiped and re-inserted. Running it twice converges to the same row
counts. Everything happens in one transaction: either every table converges or none does.
"""
from __future__ import annotations

import logging
import time
from datetime import date

from sqlalchemy import delete, func, select, text
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from app.acme import placeholder_data
from app.acme.models import User
from app.acme.modules.customers.models import Customer
from app.acme.modules.dashboard.models import Revenue
from app.acme.modules.invoices.models import Invoice

logger = logging.getLogger(__name__)


class SeedTimeoutError(RuntimeError):
    pass


def seed_users(s: Session) -> int:
    logger.info("Seeding users...")
    for u in placeholder_data.USERS:
        if s.get(User, u["id"]) is None:
            s.add(
                User(
                    id=u["id"],
                    name=u["name"],
                    email=u["email"],
                    password_hash=generate_password_hash(u["password"]),
                )
            )
    s.flush()
    logger.info("Seeded %s users", len(placeholder_data.USERS))
    return len(placeholder_data.USERS)


def seed_customers(s: Session) -> int:
    logger.info("Seeding customers...")
    for c in placeholder_data.CUSTOMERS:
        if s.get(Customer, c["id"]) is None:
            s.add(Customer(id=c["id"], name=c["name"], email=c["email"], image_url=c["image_url"]))
    s.flush()
    logger.info("Seeded %s customers", len(placeholder_data.CUSTOMERS))
    return len(placeholder_data.CUSTOMERS)


def seed_invoices(s: Session) -> int:
    logger.info("Seeding invoices...")
    existing = s.scalar(select(func.count()).select_from(Invoice)) or 0
    if existing:
        logger.info("Found %s existing invoices. Deleting...", existing)
        s.execute(delete(Invoice))

    seen: set[tuple] = set()
    rows: list[Invoice] = []
    for inv in placeholder_data.INVOICES:
        key = (inv["customer_id"], inv["amount"], inv["status"], inv["date"])
        if key in seen:
            continue
        seen.add(key)
        rows.append(
            Invoice(
                customer_id=inv["customer_id"],
                amount=inv["amount"],
                status=inv["status"],
                date=date.fromisoformat(inv["date"]),
            )
        )
    s.add_all(rows)
    s.flush()
    logger.info("Seeded %s invoices", len(rows))
    return len(rows)


def seed_revenue(s: Session) -> int:
    logger.info("Seeding revenue...")
    for r in placeholder_data.REVENUE:
        if s.get(Revenue, r["month"]) is None:
            s.add(Revenue(month=r["month"], revenue=r["revenue"]))
    s.flush()
    logger.info("Seeded %s revenue records", len(placeholder_data.REVENUE))
    return len(placeholder_data.REVENUE)


SEED_STEPS = (seed_users, seed_customers, seed_invoices, seed_revenue)


def table_counts(s: Session) -> dict[str, int]:
    return {
        "users": int(s.scalar(select(func.count()).select_from(User)) or 0),
        "customers": int(s.scalar(select(func.count()).select_from(Customer)) or 0),
        "invoices": int(s.scalar(select(func.count()).select_from(Invoice)) or 0),
        "revenue": int(s.scalar(select(func.count()).select_from(Revenue)) or 0),
    }


def seed_database(s: Session, *, timeout_seconds: float = 30.0) -> dict[str, int]:
    """Run every seed step in one transaction, then report row counts per table."""
    logger.info("Starting database seed...")
    deadline = time.monotonic() + timeout_seconds
    try:
        if s.get_bind().dialect.name == "postgresql":
            s.execute(text(f"SET LOCAL statement_timeout = {int(timeout_seconds * 1000)}"))
        for step in SEED_STEPS:
            step(s)
            if time.monotonic() > deadline:
                raise SeedTimeoutError(f"Seed transaction exceeded {timeout_seconds:g}s (during {step.__name__})")
        s.commit()
    except Exception:
        s.rollback()
        raise

    counts = table_counts(s)
    logger.info(
        "Seed completed successfully! Users: %(users)s, Customers: %(customers)s, "
        "Invoices: %(invoices)s, Revenue: %(revenue)s",
        counts,
    )
    return counts
