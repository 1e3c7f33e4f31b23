from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acme.constants import ITEMS_PER_PAGE
from app.acme.errors import DataFetchError, NotFoundError
from app.acme.modules.customers.models import Customer
from app.acme.modules.invoices.models import Invoice
from app.acme.utils import format_currency, total_pages

logger = logging.getLogger(__name__)


def customer_search_filter(query: str):
    like = f"%{query}%"
    return or_(Customer.name.ilike(like), Customer.email.ilike(like))


def fetch_customers(s: Session) -> list[dict[str, Any]]:
    """All customers as {id, name}, for the invoice form dropdown."""
    try:
        rows = s.execute(select(Customer.id, Customer.name).order_by(Customer.name.asc())).all()
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch all customers.") from e
    return [{"id": r.id, "name": r.name} for r in rows]


def fetch_filtered_customers(s: Session, query: str, current_page: int) -> list[dict[str, Any]]:
    """
    Customer table page with per-customer invoice totals.

    Customers without invoices still appear (outer join); their sums come back NULL and
    are rendered as $0.00.
    """
    offset = (current_page - 1) * ITEMS_PER_PAGE
    total_pending = func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0))
    total_paid = func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0))
    stmt = (
        select(
            Customer.id,
            Customer.name,
            Customer.email,
            Customer.image_url,
            func.count(Invoice.id).label("total_invoices"),
            total_pending.label("total_pending"),
            total_paid.label("total_paid"),
        )
        .outerjoin(Invoice, Customer.id == Invoice.customer_id)
        .where(customer_search_filter(query))
        .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
        .order_by(Customer.name.asc(), Customer.id.asc())
        .limit(ITEMS_PER_PAGE)
        .offset(offset)
    )
    try:
        rows = s.execute(stmt).all()
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch customer table.") from e

    return [
        {
            "id": r.id,
            "name": r.name,
            "email": r.email,
            "image_url": r.image_url,
            "total_invoices": int(r.total_invoices or 0),
            "total_pending": format_currency(r.total_pending or 0),
            "total_paid": format_currency(r.total_paid or 0),
        }
        for r in rows
    ]


def fetch_customers_pages(s: Session, query: str) -> int:
    try:
        if not query:
            count = s.scalar(select(func.count()).select_from(Customer))
        else:
            count = s.scalar(select(func.count()).select_from(Customer).where(customer_search_filter(query)))
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch total number of customers.") from e
    return total_pages(int(count or 0), ITEMS_PER_PAGE)


def fetch_customer_by_id(s: Session, customer_id: str) -> dict[str, Any]:
    try:
        c = s.get(Customer, customer_id)
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch customer.") from e
    if c is None:
        logger.info("Customer not found id=%s", customer_id)
        raise NotFoundError("Failed to fetch customer.")
    return {"id": c.id, "name": c.name, "email": c.email, "image_url": c.image_url}
