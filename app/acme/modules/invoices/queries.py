"""
Read side of invoices: filtered/paginated table, page counts, single-invoice lookup.

Search is a case-insensitive substring match evaluated by the database against the stored
representation of each column (amount in cents and ISO date cast to text), never against
client-normalised values.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acme.constants import ITEMS_PER_PAGE
from app.acme.errors import DataFetchError, NotFoundError
from app.acme.modules.customers.models import Customer
from app.acme.modules.invoices.models import Invoice
from app.acme.utils import format_currency, format_date_to_local, total_pages

logger = logging.getLogger(__name__)


def invoice_search_filter(query: str):
    like = f"%{query}%"
    return or_(
        Customer.name.ilike(like),
        Customer.email.ilike(like),
        cast(Invoice.amount, String).ilike(like),
        cast(Invoice.date, String).ilike(like),
        Invoice.status.ilike(like),
    )


def _table_row(row) -> dict[str, Any]:
    return {
        "id": row.id,
        "customer_id": row.customer_id,
        "amount": format_currency(row.amount),
        "date": row.date.isoformat(),
        "formatted_date": format_date_to_local(row.date),
        "status": row.status,
        "name": row.name,
        "email": row.email,
        "image_url": row.image_url,
    }


def fetch_filtered_invoices(s: Session, query: str, current_page: int) -> list[dict[str, Any]]:
    offset = (current_page - 1) * ITEMS_PER_PAGE
    stmt = select(
        Invoice.id,
        Invoice.customer_id,
        Invoice.amount,
        Invoice.date,
        Invoice.status,
        Customer.name,
        Customer.email,
        Customer.image_url,
    ).join(Customer, Invoice.customer_id == Customer.id)
    if query:
        stmt = stmt.where(invoice_search_filter(query))
    stmt = stmt.order_by(Invoice.date.desc(), Invoice.id.asc()).limit(ITEMS_PER_PAGE).offset(offset)

    try:
        rows = s.execute(stmt).all()
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch invoices.") from e
    return [_table_row(r) for r in rows]


def count_matching_invoices(s: Session, query: str) -> int:
    if not query:
        return int(s.scalar(select(func.count()).select_from(Invoice)) or 0)
    stmt = (
        select(func.count())
        .select_from(Invoice)
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(invoice_search_filter(query))
    )
    return int(s.scalar(stmt) or 0)


def fetch_invoices_pages(s: Session, query: str) -> int:
    try:
        count = count_matching_invoices(s, query)
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch total number of invoices.") from e
    return total_pages(count, ITEMS_PER_PAGE)


def fetch_invoice_by_id(s: Session, invoice_id: str) -> dict[str, Any]:
    """Invoice for the edit form; amount is converted back from cents to dollars."""
    try:
        inv = s.get(Invoice, invoice_id)
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch invoice.") from e
    if inv is None:
        logger.info("Invoice not found id=%s", invoice_id)
        raise NotFoundError("Failed to fetch invoice.")
    return {
        "id": inv.id,
        "customer_id": inv.customer_id,
        "amount": inv.amount / 100,
        "status": inv.status,
    }


def fetch_probe_invoices(s: Session, amount: int) -> list[dict[str, Any]]:
    """Every invoice with exactly `amount` cents, as {amount, name}. Errors propagate."""
    stmt = (
        select(Invoice.amount, Customer.name)
        .join(Customer, Invoice.customer_id == Customer.id)
        .where(Invoice.amount == amount)
    )
    return [{"amount": r.amount, "name": r.name} for r in s.execute(stmt).all()]
