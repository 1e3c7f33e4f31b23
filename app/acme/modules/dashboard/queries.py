from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acme.constants import LATEST_INVOICES_LIMIT
from app.acme.errors import DataFetchError
from app.acme.modules.customers.models import Customer
from app.acme.modules.dashboard.models import Revenue
from app.acme.modules.invoices.models import Invoice
from app.acme.utils import format_currency

logger = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def fetch_revenue(s: Session) -> list[dict[str, Any]]:
    try:
        rows = s.execute(select(Revenue.month, Revenue.revenue)).all()
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch revenue data.") from e
    order = {m: i for i, m in enumerate(MONTHS)}
    rows = sorted(rows, key=lambda r: order.get(r.month, len(MONTHS)))
    return [{"month": r.month, "revenue": r.revenue} for r in rows]


def fetch_latest_invoices(s: Session) -> list[dict[str, Any]]:
    stmt = (
        select(Invoice.id, Invoice.amount, Customer.name, Customer.image_url, Customer.email)
        .join(Customer, Invoice.customer_id == Customer.id)
        .order_by(Invoice.date.desc(), Invoice.id.asc())
        .limit(LATEST_INVOICES_LIMIT)
    )
    try:
        rows = s.execute(stmt).all()
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch the latest invoices.") from e
    return [
        {
            "id": r.id,
            "amount": format_currency(r.amount),
            "name": r.name,
            "image_url": r.image_url,
            "email": r.email,
        }
        for r in rows
    ]


def fetch_card_data(s: Session) -> dict[str, Any]:
    try:
        number_of_invoices = s.scalar(select(func.count()).select_from(Invoice)) or 0
        number_of_customers = s.scalar(select(func.count()).select_from(Customer)) or 0
        sums = dict(
            s.execute(select(Invoice.status, func.sum(Invoice.amount)).group_by(Invoice.status)).all()
        )
    except SQLAlchemyError as e:
        logger.exception("Database Error: %s", e)
        raise DataFetchError("Failed to fetch card data.") from e
    return {
        "number_of_customers": int(number_of_customers),
        "number_of_invoices": int(number_of_invoices),
        "total_paid_invoices": format_currency(sums.get("paid") or 0),
        "total_pending_invoices": format_currency(sums.get("pending") or 0),
    }
