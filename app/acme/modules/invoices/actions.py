"""
Write side of invoices.

Every action validates first and touches the store only with clean input. On success it asks
the host to invalidate the invoices listing and (create/update) to redirect there; on a bad
form it returns an `ActionState`; on a store failure it raises `ActionError`.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acme.constants import INVOICES_PATH
from app.acme.effects import PostWriteEffects
from app.acme.errors import ActionError
from app.acme.modules.invoices.models import INVOICE_STATUSES, Invoice
from app.acme.validation import ActionState, FieldSpec, validate_form

logger = logging.getLogger(__name__)


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


INVOICE_FORM = (
    FieldSpec("customerId", required_message="Please select a customer.", min_length=1),
    FieldSpec(
        "amount", required_message="Please enter a valid amount.", kind="number", positive=True, convert=to_cents
    ),
    FieldSpec("status", required_message="Please select an invoice status.", choices=INVOICE_STATUSES),
)


def create_invoice(s: Session, form: Mapping[str, Any], *, effects: PostWriteEffects, today: date | None = None):
    result = validate_form(INVOICE_FORM, form)
    if not result.ok:
        return ActionState(errors=result.errors, message="Missing Fields. Failed to Create Invoice.")

    inv = Invoice(
        customer_id=result.values["customerId"],
        amount=result.values["amount"],
        status=result.values["status"],
        date=today or date.today(),
    )
    try:
        s.add(inv)
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to create invoice: %s", e)
        raise ActionError("Failed to create invoice.") from e
    logger.info("Invoice created id=%s customer_id=%s", inv.id, inv.customer_id)

    effects.revalidate_path(INVOICES_PATH)
    return effects.redirect(INVOICES_PATH)


def update_invoice(s: Session, invoice_id: str, form: Mapping[str, Any], *, effects: PostWriteEffects):
    result = validate_form(INVOICE_FORM, form)
    if not result.ok:
        return ActionState(errors=result.errors, message="Missing Fields. Failed to Edit Invoice.")

    try:
        inv = s.get(Invoice, invoice_id)
        if inv is None:
            raise ActionError("Failed to update invoice.")
        inv.customer_id = result.values["customerId"]
        inv.amount = result.values["amount"]
        inv.status = result.values["status"]
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to update invoice id=%s: %s", invoice_id, e)
        raise ActionError("Failed to update invoice.") from e
    logger.info("Invoice updated id=%s", invoice_id)

    effects.revalidate_path(INVOICES_PATH)
    return effects.redirect(INVOICES_PATH)


def delete_invoice(s: Session, invoice_id: str, *, effects: PostWriteEffects) -> None:
    try:
        res = s.execute(delete(Invoice).where(Invoice.id == invoice_id))
        if res.rowcount == 0:
            s.rollback()
            raise ActionError("Failed to delete invoice.")
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to delete invoice id=%s: %s", invoice_id, e)
        raise ActionError("Failed to delete invoice.") from e
    logger.info("Invoice deleted id=%s", invoice_id)

    effects.revalidate_path(INVOICES_PATH)
