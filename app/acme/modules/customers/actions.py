from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acme.constants import CUSTOMERS_PATH
from app.acme.effects import PostWriteEffects
from app.acme.errors import ActionError
from app.acme.modules.customers.models import Customer
from app.acme.validation import ActionState, FieldSpec, validate_form

logger = logging.getLogger(__name__)

CUSTOMER_FORM = (
    FieldSpec("name", required_message="Please enter a name.", invalid_message="Please enter a valid name.", min_length=1),
    FieldSpec("email", required_message="Please enter an email.", invalid_message="Please enter a valid email.", email=True),
    FieldSpec(
        "image_url",
        required_message="Please enter an image URL.",
        invalid_message="Please enter a valid image URL.",
        min_length=1,
    ),
)


def create_customer(s: Session, form: Mapping[str, Any], *, effects: PostWriteEffects):
    result = validate_form(CUSTOMER_FORM, form)
    if not result.ok:
        return ActionState(errors=result.errors, message="Missing Fields. Failed to Create Customer.")

    c = Customer(
        name=result.values["name"],
        email=result.values["email"],
        image_url=result.values["image_url"],
    )
    try:
        s.add(c)
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to create customer: %s", e)
        raise ActionError("Failed to create customer.") from e
    logger.info("Customer created id=%s", c.id)

    effects.revalidate_path(CUSTOMERS_PATH)
    return effects.redirect(CUSTOMERS_PATH)


def update_customer(s: Session, customer_id: str, form: Mapping[str, Any], *, effects: PostWriteEffects):
    result = validate_form(CUSTOMER_FORM, form)
    if not result.ok:
        return ActionState(errors=result.errors, message="Missing Fields. Failed to Edit Customer.")

    try:
        c = s.get(Customer, customer_id)
        if c is None:
            raise ActionError("Failed to update customer.")
        c.name = result.values["name"]
        c.email = result.values["email"]
        c.image_url = result.values["image_url"]
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to update customer id=%s: %s", customer_id, e)
        raise ActionError("Failed to update customer.") from e
    logger.info("Customer updated id=%s", customer_id)

    effects.revalidate_path(CUSTOMERS_PATH)
    return effects.redirect(CUSTOMERS_PATH)


def delete_customer(s: Session, customer_id: str, *, effects: PostWriteEffects) -> None:
    # Customers that still own invoices are refused by the invoices FK (RESTRICT).
    try:
        res = s.execute(delete(Customer).where(Customer.id == customer_id))
        if res.rowcount == 0:
            s.rollback()
            raise ActionError("Failed to delete customer.")
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        logger.exception("Failed to delete customer id=%s: %s", customer_id, e)
        raise ActionError("Failed to delete customer.") from e
    logger.info("Customer deleted id=%s", customer_id)

    effects.revalidate_path(CUSTOMERS_PATH)
