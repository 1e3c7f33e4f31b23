from __future__ import annotations

from flask import Blueprint, jsonify, redirect, request

from app.acme.constants import CUSTOMERS_PATH
from app.acme.db import db_session
from app.acme.effects import FlaskEffects
from app.acme.modules.customers.actions import create_customer, delete_customer, update_customer
from app.acme.modules.customers.queries import fetch_customer_by_id, fetch_customers_pages, fetch_filtered_customers
from app.acme.security import ensure_csrf_token
from app.acme.utils import generate_pagination, parse_page
from app.acme.validation import ActionState

bp = Blueprint("customers", __name__)


@bp.get("/dashboard/customers")
def customers_list():
    s = db_session()
    query = request.args.get("query") or ""
    page = parse_page(request.args.get("page"))
    total = fetch_customers_pages(s, query)
    return {
        "query": query,
        "page": page,
        "total_pages": total,
        "pagination": generate_pagination(page, total),
        "customers": fetch_filtered_customers(s, query, page),
    }


@bp.get("/dashboard/customers/create")
def customers_new_get():
    return {"csrf_token": ensure_csrf_token()}


@bp.post("/dashboard/customers/create")
def customers_new_post():
    result = create_customer(db_session(), request.form, effects=FlaskEffects())
    if isinstance(result, ActionState):
        return jsonify(result.to_dict()), 400
    return result


@bp.get("/dashboard/customers/<customer_id>/edit")
def customer_edit_get(customer_id: str):
    s = db_session()
    return {"customer": fetch_customer_by_id(s, customer_id), "csrf_token": ensure_csrf_token()}


@bp.post("/dashboard/customers/<customer_id>/edit")
def customer_edit_post(customer_id: str):
    result = update_customer(db_session(), customer_id, request.form, effects=FlaskEffects())
    if isinstance(result, ActionState):
        return jsonify(result.to_dict()), 400
    return result


@bp.post("/dashboard/customers/<customer_id>/delete")
def customer_delete(customer_id: str):
    delete_customer(db_session(), customer_id, effects=FlaskEffects())
    return redirect(CUSTOMERS_PATH, code=303)
