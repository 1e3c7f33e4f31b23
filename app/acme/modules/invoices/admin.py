from __future__ import annotations

from flask import Blueprint, jsonify, redirect, request

from app.acme.constants import INVOICES_PATH
from app.acme.db import db_session
from app.acme.effects import FlaskEffects
from app.acme.modules.customers.queries import fetch_customers
from app.acme.modules.invoices.actions import create_invoice, delete_invoice, update_invoice
from app.acme.modules.invoices.queries import fetch_filtered_invoices, fetch_invoice_by_id, fetch_invoices_pages
from app.acme.security import ensure_csrf_token
from app.acme.utils import generate_pagination, parse_page
from app.acme.validation import ActionState

bp = Blueprint("invoices", __name__)


def _action_response(result):
    if isinstance(result, ActionState):
        return jsonify(result.to_dict()), 400
    return result


@bp.get("/dashboard/invoices")
def invoices_list():
    s = db_session()
    query = request.args.get("query") or ""
    page = parse_page(request.args.get("page"))
    total = fetch_invoices_pages(s, query)
    return {
        "query": query,
        "page": page,
        "total_pages": total,
        "pagination": generate_pagination(page, total),
        "invoices": fetch_filtered_invoices(s, query, page),
    }


@bp.get("/dashboard/invoices/create")
def invoices_new_get():
    s = db_session()
    return {"customers": fetch_customers(s), "csrf_token": ensure_csrf_token()}


@bp.post("/dashboard/invoices/create")
def invoices_new_post():
    return _action_response(create_invoice(db_session(), request.form, effects=FlaskEffects()))


@bp.get("/dashboard/invoices/<invoice_id>/edit")
def invoice_edit_get(invoice_id: str):
    s = db_session()
    return {
        "invoice": fetch_invoice_by_id(s, invoice_id),
        "customers": fetch_customers(s),
        "csrf_token": ensure_csrf_token(),
    }


@bp.post("/dashboard/invoices/<invoice_id>/edit")
def invoice_edit_post(invoice_id: str):
    return _action_response(update_invoice(db_session(), invoice_id, request.form, effects=FlaskEffects()))


@bp.post("/dashboard/invoices/<invoice_id>/delete")
def invoice_delete(invoice_id: str):
    delete_invoice(db_session(), invoice_id, effects=FlaskEffects())
    return redirect(INVOICES_PATH, code=303)
