import pytest
from sqlalchemy import func, select

from app.acme.db import session_scope
from app.acme.effects import RecordingEffects
from app.acme.errors import ActionError, NotFoundError
from app.acme.modules.customers.actions import create_customer, delete_customer, update_customer
from app.acme.modules.customers.models import Customer
from app.acme.modules.customers.queries import (
    fetch_customer_by_id,
    fetch_customers,
    fetch_customers_pages,
    fetch_filtered_customers,
)
from app.acme.placeholder_data import CUSTOMERS
from tests.conftest import csrf_headers

EVIL_RABBIT = CUSTOMERS[0]["id"]


def _session(app):
    return app.extensions["sqlalchemy_sessionmaker"]()


def _customer_count(app) -> int:
    with session_scope(app) as s:
        return s.scalar(select(func.count()).select_from(Customer))


def test_customer_table_aggregates(seeded):
    s = _session(seeded)
    try:
        rows = fetch_filtered_customers(s, "", 1)
    finally:
        s.close()
    assert [r["name"] for r in rows] == [
        "Amy Burns",
        "Balazs Orban",
        "Delba de Oliveira",
        "Evil Rabbit",
        "Lee Robinson",
        "Michael Novotny",
    ]
    evil = next(r for r in rows if r["id"] == EVIL_RABBIT)
    assert evil["total_invoices"] == 2
    assert evil["total_pending"] == "$164.61"
    assert evil["total_paid"] == "$0.00"

    amy = rows[0]
    assert (amy["total_pending"], amy["total_paid"]) == ("$0.00", "$42.90")


def test_customer_without_invoices_shows_zero_totals(seeded):
    with session_scope(seeded) as s:
        s.add(Customer(name="Zed Newcomer", email="zed@example.com", image_url="/customers/zed.png"))

    s = _session(seeded)
    try:
        assert fetch_customers_pages(s, "") == 2
        rows = fetch_filtered_customers(s, "", 2)
        assert [r["name"] for r in rows] == ["Zed Newcomer"]
        assert rows[0]["total_invoices"] == 0
        assert rows[0]["total_pending"] == "$0.00"
        assert rows[0]["total_paid"] == "$0.00"

        assert [r["name"] for r in fetch_filtered_customers(s, "ZED@", 1)] == ["Zed Newcomer"]
        assert fetch_customers_pages(s, "nobody-matches") == 0
    finally:
        s.close()


def test_fetch_customers_for_dropdown(seeded):
    s = _session(seeded)
    try:
        rows = fetch_customers(s)
    finally:
        s.close()
    assert len(rows) == 6
    assert set(rows[0]) == {"id", "name"}
    assert rows[0]["name"] == "Amy Burns"


def test_fetch_customer_by_id(seeded):
    s = _session(seeded)
    try:
        assert fetch_customer_by_id(s, EVIL_RABBIT)["email"] == "evil@rabbit.com"
        with pytest.raises(NotFoundError, match="Failed to fetch customer."):
            fetch_customer_by_id(s, "missing")
    finally:
        s.close()


@pytest.mark.parametrize(
    "form,expected",
    [
        ({}, {"name": ["Please enter a name."], "email": ["Please enter an email."], "image_url": ["Please enter an image URL."]}),
        ({"name": "  ", "email": "a@b.co", "image_url": "/x.png"}, {"name": ["Please enter a valid name."]}),
        ({"name": "Ann", "email": "not-an-email", "image_url": "/x.png"}, {"email": ["Please enter a valid email."]}),
        ({"name": "Ann", "email": "ann@example.com", "image_url": ""}, {"image_url": ["Please enter a valid image URL."]}),
    ],
)
def test_customer_form_validation(app, form, expected):
    effects = RecordingEffects()
    s = _session(app)
    try:
        state = create_customer(s, form, effects=effects)
    finally:
        s.close()
    assert state.errors == expected
    assert state.message == "Missing Fields. Failed to Create Customer."
    assert effects.revalidated == []
    assert _customer_count(app) == 0


def test_create_and_update_customer_over_http(auth_client, seeded):
    r = auth_client.post(
        "/dashboard/customers/create",
        data={"name": "Ann Example", "email": "ann@example.com", "image_url": "/customers/ann-example.png"},
        headers=csrf_headers(auth_client),
    )
    assert r.status_code == 303
    assert r.headers["Location"].endswith("/dashboard/customers")
    assert r.headers["X-Revalidated-Paths"] == "/dashboard/customers"
    assert _customer_count(seeded) == 7

    with session_scope(seeded) as s:
        cid = s.execute(select(Customer.id).where(Customer.email == "ann@example.com")).scalar_one()

    r = auth_client.post(
        f"/dashboard/customers/{cid}/edit",
        data={"name": "Ann Renamed", "email": "ann@example.com", "image_url": "/customers/ann.png"},
        headers=csrf_headers(auth_client),
    )
    assert r.status_code == 303
    r = auth_client.get(f"/dashboard/customers/{cid}/edit")
    assert r.json["customer"]["name"] == "Ann Renamed"

    r = auth_client.post(
        f"/dashboard/customers/{cid}/edit",
        data={"name": "Ann Renamed", "email": "bad", "image_url": "/customers/ann.png"},
        headers=csrf_headers(auth_client),
    )
    assert r.status_code == 400
    assert r.json == {"errors": {"email": ["Please enter a valid email."]}, "message": "Missing Fields. Failed to Edit Customer."}


def test_duplicate_email_is_store_error(seeded):
    s = _session(seeded)
    try:
        with pytest.raises(ActionError, match="Failed to create customer."):
            create_customer(
                s,
                {"name": "Copy Cat", "email": "evil@rabbit.com", "image_url": "/x.png"},
                effects=RecordingEffects(),
            )
    finally:
        s.close()


def test_update_missing_customer_raises(seeded):
    s = _session(seeded)
    try:
        with pytest.raises(ActionError, match="Failed to update customer."):
            update_customer(s, "missing", {"name": "A", "email": "a@b.co", "image_url": "/x.png"}, effects=RecordingEffects())
    finally:
        s.close()


def test_delete_customer_with_invoices_is_refused(auth_client, seeded):
    r = auth_client.post(f"/dashboard/customers/{EVIL_RABBIT}/delete", headers=csrf_headers(auth_client))
    assert r.status_code == 500
    assert r.json == {"error": "Failed to delete customer."}
    assert _customer_count(seeded) == 6


def test_delete_customer_without_invoices(seeded):
    with session_scope(seeded) as s:
        c = Customer(name="Temp", email="temp@example.com", image_url="/x.png")
        s.add(c)
        s.flush()
        cid = c.id

    effects = RecordingEffects()
    s = _session(seeded)
    try:
        delete_customer(s, cid, effects=effects)
        with pytest.raises(ActionError, match="Failed to delete customer."):
            delete_customer(s, cid, effects=RecordingEffects())
    finally:
        s.close()
    assert effects.revalidated == ["/dashboard/customers"]
    assert _customer_count(seeded) == 6


def test_customers_list_page(auth_client):
    r = auth_client.get("/dashboard/customers?query=rabbit")
    assert r.status_code == 200
    assert r.json["total_pages"] == 1
    assert [c["name"] for c in r.json["customers"]] == ["Evil Rabbit"]
