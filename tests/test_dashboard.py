from app.acme.models import Base


def test_dashboard_overview(auth_client):
    r = auth_client.get("/dashboard")
    assert r.status_code == 200
    assert r.json["cards"] == {
        "number_of_customers": 6,
        "number_of_invoices": 13,
        "total_paid_invoices": "$1,006.26",
        "total_pending_invoices": "$1,256.32",
    }
    assert [m["month"] for m in r.json["revenue"]][:3] == ["Jan", "Feb", "Mar"]
    assert r.json["revenue"][-1] == {"month": "Dec", "revenue": 4800}

    latest = r.json["latest_invoices"]
    assert [(i["name"], i["amount"]) for i in latest] == [
        ("Michael Novotny", "$448.00"),
        ("Delba de Oliveira", "$5.00"),
        ("Balazs Orban", "$345.77"),
        ("Lee Robinson", "$542.46"),
        ("Evil Rabbit", "$6.66"),
    ]


def test_dashboard_on_empty_store(app, client, user):
    r = client.post("/login", data={"email": "admin@example.com", "password": "secret-pw"})
    assert r.status_code == 303
    r = client.get("/dashboard")
    assert r.status_code == 200
    assert r.json["cards"]["total_paid_invoices"] == "$0.00"
    assert r.json["revenue"] == []
    assert r.json["latest_invoices"] == []


def test_dashboard_store_failure(auth_client, seeded):
    Base.metadata.tables["revenue"].drop(bind=seeded.extensions["sqlalchemy_engine"])
    r = auth_client.get("/dashboard")
    assert r.status_code == 500
    assert r.json["detail"] == "Failed to fetch revenue data."
    assert r.json["retry"] == "/dashboard"
