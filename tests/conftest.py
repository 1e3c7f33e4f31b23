import pytest
from werkzeug.security import generate_password_hash

from app.acme import create_app
from app.acme.db import session_scope
from app.acme.models import Base, User
from app.acme.seed import seed_database

CSRF_TOKEN = "test-csrf-token"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("PUBLIC_DIR", str(tmp_path / "public"))
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def seeded(app):
    with session_scope(app) as s:
        seed_database(s)
    return app


@pytest.fixture()
def user(app):
    with session_scope(app) as s:
        s.add(User(name="Admin", email="admin@example.com", password_hash=generate_password_hash("secret-pw")))


def login(client, email="user@nextmail.com", password="123456"):
    return client.post("/login", data={"email": email, "password": password}, follow_redirects=False)


def csrf_headers(client) -> dict:
    with client.session_transaction() as sess:
        sess["csrf_token"] = CSRF_TOKEN
    return {"X-CSRF-Token": CSRF_TOKEN}


@pytest.fixture()
def auth_client(seeded, client):
    r = login(client)
    assert r.status_code == 303
    return client
