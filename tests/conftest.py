import os

# Must be set before the app (and its Settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.core.dependencies import get_db
from app.main import app
from app import models  # noqa: F401

PASSWORD = "password123"


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register_and_login(client, email, name="Test User", password=PASSWORD):
    response = client.post("/api/v1/auth/register", json={
        "email": email,
        "password": password,
        "confirm_password": password,
        "name": name,
    })
    assert response.status_code == 201, response.text
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers(client):
    return register_and_login(client, "alice@example.com", name="Alice")


@pytest.fixture()
def other_headers(client):
    return register_and_login(client, "bob@example.com", name="Bob")


def category_id(client, headers, name, category_type="expense"):
    response = client.get("/api/v1/categories", params={"type": category_type}, headers=headers)
    for category in response.json()["data"]:
        if category["name"] == name:
            return category["id"]
    raise AssertionError(f"category {name!r} not found")


def create_transaction(client, headers, amount, category, transaction_type="expense",
                       date="2026-01-15T12:00:00", description=None):
    response = client.post("/api/v1/transactions", json={
        "type": transaction_type,
        "amount": amount,
        "category_id": category_id(client, headers, category, transaction_type),
        "date": date,
        "description": description,
    }, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]
