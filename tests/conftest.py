"""Shared fixtures: an app on in-memory SQLite with a known admin password."""

import pytest

import table_service
from app import create_app
from models import db

ADMIN_PASSWORD = "s3cret"

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "SECRET_KEY": "test-secret",
    "AUTH_ENABLED": True,
    "ADMIN_USERNAME": "admin",
    "ADMIN_PASSWORD": ADMIN_PASSWORD,
    "ADMIN_PASSWORD_HASH": None,
    "TOKEN_MAX_AGE": 3600,
    "LOG_LEVEL": "WARNING",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def token(app):
    resp = app.test_client().post("/auth/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return resp.get_json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seeded(ctx):
    """Two rows x three columns, every cell filled."""
    for column in ("A", "B", "C"):
        table_service.add_column(column)
    table_service.add_row("f1", "first")
    table_service.add_row("f2")
    for row, values in {"f1": ("5", "2", "3"), "f2": ("1", "NA", "4")}.items():
        for column, value in zip(("A", "B", "C"), values):
            table_service.set_cell(row, column, value)
    return ctx
