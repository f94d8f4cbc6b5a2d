"""Authentication gate: login, token and session handling."""

import pytest
from itsdangerous import URLSafeTimedSerializer

import auth
from app import create_app
from models import Criteria
from tests.conftest import ADMIN_PASSWORD, TEST_CONFIG


class TestLogin:
    def test_login_returns_token(self, client):
        resp = client.post("/auth/login", json={"password": ADMIN_PASSWORD})
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["username"] == "admin"
        assert body["token"]

    @pytest.mark.parametrize("password", ["wrong", ""])
    def test_login_rejects_bad_password(self, client, password):
        resp = client.post("/auth/login", json={"password": password})
        assert resp.status_code == 401

    def test_prehashed_password(self):
        from werkzeug.security import generate_password_hash

        app = create_app({**TEST_CONFIG, "ADMIN_PASSWORD": None, "ADMIN_PASSWORD_HASH": generate_password_hash("hashed")})
        client = app.test_client()
        assert client.post("/auth/login", json={"password": "hashed"}).status_code == 200
        assert client.post("/auth/login", json={"password": ADMIN_PASSWORD}).status_code == 401


class TestGate:
    @pytest.mark.parametrize(
        "method,path,payload",
        [
            ("get", "/table", None),
            ("post", "/column", {"column_name": "A"}),
            ("post", "/row", {"name": "f1"}),
            ("put", "/cell", {"row_id": "f1", "column_name": "A", "value": "1"}),
            ("delete", "/column/A", None),
            ("get", "/export", None),
            ("post", "/import", {"data": {"columns": ["A"], "rows": []}}),
        ],
    )
    def test_protected_routes_reject_anonymous(self, app, client, method, path, payload):
        resp = getattr(client, method)(path, json=payload)
        assert resp.status_code == 401
        with app.app_context():
            assert Criteria.query.count() == 0

    def test_bearer_token_accepted(self, client, auth_headers):
        assert client.get("/table", headers=auth_headers).status_code == 200

    def test_tampered_token_rejected(self, client, token):
        resp = client.get("/table", headers={"Authorization": f"Bearer {token}x"})
        assert resp.status_code == 401

    def test_token_signed_with_other_key_rejected(self, client):
        forged = URLSafeTimedSerializer("other-key", salt=auth.TOKEN_SALT).dumps({"username": "admin"})
        resp = client.get("/table", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_expired_token_rejected(self, app, token):
        app.config["TOKEN_MAX_AGE"] = -1
        resp = app.test_client().get("/table", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_session_cookie_after_login(self, client):
        client.post("/auth/login", json={"password": ADMIN_PASSWORD})
        assert client.get("/table").status_code == 200

    def test_logout_clears_session(self, client):
        client.post("/auth/login", json={"password": ADMIN_PASSWORD})
        assert client.post("/auth/logout").get_json() == {"success": True}
        assert client.get("/table").status_code == 401

    def test_auth_can_be_disabled(self):
        app = create_app({**TEST_CONFIG, "AUTH_ENABLED": False})
        client = app.test_client()
        assert client.get("/table").status_code == 200
        assert client.get("/auth/verify").get_json()["authenticated"] is True


class TestUnknownRoutes:
    def test_unknown_url_is_not_found_without_credentials(self, client):
        resp = client.get("/no-such-route")
        assert resp.status_code == 404


class TestVerify:
    def test_verify_with_token(self, client, auth_headers):
        body = client.get("/auth/verify", headers=auth_headers).get_json()
        assert body == {"authenticated": True, "username": "admin"}

    def test_verify_anonymous(self, client):
        resp = client.get("/auth/verify")
        assert resp.status_code == 401
        assert resp.get_json()["authenticated"] is False
