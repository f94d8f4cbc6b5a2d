# auth.py
"""
Single shared admin credential.

Login checks the password against a Werkzeug hash, records the user in the
Flask session and hands back a signed, time-limited bearer token. Protected
routes accept the session first and fall back to the bearer token.
"""

import logging
import re

from flask import current_app, request, session
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthError

logger = logging.getLogger(__name__)

TOKEN_SALT = "criteria-matrix-auth"

# Endpoints that never require authentication
_BYPASS_ENDPOINTS = {"index", "health", "static", "auth_login", "auth_logout", "auth_verify"}
_BEARER = re.compile(r"^Bearer\s+(\S+)$", re.IGNORECASE)


def init_auth(app):
    """Resolve the admin password hash once and install the request gate."""
    password_hash = app.config.get("ADMIN_PASSWORD_HASH")
    if not password_hash and app.config.get("ADMIN_PASSWORD"):
        password_hash = generate_password_hash(app.config["ADMIN_PASSWORD"])
    if not password_hash and app.config.get("AUTH_ENABLED", True):
        app.logger.warning("No admin password configured; every login will be rejected")
    app.extensions["admin_password_hash"] = password_hash
    app.before_request(require_auth)


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(username):
    return _serializer().dumps({"username": username})


def verify_token(token):
    """Username carried by *token*, or None when it is bad or expired."""
    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        logger.warning("Rejected expired token")
        return None
    except BadSignature:
        logger.warning("Rejected token with bad signature")
        return None
    return payload.get("username") if isinstance(payload, dict) else None


def _bearer_token():
    match = _BEARER.match(request.headers.get("Authorization", ""))
    return match.group(1) if match else None


def current_user():
    # session wins over the bearer token
    username = session.get("username")
    if username:
        return username
    token = _bearer_token()
    if token:
        return verify_token(token)
    return None


def check_password(password):
    password_hash = current_app.extensions.get("admin_password_hash")
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def login(password):
    """Returns (username, token) or raises AuthError."""
    if not check_password(password):
        logger.warning("Failed login attempt from %s", request.remote_addr)
        raise AuthError("Invalid credentials")
    username = current_app.config["ADMIN_USERNAME"]
    session["username"] = username
    return username, issue_token(username)


def logout():
    session.pop("username", None)


def require_auth():
    if not current_app.config.get("AUTH_ENABLED", True):
        return None
    # unknown URLs fall through to the 404 handler
    if request.endpoint is None:
        return None
    if request.method == "OPTIONS" or request.endpoint in _BYPASS_ENDPOINTS:
        return None
    if current_user() is None:
        raise AuthError("Authentication required")
    return None
