# config.py
"""
Environment driven settings. Values come from the process environment
or a local .env file.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///cartesian.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    JSON_SORT_KEYS = False  # preserve column order in JSON

    # Auth
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    AUTH_ENABLED = _env_bool("AUTH_ENABLED", True)
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH")
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 86400))

    # Transport
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    PORT = int(os.environ.get("PORT", 5000))
