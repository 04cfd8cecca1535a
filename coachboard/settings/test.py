"""Test settings: SQLite for fast tests without PostgreSQL.

Local dev: uses in-memory SQLite by default.
CI: set DATABASE_URL to a file-based SQLite (e.g. sqlite:///ci-test.db)
    when running with xdist workers.
"""
import os

import dj_database_url

# Provide test defaults BEFORE importing base (which calls require_env).
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
# Test-only key. Never use in development or production
os.environ.setdefault("FIELD_ENCRYPTION_KEY", "Y29hY2hib2FyZC10ZXN0LWtleS0wMTIzNDU2Nzg5YWI=")

from .base import *  # noqa: F401, F403

DEBUG = True
ALLOWED_HOSTS = ["*"]
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

DATABASES = {
    "default": dj_database_url.parse(
        os.environ["DATABASE_URL"],
        conn_max_age=0,
    ),
}

# Use fast password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# WhiteNoise warns about a missing staticfiles/ dir in tests
MIDDLEWARE = [
    m for m in MIDDLEWARE  # noqa: F405
    if m != "whitenoise.middleware.WhiteNoiseMiddleware"
]

STORAGES = {
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

CHECKIN_PENDING_SURVEY_PROVIDER = ""
CHECKIN_LEGACY_SESSION_MATCH = True
