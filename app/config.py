"""Configuration classes for the Flask application."""

from __future__ import annotations

import os
import secrets
from pathlib import Path


def _load_secret() -> str:
    """Return the Flask secret key for the current process."""

    secret = os.environ.get("PDF_TOOLS_SECRET")
    if secret:
        return secret
    # Generate an unpredictable per-process key for local development.
    return secrets.token_urlsafe(64)


def _documents_root() -> Path:
    configured = os.environ.get("PDF_TOOLS_DOCUMENTS_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / "Documents" / "pdf_tools"


class BaseConfig:
    SECRET_KEY = _load_secret()
    MAX_CONTENT_LENGTH = 100 * 1024 * 1024  # 100 MiB
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Strict"
    DOCUMENTS_ROOT = _documents_root()
    RESPONSE_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Content-Security-Policy": (
            "default-src 'self'; "
            "object-src 'self'; "
            "frame-ancestors 'self'"
        ),
        "Referrer-Policy": "no-referrer",
    }


class TestingConfig(BaseConfig):
    TESTING = True


__all__ = ["BaseConfig", "TestingConfig"]
