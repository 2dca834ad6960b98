# backend/cargobid/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

# Load .env early so Config sees it
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing."""


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Required: connection string for the relational store
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Signs the session cookie (Flask reads SECRET_KEY)
    SECRET_KEY = os.environ.get("SESSION_SECRET")

    # Signs bearer tokens
    JWT_SECRET = os.environ.get("JWT_SECRET")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_DAYS = int(os.environ.get("JWT_EXPIRES_DAYS", "7"))

    SESSION_LIFETIME_HOURS = int(os.environ.get("SESSION_LIFETIME_HOURS", "168"))
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", False)

    # Seeded demo accounts store the literal placeholder password
    ALLOW_SEED_PASSWORD = _env_bool("ALLOW_SEED_PASSWORD", True)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ).split(",")
        if o.strip()
    ]


REQUIRED_SETTINGS = {
    "SQLALCHEMY_DATABASE_URI": "DATABASE_URL",
    "SECRET_KEY": "SESSION_SECRET",
    "JWT_SECRET": "JWT_SECRET",
}


def validate_config(config) -> None:
    """
    Fail fast when a required setting is absent.

    Raises ConfigurationError naming the environment variable to set.
    """
    missing = [env for key, env in REQUIRED_SETTINGS.items() if not config.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )
