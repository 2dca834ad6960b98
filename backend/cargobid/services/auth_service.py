# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Passwords are stored as "<hex key>.<hex salt>" where key = scrypt(password,
salt). Comparison is constant-time.

SEED COMPATIBILITY: demo accounts created by `flask system seed` store the
literal placeholder SEED_PLACEHOLDER_PASSWORD instead of a hash. Logging in to
such an account with that same literal succeeds. This shortcut is controlled by
the ALLOW_SEED_PASSWORD setting and logged every time it is used.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from flask import current_app

from ..extensions import db
from ..models import User, USER_ROLES
from cargobid.time_utils import utcnow


SEED_PLACEHOLDER_PASSWORD = "password123"

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64
SALT_BYTES = 16

# Roles open to self-registration. admin/auditor come from the CLI.
REGISTRABLE_ROLES = ("client", "carrier")
ROLE_ALIASES = {"user": "client"}


class DuplicateUsernameError(ValueError):
    """Raised when the username is already registered."""
    pass


class InvalidCredentialsError(Exception):
    """Raised when username/password do not match."""
    pass


class InvalidRoleError(ValueError):
    """Raised when a role is outside the closed enumeration."""
    pass


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=64 * 1024 * 1024,
        dklen=SCRYPT_KEY_LEN,
    )


def hash_password(password: str) -> str:
    """Hash with a fresh random salt. Returns "<hex key>.<hex salt>"."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
    """
    Constant-time comparison against a stored "<hex key>.<hex salt>".

    Malformed stored values never match.
    """
    hashed, sep, salt = stored.partition(".")
    if not sep or not hashed or not salt:
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    return hmac.compare_digest(expected, _derive(password, salt))


def normalize_role(role: str | None, *, allowed=REGISTRABLE_ROLES) -> str:
    """
    Map a requested role onto the closed enumeration.

    Missing role means "client". Unknown roles raise InvalidRoleError.
    """
    if role is None or not str(role).strip():
        return "client"
    value = str(role).strip().lower()
    value = ROLE_ALIASES.get(value, value)
    if value not in allowed:
        raise InvalidRoleError(f"role must be one of: {', '.join(allowed)}")
    return value


def get_user(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def get_user_by_username(username: str) -> User | None:
    return db.session.query(User).filter(User.username == username).first()


def create_user(
    *,
    username: str,
    password: str,
    name: str,
    role: str,
    company_id: int | None = None,
    hashed: bool = True,
) -> User:
    """
    Create a user.

    hashed=False stores the password as given; only the seeding command uses
    it, for the placeholder demo password.

    Raises:
        DuplicateUsernameError: If the username exists
        InvalidRoleError: If role is not a known role
    """
    if role not in USER_ROLES:
        raise InvalidRoleError(f"role must be one of: {', '.join(USER_ROLES)}")

    if get_user_by_username(username):
        raise DuplicateUsernameError("Username already exists")

    user = User(
        username=username,
        password=hash_password(password) if hashed else password,
        name=name or username,
        role=role,
        company_id=company_id,
    )
    db.session.add(user)
    db.session.commit()
    return user


def register(username: str, password: str, display_name: str | None, role: str | None) -> User:
    """Self-registration for clients and carriers."""
    normalized = normalize_role(role)
    user = create_user(
        username=username,
        password=password,
        name=(display_name or "").strip() or username,
        role=normalized,
    )
    current_app.logger.info("Registered user %s as %s", user.username, user.role)
    return user


def authenticate(username: str, password: str) -> User:
    """
    Check credentials and stamp last_login_at.

    Raises:
        InvalidCredentialsError: If the user is unknown or the password is wrong
    """
    user = get_user_by_username(username)
    if not user:
        raise InvalidCredentialsError("Invalid credentials")

    if (
        current_app.config.get("ALLOW_SEED_PASSWORD", False)
        and user.password == SEED_PLACEHOLDER_PASSWORD
        and password == SEED_PLACEHOLDER_PASSWORD
    ):
        current_app.logger.warning(
            "User %s logged in with the seed placeholder password", user.username
        )
    elif not verify_password(password, user.password):
        raise InvalidCredentialsError("Invalid credentials")

    user.last_login_at = utcnow()
    db.session.commit()
    return user
