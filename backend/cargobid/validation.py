from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation
from cargobid.time_utils import parse_iso_datetime

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Upper bound for money / measures stored in Numeric(12, 2)
MAX_NUMERIC = Decimal("9999999999.99")

# Signed 32-bit INTEGER columns
MAX_INTEGER = 2**31 - 1


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST, checked in this order
    - aliases: camelCase keys accepted from older clients

    Keys outside writable_fields are dropped silently.
    """
    writable_fields: tuple[str, ...]
    required_on_create: tuple[str, ...] = ()
    aliases: dict[str, str] = field(default_factory=dict)


def json_object(payload: Any) -> dict:
    """Request body as a dict. Missing body is {}; arrays and scalars are rejected."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            number = value
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower() or '.' in stripped:
                raise ValidationError(f"{col.key} must be a plain integer")
            try:
                number = int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        else:
            raise ValidationError(f"{col.key} must be an integer")
        if abs(number) > MAX_INTEGER:
            raise ValidationError(f"{col.key} is too large")
        return number

    # Decimals (weights, volumes, amounts): numbers or numeric strings
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a number")
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{col.key} must be a number")
        if not number.is_finite():
            raise ValidationError(f"{col.key} must be a number")
        if abs(number) > MAX_NUMERIC:
            raise ValidationError(f"{col.key} is too large")
        return number

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return dt
        raise ValidationError(f"{col.key} must be an ISO-8601 date")

    # Tag lists: JSON arrays or comma-separated strings
    if isinstance(coltype, JSON):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            return [str(part).strip() for part in value if str(part).strip()]
        raise ValidationError(f"{col.key} must be a list of strings")

    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    The first problem found is raised; its message names the field.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    payload = json_object(payload)

    normalized: dict = {}
    for key, raw in payload.items():
        key = policy.aliases.get(key, key)
        if key in policy.writable_fields:
            normalized[key] = raw

    if not partial:
        for name in policy.required_on_create:
            raw = normalized.get(name)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                raise ValidationError(f"{name} is required")

    cols = _columns_by_key(model)
    patch: dict = {}

    for name in policy.writable_fields:
        if name not in normalized:
            continue
        raw = normalized[name]
        col = cols[name]

        if raw is None or (isinstance(raw, str) and not raw.strip() and col.nullable):
            if not col.nullable:
                raise ValidationError(f"{name} cannot be null")
            patch[name] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            raise ValidationError(f"{name} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{name} exceeds max length {col.type.length}")

        patch[name] = val

    return patch


def require_choice(patch: dict, name: str, choices) -> None:
    """Reject values outside a closed enumeration."""
    if name in patch and patch[name] is not None and patch[name] not in choices:
        raise ValidationError(f"{name} must be one of: {', '.join(choices)}")


def enforce_rules_quote(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if patch.get("weight") is not None and patch["weight"] <= 0:
        raise ValidationError("weight must be greater than 0")
    if patch.get("volume") is not None and patch["volume"] < 0:
        raise ValidationError("volume must be >= 0")


def enforce_rules_bid(patch: dict) -> None:
    if patch.get("amount") is not None and patch["amount"] <= 0:
        raise ValidationError("amount must be greater than 0")
    if patch.get("estimated_days") is not None and patch["estimated_days"] < 1:
        raise ValidationError("estimated_days must be at least 1")
