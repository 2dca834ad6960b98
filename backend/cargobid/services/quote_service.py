# Overview: Service-layer operations for quotes; encapsulates business logic and database work.

"""
Quote Service

VISIBILITY (applied in SQL, not in Python):
- client:           own quotes only
- carrier:          every quote that is not closed
- admin / auditor:  everything

A carrier may still open the detail of a closed quote it bid on, so the
winner can see the award.
"""

from __future__ import annotations

from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Address, Bid, Quote, User, QUOTE_STATUSES
from .audit_service import record_audit
from .lifecycle_service import require_quote_transition
from cargobid.validation import ModelValidationPolicy, ValidationError, json_object, validate_payload


QUOTE_MUTABLE_FIELDS = {
    "origin", "destination", "origin_address_id", "destination_address_id",
    "weight", "volume", "cargo_type", "deadline", "notes",
}


ADDRESS_REF_POLICY = ModelValidationPolicy(
    writable_fields=("origin_address_id", "destination_address_id"),
)


class QuoteNotFoundError(Exception):
    """Raised when a quote is not found (or is not visible to the caller)."""
    pass


def resolve_address_references(payload: dict) -> dict:
    """
    Fill origin/destination text from referenced addresses when the text is
    missing. Returns a new dict; the input is not modified.
    """
    data = dict(json_object(payload))
    for side in ("origin", "destination"):
        camel = f"{side}AddressId"
        key = f"{side}_address_id"
        if key not in data and camel in data:
            data[key] = data.pop(camel)

        address_id = data.get(key)
        if address_id in (None, ""):
            continue
        ref = validate_payload(
            model=Quote, payload={key: address_id}, policy=ADDRESS_REF_POLICY, partial=True
        )
        address = db.session.get(Address, ref[key])
        if not address:
            raise ValidationError(f"{key} does not reference an existing address")

        text = data.get(side)
        if text is None or (isinstance(text, str) and not text.strip()):
            data[side] = address.one_line()
    return data


def create_quote(client_id: int, *, patch: dict) -> Quote:
    """client_id comes from the authenticated actor; status starts at "open"."""
    quote = Quote(
        client_id=client_id,
        status="open",
        **{k: v for k, v in patch.items() if k in QUOTE_MUTABLE_FIELDS},
    )
    db.session.add(quote)
    db.session.flush()

    record_audit(
        client_id,
        "CREATE_QUOTE",
        f"Created quote {quote.id}: {quote.origin} -> {quote.destination}",
    )
    db.session.commit()
    return quote


def _visible_query(user: User):
    query = db.session.query(Quote)
    if user.role == "client":
        query = query.filter(Quote.client_id == user.id)
    elif user.role == "carrier":
        query = query.filter(Quote.status != "closed")
    return query


def get_quotes(user: User | None = None) -> list[Quote]:
    """
    Quotes with owning client and bids loaded, newest first.

    With user, only the quotes that user may see.
    """
    query = _visible_query(user) if user is not None else db.session.query(Quote)
    return (
        query.options(selectinload(Quote.client), selectinload(Quote.bids))
        .order_by(Quote.created_at.desc(), Quote.id.desc())
        .all()
    )


def get_quote(quote_id: int) -> Quote | None:
    """One quote with client and bids-with-carrier loaded, or None."""
    return (
        db.session.query(Quote)
        .options(
            selectinload(Quote.client),
            selectinload(Quote.bids).selectinload(Bid.carrier),
        )
        .filter(Quote.id == quote_id)
        .first()
    )


def can_view_quote(user: User, quote: Quote) -> bool:
    if user.role in ("admin", "auditor"):
        return True
    if user.role == "client":
        return quote.client_id == user.id
    if user.role == "carrier":
        if quote.status != "closed":
            return True
        return any(b.carrier_id == user.id for b in quote.bids)
    return False


def get_visible_quote(user: User, quote_id: int) -> Quote:
    """
    Raises:
        QuoteNotFoundError: If the quote is missing or hidden from user
    """
    quote = get_quote(quote_id)
    if not quote or not can_view_quote(user, quote):
        raise QuoteNotFoundError(f"Quote {quote_id} not found")
    return quote


def quote_stats(user: User) -> dict:
    """Counts per status over the quotes user can list."""
    rows = (
        _visible_query(user)
        .with_entities(Quote.status, db.func.count(Quote.id))
        .group_by(Quote.status)
        .all()
    )
    counts = {status: 0 for status in QUOTE_STATUSES}
    for status, count in rows:
        counts[status] = count
    return {"total": sum(counts.values()), "by_status": counts}


def change_quote_status(quote_id: int, status: str, *, actor: User) -> Quote:
    """
    Explicit lifecycle move requested by the owning client or an admin.

    Raises:
        QuoteNotFoundError: If missing, or the actor is a client who does not own it
        LifecycleError: If the transition is not allowed
    """
    quote = db.session.get(Quote, quote_id)
    if not quote:
        raise QuoteNotFoundError(f"Quote {quote_id} not found")
    if actor.role != "admin" and quote.client_id != actor.id:
        raise QuoteNotFoundError(f"Quote {quote_id} not found")

    previous = quote.status
    require_quote_transition(previous, status)
    quote.status = status

    record_audit(
        actor.id,
        "UPDATE_QUOTE_STATUS",
        f"Quote {quote_id}: {previous} -> {status}",
    )
    db.session.commit()
    return quote
