# Overview: Service-layer operations for bids; encapsulates business logic and database work.

"""
Bid Service

STATE MACHINE: see lifecycle_service.

ACCEPTANCE is a compare-and-set:

    UPDATE bids SET status = 'accepted'
    WHERE id = :bid AND status = 'pending'
      AND NOT EXISTS (SELECT 1 FROM bids WHERE quote_id = :quote AND status = 'accepted')

run in the same transaction that closes the quote. The partial unique index
uq_bids_one_accepted_per_quote catches anything that slips past the
NOT EXISTS under weaker isolation levels. A losing accept raises
BidConflictError.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from ..extensions import db
from ..models import Bid, Quote, BID_STATUSES
from .audit_service import record_audit
from .concurrency import run_with_retry
from .lifecycle_service import (
    LifecycleError,
    quote_status_after_bid,
    require_bid_transition,
    require_quote_transition,
)
from .quote_service import QuoteNotFoundError
from cargobid.time_utils import utcnow


BID_MUTABLE_FIELDS = {"amount", "estimated_days", "conditions"}


class BidNotFoundError(Exception):
    """Raised when a bid is not found (or the caller does not own its quote)."""
    pass


class BidConflictError(ValueError):
    """Raised when a bid was already decided or another bid won the quote."""
    pass


def create_bid(carrier_id: int, quote_id: int, *, patch: dict) -> Bid:
    """
    Place a pending bid. The first bid on an open quote moves it to
    "responded"; both writes commit together.

    Raises:
        QuoteNotFoundError: If the quote does not exist
        LifecycleError: If the quote is closed
    """
    def _op():
        quote = db.session.get(Quote, quote_id)
        if not quote:
            raise QuoteNotFoundError(f"Quote {quote_id} not found")

        next_status = quote_status_after_bid(quote.status)

        bid = Bid(
            quote_id=quote_id,
            carrier_id=carrier_id,
            status="pending",
            **{k: v for k, v in patch.items() if k in BID_MUTABLE_FIELDS},
        )
        db.session.add(bid)
        if next_status != quote.status:
            quote.status = next_status
        db.session.flush()

        record_audit(
            carrier_id,
            "CREATE_BID",
            f"Bid {bid.id} on quote {quote_id}: amount {bid.amount}, {bid.estimated_days} days",
        )
        db.session.commit()
        return bid

    return run_with_retry(_op)


def get_bid(bid_id: int) -> Bid | None:
    return db.session.get(Bid, bid_id)


def get_bids_for_quote(quote_id: int) -> list[Bid]:
    return (
        db.session.query(Bid)
        .filter(Bid.quote_id == quote_id)
        .order_by(Bid.id.asc())
        .all()
    )


def update_bid_status(bid_id: int, status: str) -> Bid:
    """
    Set a bid's status. No cascade to the quote and no ownership check;
    callers apply those rules.
    """
    if status not in BID_STATUSES:
        raise LifecycleError(f"Invalid bid status '{status}'")
    bid = get_bid(bid_id)
    if not bid:
        raise BidNotFoundError(f"Bid {bid_id} not found")
    bid.status = status
    bid.decided_at = utcnow() if status != "pending" else None
    db.session.commit()
    return bid


def _owned_bid(bid_id: int, client_id: int) -> Bid:
    bid = get_bid(bid_id)
    if not bid or bid.quote is None or bid.quote.client_id != client_id:
        raise BidNotFoundError(f"Bid {bid_id} not found")
    return bid


def accept_bid(bid_id: int, *, client_id: int) -> Bid:
    """
    Accept a pending bid on a quote owned by client_id and close the quote.
    Other bids on the quote are not modified.

    Raises:
        BidNotFoundError: If missing or the quote belongs to someone else
        BidConflictError: If the bid is decided, the quote closed, or another
            bid was accepted first
    """
    def _op():
        bid = _owned_bid(bid_id, client_id)
        quote = bid.quote

        if bid.status != "pending":
            raise BidConflictError(f"Bid {bid_id} is already {bid.status}")
        if quote.status == "closed":
            raise BidConflictError(f"Quote {quote.id} is closed")

        sibling = aliased(Bid)
        already_accepted = (
            select(sibling.id)
            .where(sibling.quote_id == quote.id, sibling.status == "accepted")
            .exists()
        )
        result = db.session.execute(
            update(Bid)
            .where(Bid.id == bid_id, Bid.status == "pending", ~already_accepted)
            .values(status="accepted", decided_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            raise BidConflictError(f"Quote {quote.id} already has an accepted bid")

        require_quote_transition(quote.status, "closed")
        quote.status = "closed"

        record_audit(
            client_id,
            "ACCEPT_BID",
            f"Accepted bid {bid_id} on quote {quote.id}",
        )
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise BidConflictError(
                f"Quote {quote.id} already has an accepted bid"
            ) from exc

        db.session.refresh(bid)
        return bid

    return run_with_retry(_op)


def reject_bid(bid_id: int, *, client_id: int) -> Bid:
    """
    Reject a pending bid on a quote owned by client_id.

    Raises:
        BidNotFoundError: If missing or the quote belongs to someone else
        BidConflictError: If the bid was already decided
    """
    def _op():
        bid = _owned_bid(bid_id, client_id)
        try:
            require_bid_transition(bid.status, "rejected")
        except LifecycleError as exc:
            raise BidConflictError(f"Bid {bid_id} is already {bid.status}") from exc

        result = db.session.execute(
            update(Bid)
            .where(Bid.id == bid_id, Bid.status == "pending")
            .values(status="rejected", decided_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            raise BidConflictError(f"Bid {bid_id} was decided concurrently")

        record_audit(client_id, "REJECT_BID", f"Rejected bid {bid_id} on quote {bid.quote_id}")
        db.session.commit()
        db.session.refresh(bid)
        return bid

    return run_with_retry(_op)
