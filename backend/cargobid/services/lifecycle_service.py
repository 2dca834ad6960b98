# Overview: Quote and bid state machines.

"""
Quote / Bid Lifecycle

QUOTE:
    open -> responded -> negotiation -> closed
    open -> closed, responded -> closed   (cancelled or awarded early)

    open:        posted by a client, no bids yet
    responded:   at least one carrier has bid
    negotiation: the client is negotiating with carriers
    closed:      terminal; no new bids, no further transitions

BID:
    pending -> accepted
    pending -> rejected

    accepted and rejected are terminal.

RULES:
1. No backwards movement (closed never reopens, a decided bid never returns
   to pending).
2. Only the first bid on an open quote moves it to responded; later bids do
   not touch the quote status.
3. Accepting a bid closes its quote. Sibling bids are left as they are.
"""

from __future__ import annotations

from ..models import QUOTE_STATUSES, BID_STATUSES


QUOTE_TRANSITIONS = {
    "open": {"responded", "closed"},
    "responded": {"negotiation", "closed"},
    "negotiation": {"closed"},
    "closed": set(),
}

BID_TRANSITIONS = {
    "pending": {"accepted", "rejected"},
    "accepted": set(),
    "rejected": set(),
}


class LifecycleError(ValueError):
    """
    Raised when an invalid lifecycle transition is attempted.

    This is a domain error, not a technical error.
    """
    pass


def _validate(status: str, allowed, kind: str) -> None:
    if status not in allowed:
        raise LifecycleError(
            f"Invalid {kind} status '{status}'. Must be one of: {', '.join(allowed)}"
        )


def can_transition_quote(from_status: str, to_status: str) -> bool:
    _validate(from_status, QUOTE_STATUSES, "quote")
    _validate(to_status, QUOTE_STATUSES, "quote")
    return to_status in QUOTE_TRANSITIONS[from_status]


def can_transition_bid(from_status: str, to_status: str) -> bool:
    _validate(from_status, BID_STATUSES, "bid")
    _validate(to_status, BID_STATUSES, "bid")
    return to_status in BID_TRANSITIONS[from_status]


def require_quote_transition(from_status: str, to_status: str) -> None:
    if not can_transition_quote(from_status, to_status):
        raise LifecycleError(
            f"Cannot move quote from '{from_status}' to '{to_status}'"
        )


def require_bid_transition(from_status: str, to_status: str) -> None:
    if not can_transition_bid(from_status, to_status):
        raise LifecycleError(
            f"Cannot move bid from '{from_status}' to '{to_status}'"
        )


def quote_status_after_bid(current: str) -> str:
    """Status a quote takes when a new bid arrives. Closed quotes take no bids."""
    if current == "closed":
        raise LifecycleError("Quote is closed and no longer accepts bids")
    if current == "open":
        return "responded"
    return current
