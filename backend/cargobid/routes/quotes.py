# Overview: Flask API routes for quotes and bid submission; parses input and returns JSON responses.

"""
Quote Routes

- GET  /api/quotes                 role-filtered list (client: own, carrier: not closed)
- GET  /api/quotes/stats           counts per status over the same visible set
- POST /api/quotes                 client only; client_id is the caller
- GET  /api/quotes/<id>            quote with client and bids (404 if not visible)
- POST /api/quotes/<id>/status     owning client or admin; lifecycle-checked
- POST /api/quotes/<id>/bids       carrier only; carrier_id is the caller

SECURITY: ownership fields (client_id, carrier_id) are never read from the body.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_role
from ..models import Bid, Quote
from ..services import bid_service, quote_service
from ..services.lifecycle_service import LifecycleError
from ..services.quote_service import QuoteNotFoundError
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_bid,
    enforce_rules_quote,
    json_object,
    validate_payload,
)


QUOTE_POLICY = ModelValidationPolicy(
    writable_fields=(
        "origin", "destination", "origin_address_id", "destination_address_id",
        "weight", "volume", "cargo_type", "deadline", "notes",
    ),
    required_on_create=("origin", "destination", "weight", "cargo_type"),
    aliases={"cargoType": "cargo_type"},
)

BID_POLICY = ModelValidationPolicy(
    writable_fields=("amount", "estimated_days", "conditions"),
    required_on_create=("amount", "estimated_days"),
    aliases={"estimatedDays": "estimated_days"},
)


quotes_bp = Blueprint("quotes", __name__, url_prefix="/api/quotes")


@quotes_bp.get("")
@require_auth
def list_quotes_route():
    quotes = quote_service.get_quotes(g.current_user)
    return jsonify([q.to_dict(include_client=True, include_bids=True) for q in quotes])


@quotes_bp.get("/stats")
@require_auth
def quote_stats_route():
    return jsonify(quote_service.quote_stats(g.current_user))


@quotes_bp.post("")
@require_auth
@require_role("client")
def create_quote_route():
    """
    Request body:
    {
        "origin": "São Paulo",         // required unless origin_address_id is given
        "destination": "Rio",          // required unless destination_address_id is given
        "weight": 100,                 // required, > 0
        "volume": 2.5,                 // optional
        "cargo_type": "General",       // required ("cargoType" accepted)
        "deadline": "2026-11-01",      // optional, ISO-8601
        "notes": "..."                 // optional
    }
    """
    payload = request.get_json(silent=True)
    try:
        payload = quote_service.resolve_address_references(payload)
        patch = validate_payload(model=Quote, payload=payload, policy=QUOTE_POLICY, partial=False)
        enforce_rules_quote(patch)
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400

    quote = quote_service.create_quote(g.current_user.id, patch=patch)
    return jsonify(quote.to_dict()), 201


@quotes_bp.get("/<int:quote_id>")
@require_auth
def get_quote_route(quote_id: int):
    try:
        quote = quote_service.get_visible_quote(g.current_user, quote_id)
    except QuoteNotFoundError:
        return jsonify({"message": "Quote not found"}), 404
    return jsonify(quote.to_dict(include_client=True, include_bids=True, include_bid_carriers=True))


@quotes_bp.post("/<int:quote_id>/status")
@require_auth
@require_role("client", "admin")
def change_quote_status_route(quote_id: int):
    """Request body: {"status": "negotiation" | "closed" | ...}"""
    try:
        data = json_object(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400
    status = str(data.get("status") or "").strip().lower()
    if not status:
        return jsonify({"message": "status is required"}), 400

    try:
        quote = quote_service.change_quote_status(quote_id, status, actor=g.current_user)
    except QuoteNotFoundError:
        return jsonify({"message": "Quote not found"}), 404
    except LifecycleError as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(quote.to_dict())


@quotes_bp.post("/<int:quote_id>/bids")
@require_auth
@require_role("carrier")
def create_bid_route(quote_id: int):
    """
    Request body:
    {
        "amount": 500,           // required, > 0
        "estimated_days": 3,     // required, >= 1 ("estimatedDays" accepted)
        "conditions": "..."      // optional
    }
    """
    payload = request.get_json(silent=True)
    try:
        patch = validate_payload(model=Bid, payload=payload, policy=BID_POLICY, partial=False)
        enforce_rules_bid(patch)
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400

    try:
        bid = bid_service.create_bid(g.current_user.id, quote_id, patch=patch)
    except QuoteNotFoundError:
        return jsonify({"message": "Quote not found"}), 404
    except LifecycleError as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(bid.to_dict()), 201
