# Overview: Flask API routes for bid decisions by the quote owner.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_role
from ..services import bid_service
from ..services.bid_service import BidConflictError, BidNotFoundError


bids_bp = Blueprint("bids", __name__, url_prefix="/api/bids")


@bids_bp.post("/<int:bid_id>/accept")
@require_auth
@require_role("client")
def accept_bid_route(bid_id: int):
    """
    Accept a pending bid and close its quote.

    Error responses:
        401: Not authenticated, or not a client
        404: Bid not found, or the caller does not own the quote
        409: Bid already decided, quote closed, or another bid accepted first
    """
    try:
        bid = bid_service.accept_bid(bid_id, client_id=g.current_user.id)
    except BidNotFoundError:
        return jsonify({"message": "Bid not found"}), 404
    except BidConflictError as e:
        return jsonify({"message": str(e)}), 409
    return jsonify(bid.to_dict()), 200


@bids_bp.post("/<int:bid_id>/reject")
@require_auth
@require_role("client")
def reject_bid_route(bid_id: int):
    try:
        bid = bid_service.reject_bid(bid_id, client_id=g.current_user.id)
    except BidNotFoundError:
        return jsonify({"message": "Bid not found"}), 404
    except BidConflictError as e:
        return jsonify({"message": str(e)}), 409
    return jsonify(bid.to_dict()), 200
