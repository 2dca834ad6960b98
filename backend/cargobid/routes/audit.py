# Overview: Read-only audit log API for admins and auditors.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..services import audit_service


audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit-logs")


@audit_bp.get("")
@require_auth
@require_role("admin", "auditor")
def list_audit_logs_route():
    """
    Query parameters:
    - action: exact action tag, e.g. CREATE_COMPANY
    - user_id: actor id
    - limit: maximum results (default: 100, max 500)
    - offset: pagination offset (default: 0)

    Returns:
        {items: AuditLog[], count: int, limit: int, offset: int}
    """
    action = request.args.get("action")
    user_id = request.args.get("user_id", type=int)
    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)

    # Clamp limit
    limit = max(1, min(limit, 500))
    offset = max(0, offset)

    entries, total = audit_service.list_audit_logs(
        action=action, user_id=user_id, limit=limit, offset=offset
    )
    return jsonify({
        "items": [e.to_dict() for e in entries],
        "count": total,
        "limit": limit,
        "offset": offset,
    })
