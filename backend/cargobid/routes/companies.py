# Overview: Flask API routes for company and carrier administration.

"""
Company Routes

SECURITY: admin only. Any other caller gets a bare 401.

/api/companies manages both types (filter with ?type=client|carrier).
/api/carriers is the same resource pinned to type "carrier".
DELETE is a soft delete (status -> "deleted").
"""

from flask import Blueprint, Response, g, jsonify, request

from ..decorators import require_auth, require_role
from ..models import Company, COMPANY_STATUSES, COMPANY_TYPES
from ..services import company_service
from ..services.company_service import CompanyNotFoundError, DuplicateTaxIdError
from ..validation import ModelValidationPolicy, ValidationError, json_object, require_choice, validate_payload


COMPANY_POLICY = ModelValidationPolicy(
    writable_fields=(
        "tax_id", "name", "trade_name", "type", "status",
        "email", "phone", "contact_info", "address",
        "freight_types", "regions",
    ),
    required_on_create=("name", "tax_id", "type"),
    aliases={
        "cnpj": "tax_id",
        "taxId": "tax_id",
        "tradeName": "trade_name",
        "contactInfo": "contact_info",
        "freightTypes": "freight_types",
    },
)


companies_bp = Blueprint("companies", __name__, url_prefix="/api/companies")
carriers_bp = Blueprint("carriers", __name__, url_prefix="/api/carriers")


def _include_deleted() -> bool:
    return request.args.get("include_deleted", "false").lower() == "true"


def _validated(payload: dict, *, partial: bool, forced_type: str | None = None) -> dict:
    payload = json_object(payload)
    if forced_type:
        payload = {**payload, "type": forced_type}
    patch = validate_payload(model=Company, payload=payload, policy=COMPANY_POLICY, partial=partial)
    require_choice(patch, "type", COMPANY_TYPES)
    require_choice(patch, "status", COMPANY_STATUSES)
    return patch


def _list(company_type):
    items = company_service.get_companies(company_type, include_deleted=_include_deleted())
    return jsonify([c.to_dict() for c in items])


def _create(forced_type=None):
    payload = request.get_json(silent=True)
    try:
        patch = _validated(payload, partial=False, forced_type=forced_type)
        company = company_service.create_company(patch=patch, actor_user_id=g.current_user.id)
    except (ValidationError, DuplicateTaxIdError) as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(company.to_dict()), 201


def _get(company_id, company_type=None):
    company = company_service.get_company(company_id)
    if not company or (company_type and company.type != company_type):
        return jsonify({"message": "Not found"}), 404
    return jsonify(company.to_dict())


def _update(company_id, company_type=None):
    existing = company_service.get_company(company_id)
    if not existing or (company_type and existing.type != company_type):
        return jsonify({"message": "Not found"}), 404

    payload = request.get_json(silent=True)
    try:
        patch = _validated(payload, partial=True, forced_type=company_type)
        company = company_service.update_company(
            company_id, patch=patch, actor_user_id=g.current_user.id
        )
    except CompanyNotFoundError:
        return jsonify({"message": "Not found"}), 404
    except (ValidationError, DuplicateTaxIdError) as e:
        return jsonify({"message": str(e)}), 400
    return jsonify(company.to_dict())


def _delete(company_id, company_type=None):
    existing = company_service.get_company(company_id)
    if not existing or (company_type and existing.type != company_type):
        return jsonify({"message": "Not found"}), 404
    company_service.delete_company(company_id, actor_user_id=g.current_user.id)
    return Response(status=204)


@companies_bp.get("")
@require_auth
@require_role("admin")
def list_companies_route():
    company_type = request.args.get("type")
    if company_type and company_type not in COMPANY_TYPES:
        return jsonify({"message": f"type must be one of: {', '.join(COMPANY_TYPES)}"}), 400
    return _list(company_type)


@companies_bp.post("")
@require_auth
@require_role("admin")
def create_company_route():
    return _create()


@companies_bp.get("/<int:company_id>")
@require_auth
@require_role("admin")
def get_company_route(company_id: int):
    return _get(company_id)


@companies_bp.patch("/<int:company_id>")
@require_auth
@require_role("admin")
def update_company_route(company_id: int):
    return _update(company_id)


@companies_bp.delete("/<int:company_id>")
@require_auth
@require_role("admin")
def delete_company_route(company_id: int):
    return _delete(company_id)


@carriers_bp.get("")
@require_auth
@require_role("admin")
def list_carriers_route():
    return _list("carrier")


@carriers_bp.post("")
@require_auth
@require_role("admin")
def create_carrier_route():
    return _create(forced_type="carrier")


@carriers_bp.get("/<int:carrier_id>")
@require_auth
@require_role("admin")
def get_carrier_route(carrier_id: int):
    return _get(carrier_id, "carrier")


@carriers_bp.patch("/<int:carrier_id>")
@require_auth
@require_role("admin")
def update_carrier_route(carrier_id: int):
    return _update(carrier_id, "carrier")


@carriers_bp.delete("/<int:carrier_id>")
@require_auth
@require_role("admin")
def delete_carrier_route(carrier_id: int):
    return _delete(carrier_id, "carrier")
