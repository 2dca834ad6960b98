# Overview: Flask API routes for company and carrier addresses.

"""
Address Routes

SECURITY: any authenticated user. Lists and creates are scoped to the
company (or carrier) id in the path.
"""

from flask import Blueprint, Response, jsonify, request

from ..decorators import require_auth
from ..models import Address
from ..services import address_service
from ..services.address_service import AddressCompanyNotFoundError, AddressNotFoundError
from ..validation import ModelValidationPolicy, ValidationError, validate_payload


ADDRESS_POLICY = ModelValidationPolicy(
    writable_fields=(
        "street", "number", "complement", "neighborhood",
        "city", "state", "zip_code", "country",
    ),
    required_on_create=("street", "number", "neighborhood", "city", "state", "zip_code"),
    aliases={"zipCode": "zip_code", "zip": "zip_code"},
)


addresses_bp = Blueprint("addresses", __name__, url_prefix="/api")


def _list(company_id: int, company_type: str | None):
    try:
        items = address_service.get_addresses(company_id, company_type=company_type)
    except AddressCompanyNotFoundError as e:
        return jsonify({"message": str(e)}), 404
    return jsonify([a.to_dict() for a in items])


def _create(company_id: int, company_type: str | None):
    payload = request.get_json(silent=True)
    try:
        patch = validate_payload(model=Address, payload=payload, policy=ADDRESS_POLICY, partial=False)
        address = address_service.create_address(company_id, patch=patch, company_type=company_type)
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400
    except AddressCompanyNotFoundError as e:
        return jsonify({"message": str(e)}), 404
    return jsonify(address.to_dict()), 201


@addresses_bp.get("/companies/<int:company_id>/addresses")
@require_auth
def list_company_addresses_route(company_id: int):
    return _list(company_id, None)


@addresses_bp.post("/companies/<int:company_id>/addresses")
@require_auth
def create_company_address_route(company_id: int):
    return _create(company_id, None)


@addresses_bp.get("/carriers/<int:carrier_id>/addresses")
@require_auth
def list_carrier_addresses_route(carrier_id: int):
    return _list(carrier_id, "carrier")


@addresses_bp.post("/carriers/<int:carrier_id>/addresses")
@require_auth
def create_carrier_address_route(carrier_id: int):
    return _create(carrier_id, "carrier")


@addresses_bp.put("/addresses/<int:address_id>")
@require_auth
def update_address_route(address_id: int):
    payload = request.get_json(silent=True)
    try:
        patch = validate_payload(model=Address, payload=payload, policy=ADDRESS_POLICY, partial=True)
        address = address_service.update_address(address_id, patch=patch)
    except ValidationError as e:
        return jsonify({"message": str(e)}), 400
    except AddressNotFoundError:
        return jsonify({"message": "Address not found"}), 404
    return jsonify(address.to_dict())


@addresses_bp.delete("/addresses/<int:address_id>")
@require_auth
def delete_address_route(address_id: int):
    if not address_service.delete_address(address_id):
        return jsonify({"message": "Address not found"}), 404
    return Response(status=204)
