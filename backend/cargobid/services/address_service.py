# Overview: Service-layer operations for company addresses.

from __future__ import annotations

from ..extensions import db
from ..models import Address, Company, Quote


ADDRESS_MUTABLE_FIELDS = {
    "street", "number", "complement", "neighborhood",
    "city", "state", "zip_code", "country",
}


class AddressNotFoundError(Exception):
    """Raised when an address is not found."""
    pass


class AddressCompanyNotFoundError(Exception):
    """Raised when the owning company does not exist."""
    pass


def _require_company(company_id: int, company_type: str | None) -> Company:
    company = db.session.get(Company, company_id)
    if not company or (company_type and company.type != company_type):
        raise AddressCompanyNotFoundError(f"Company {company_id} not found")
    return company


def create_address(company_id: int, *, patch: dict, company_type: str | None = None) -> Address:
    """
    Create an address for a company. Country defaults to "BR".

    company_type narrows the owner (the carrier routes pass "carrier").
    """
    _require_company(company_id, company_type)

    address = Address(
        company_id=company_id,
        **{k: v for k, v in patch.items() if k in ADDRESS_MUTABLE_FIELDS},
    )
    if not address.country:
        address.country = "BR"

    db.session.add(address)
    db.session.commit()
    return address


def get_addresses(company_id: int, *, company_type: str | None = None) -> list[Address]:
    _require_company(company_id, company_type)
    return (
        db.session.query(Address)
        .filter(Address.company_id == company_id)
        .order_by(Address.id.asc())
        .all()
    )


def get_address(address_id: int) -> Address | None:
    return db.session.get(Address, address_id)


def update_address(address_id: int, *, patch: dict) -> Address:
    address = get_address(address_id)
    if not address:
        raise AddressNotFoundError(f"Address {address_id} not found")

    for k, v in patch.items():
        if k not in ADDRESS_MUTABLE_FIELDS:
            continue
        setattr(address, k, v)

    db.session.commit()
    return address


def delete_address(address_id: int) -> bool:
    """
    Hard delete. No ownership check at this layer.

    Returns False when nothing was deleted. Quotes that referenced the
    address keep their origin/destination text.
    """
    db.session.query(Quote).filter(Quote.origin_address_id == address_id).update(
        {Quote.origin_address_id: None}, synchronize_session=False
    )
    db.session.query(Quote).filter(Quote.destination_address_id == address_id).update(
        {Quote.destination_address_id: None}, synchronize_session=False
    )
    deleted = db.session.query(Address).filter(Address.id == address_id).delete()
    db.session.commit()
    return bool(deleted)
