# Overview: Service-layer operations for companies; encapsulates business logic and database work.

"""
Company Service

Companies are the client and carrier organizations administered by admins.

DESIGN:
- tax_id (CNPJ/CPF) is globally unique across both company types
- Deletion is a soft delete: status becomes "deleted" and the row stays
- Every create/update/delete appends an audit entry in the same transaction
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Company
from .audit_service import record_audit


COMPANY_MUTABLE_FIELDS = {
    "tax_id", "name", "trade_name", "type", "status",
    "email", "phone", "contact_info", "address",
    "freight_types", "regions",
}


class CompanyNotFoundError(Exception):
    """Raised when a company is not found."""
    pass


class DuplicateTaxIdError(ValueError):
    """Raised when another company already uses the tax id."""
    pass


def _ensure_tax_id_free(tax_id: str, *, exclude_id: int | None = None) -> None:
    query = db.session.query(Company).filter(Company.tax_id == tax_id)
    if exclude_id is not None:
        query = query.filter(Company.id != exclude_id)
    if query.first():
        raise DuplicateTaxIdError(f"A company with tax id '{tax_id}' already exists")


def create_company(*, patch: dict, actor_user_id: int | None = None) -> Company:
    """
    Create a company. Status defaults to "active".

    Raises:
        DuplicateTaxIdError: If the tax id is already registered
    """
    _ensure_tax_id_free(patch["tax_id"])

    company = Company(**{k: v for k, v in patch.items() if k in COMPANY_MUTABLE_FIELDS})
    if not company.status:
        company.status = "active"

    db.session.add(company)
    try:
        db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateTaxIdError(
            f"A company with tax id '{patch['tax_id']}' already exists"
        ) from exc

    record_audit(
        actor_user_id,
        "CREATE_COMPANY",
        f"Created company {company.name} (ID: {company.id})",
    )
    db.session.commit()
    return company


def get_company(company_id: int) -> Company | None:
    return db.session.get(Company, company_id)


def get_companies(company_type: str | None = None, *, include_deleted: bool = False) -> list[Company]:
    """All companies, optionally of one type. No pagination."""
    query = db.session.query(Company)
    if company_type:
        query = query.filter(Company.type == company_type)
    if not include_deleted:
        query = query.filter(Company.status != "deleted")
    return query.order_by(Company.name.asc(), Company.id.asc()).all()


def update_company(
    company_id: int,
    *,
    patch: dict,
    actor_user_id: int | None = None,
    action: str = "UPDATE_COMPANY",
) -> Company:
    """
    Apply a partial update.

    Raises:
        CompanyNotFoundError: If the company does not exist
        DuplicateTaxIdError: If the new tax id is taken
    """
    company = get_company(company_id)
    if not company:
        raise CompanyNotFoundError(f"Company {company_id} not found")

    if patch.get("tax_id") and patch["tax_id"] != company.tax_id:
        _ensure_tax_id_free(patch["tax_id"], exclude_id=company_id)

    for k, v in patch.items():
        if k not in COMPANY_MUTABLE_FIELDS:
            continue
        setattr(company, k, v)

    try:
        db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateTaxIdError(
            f"A company with tax id '{patch.get('tax_id')}' already exists"
        ) from exc

    verb = "Deleted" if action == "DELETE_COMPANY" else "Updated"
    record_audit(actor_user_id, action, f"{verb} company {company.name} (ID: {company_id})")
    db.session.commit()
    return company


def delete_company(company_id: int, *, actor_user_id: int | None = None) -> Company:
    """Soft delete."""
    return update_company(
        company_id,
        patch={"status": "deleted"},
        actor_user_id=actor_user_id,
        action="DELETE_COMPANY",
    )
