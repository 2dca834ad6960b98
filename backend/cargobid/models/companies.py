from __future__ import annotations

from ..extensions import db
from cargobid.time_utils import to_utc_z, utcnow


COMPANY_TYPES = ("client", "carrier")
COMPANY_STATUSES = ("active", "inactive", "deleted")


class Company(db.Model):
    """
    Client or carrier organization.

    Companies are never hard-deleted: removal flips status to "deleted"
    and the row stays for historical references (users, addresses).
    """
    __tablename__ = "companies"
    __table_args__ = (
        db.CheckConstraint("type IN ('client', 'carrier')", name="ck_companies_type"),
        db.CheckConstraint(
            "status IN ('active', 'inactive', 'deleted')", name="ck_companies_status"
        ),
        db.Index("ix_companies_type_status", "type", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # CNPJ / CPF as entered; globally unique
    tax_id = db.Column(db.String(32), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    trade_name = db.Column(db.String(255), nullable=True)
    type = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="active")

    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    contact_info = db.Column(db.Text, nullable=True)
    address = db.Column(db.Text, nullable=True)

    # Carrier-only tags
    freight_types = db.Column(db.JSON, nullable=True)
    regions = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=utcnow,
    )

    addresses = db.relationship(
        "Address",
        back_populates="company",
        lazy=True,
        order_by="Address.id",
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} tax_id={self.tax_id!r} type={self.type}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tax_id": self.tax_id,
            "name": self.name,
            "trade_name": self.trade_name,
            "type": self.type,
            "status": self.status,
            "email": self.email,
            "phone": self.phone,
            "contact_info": self.contact_info,
            "address": self.address,
            "freight_types": list(self.freight_types or []),
            "regions": list(self.regions or []),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Address(db.Model):
    """Postal address owned by exactly one company."""
    __tablename__ = "addresses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)

    street = db.Column(db.String(255), nullable=False)
    number = db.Column(db.String(32), nullable=False)
    complement = db.Column(db.String(255), nullable=True)
    neighborhood = db.Column(db.String(128), nullable=False)
    city = db.Column(db.String(128), nullable=False)
    state = db.Column(db.String(64), nullable=False)
    zip_code = db.Column(db.String(16), nullable=False)
    country = db.Column(db.String(64), nullable=False, default="BR")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", back_populates="addresses")

    def one_line(self) -> str:
        """Human-readable single line, used when a quote references an address."""
        parts = [f"{self.street}, {self.number}"]
        if self.complement:
            parts.append(self.complement)
        parts.append(self.neighborhood)
        parts.append(f"{self.city} - {self.state}")
        parts.append(self.zip_code)
        return ", ".join(parts)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "street": self.street,
            "number": self.number,
            "complement": self.complement,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "created_at": to_utc_z(self.created_at),
        }
