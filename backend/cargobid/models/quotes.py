from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from cargobid.time_utils import to_utc_z, utcnow


QUOTE_STATUSES = ("open", "responded", "negotiation", "closed")
BID_STATUSES = ("pending", "accepted", "rejected")


def decimal_str(value) -> str | None:
    if value is None:
        return None
    return f"{Decimal(value):.2f}"


class Quote(db.Model):
    """Freight request posted by a client user."""
    __tablename__ = "quotes"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('open', 'responded', 'negotiation', 'closed')",
            name="ck_quotes_status",
        ),
        db.Index("ix_quotes_client_created", "client_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    origin = db.Column(db.String(255), nullable=False)
    destination = db.Column(db.String(255), nullable=False)
    origin_address_id = db.Column(db.Integer, db.ForeignKey("addresses.id"), nullable=True)
    destination_address_id = db.Column(db.Integer, db.ForeignKey("addresses.id"), nullable=True)

    weight = db.Column(db.Numeric(12, 2), nullable=False)
    volume = db.Column(db.Numeric(12, 2), nullable=True)
    cargo_type = db.Column(db.String(128), nullable=False)
    deadline = db.Column(db.DateTime(timezone=True), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="open", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    client = db.relationship("User", backref=db.backref("quotes", lazy=True))
    bids = db.relationship(
        "Bid",
        back_populates="quote",
        lazy=True,
        order_by="Bid.id",
    )

    def to_dict(self, *, include_client: bool = False, include_bids: bool = False,
                include_bid_carriers: bool = False) -> dict:
        data = {
            "id": self.id,
            "client_id": self.client_id,
            "origin": self.origin,
            "destination": self.destination,
            "origin_address_id": self.origin_address_id,
            "destination_address_id": self.destination_address_id,
            "weight": decimal_str(self.weight),
            "volume": decimal_str(self.volume),
            "cargo_type": self.cargo_type,
            "deadline": to_utc_z(self.deadline),
            "notes": self.notes,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_client:
            data["client"] = self.client.to_dict() if self.client else None
        if include_bids:
            data["bids"] = [b.to_dict(include_carrier=include_bid_carriers) for b in self.bids]
        return data


class Bid(db.Model):
    """
    A carrier's priced proposal against one quote.

    The partial unique index allows at most one accepted bid per quote.
    """
    __tablename__ = "bids"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')", name="ck_bids_status"
        ),
        db.CheckConstraint("estimated_days >= 1", name="ck_bids_estimated_days"),
        db.Index(
            "uq_bids_one_accepted_per_quote",
            "quote_id",
            unique=True,
            sqlite_where=db.text("status = 'accepted'"),
            postgresql_where=db.text("status = 'accepted'"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey("quotes.id"), nullable=False, index=True)
    carrier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    estimated_days = db.Column(db.Integer, nullable=False)
    conditions = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    decided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    quote = db.relationship("Quote", back_populates="bids")
    carrier = db.relationship("User", backref=db.backref("bids", lazy=True))

    def to_dict(self, *, include_carrier: bool = False) -> dict:
        data = {
            "id": self.id,
            "quote_id": self.quote_id,
            "carrier_id": self.carrier_id,
            "amount": decimal_str(self.amount),
            "estimated_days": self.estimated_days,
            "conditions": self.conditions,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "decided_at": to_utc_z(self.decided_at),
        }
        if include_carrier:
            data["carrier"] = self.carrier.to_dict() if self.carrier else None
        return data
