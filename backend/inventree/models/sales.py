from __future__ import annotations

import uuid

from ..extensions import db
from inventree.time_utils import to_utc_z, utcnow
from .catalog import money_str

SALE_STATUSES = ("completed", "pending", "cancelled")


def _new_reference() -> str:
    return uuid.uuid4().hex


class Sale(db.Model):
    """
    Completed sale record.

    Immutable once written: there is no update path. Totals are stored as
    computed at checkout (subtotal = sum of line totals, tax = subtotal *
    tax_rate, total = subtotal + tax).
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Opaque public identifier; the trailing characters are the display number
    reference = db.Column(db.String(32), nullable=False, unique=True, default=_new_reference)

    subtotal = db.Column(db.Numeric(14, 2), nullable=False)
    tax_rate = db.Column(db.Numeric(6, 4), nullable=False)
    # Six places so subtotal * tax_rate is stored without rounding
    tax = db.Column(db.Numeric(18, 6), nullable=False)
    total = db.Column(db.Numeric(18, 6), nullable=False)

    customer_name = db.Column(db.String(255), nullable=True)
    customer_email = db.Column(db.String(255), nullable=True)
    payment_method = db.Column(db.String(32), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="completed", index=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    lines = db.relationship(
        "SaleLine",
        back_populates="sale",
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def short_reference(self) -> str:
        return self.reference[-8:]

    def __repr__(self) -> str:
        return f"<Sale id={self.id} reference={self.reference!r} total={self.total}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reference": self.reference,
            "short_reference": self.short_reference,
            "items": [line.to_dict() for line in self.lines],
            "subtotal": money_str(self.subtotal),
            "tax_rate": str(self.tax_rate),
            "tax": money_str(self.tax),
            "total": money_str(self.total),
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "payment_method": self.payment_method,
            "status": self.status,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }


class SaleLine(db.Model):
    """
    Snapshot of one product at the moment of sale.

    product_id is a weak reference (no FK): deleting or editing the product
    later must not touch historical sales, so name and price are copied.
    """
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.UniqueConstraint("sale_id", "position", name="uq_sale_lines_sale_position"),
        db.CheckConstraint("quantity > 0", name="ck_sale_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    product_id = db.Column(db.Integer, nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    line_total = db.Column(db.Numeric(14, 2), nullable=False)

    sale = db.relationship("Sale", back_populates="lines")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "position": self.position,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": money_str(self.unit_price),
            "line_total": money_str(self.line_total),
        }
