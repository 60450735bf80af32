from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ..extensions import db
from inventree.time_utils import to_utc_z, utcnow


CENT = Decimal("0.01")


def money_str(value) -> str | None:
    """
    Money -> string with exactly two decimals, half-up (0.125 -> "0.13").

    Shared by JSON serialization and invoices so both show the same cents.
    """
    if value is None:
        return None
    amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{amount:.2f}"


class Product(db.Model):
    """
    Product master data.

    BARCODE: Optional, but unique across the whole catalog when present.
    The unique constraint backs up the service-level check (NULLs are not
    compared, so any number of products may have no barcode).

    STOCK: Non-negative count of sellable units. Sales decrement it through
    an optimistic version check (version_id), so two checkouts racing on the
    same product cannot both succeed against stale stock.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("barcode", name="uq_products_barcode"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        db.Index("ix_products_name", "name"),
        db.Index("ix_products_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    barcode = db.Column(db.String(64), nullable=True)

    price = db.Column(db.Numeric(12, 2), nullable=False)
    cost = db.Column(db.Numeric(12, 2), nullable=True)
    stock = db.Column(db.Integer, nullable=False, default=0)

    # Category by name, not by FK: categories are reference data only
    category = db.Column(db.String(120), nullable=True)

    # Opaque blob-store key; never dereferenced here
    image_ref = db.Column(db.String(255), nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "barcode": self.barcode,
            "price": money_str(self.price),
            "cost": money_str(self.cost),
            "stock": self.stock,
            "category": self.category,
            "image_ref": self.image_ref,
            "created_by_user_id": self.created_by_user_id,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Category(db.Model):
    """Product category (reference data)."""
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
