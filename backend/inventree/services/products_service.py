# backend/inventree/services/products_service.py
"""
Products Service

Catalog CRUD plus the stock operations the sales engine relies on.

BARCODE RULE: a barcode may belong to at most one product. Create fails if
any product holds it; update fails only if a *different* product holds it.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Product
from .concurrency import run_with_retry
from ..validation import (
    DuplicateBarcodeError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)

PRODUCT_MUTABLE_FIELDS = {
    "name", "description", "barcode", "price", "cost", "stock", "category", "image_ref",
}

STOCK_OPERATIONS = ("add", "subtract")


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _ensure_barcode_free(barcode: str | None, product_id: int | None = None) -> None:
    if not barcode:
        return
    existing = db.session.query(Product).filter(Product.barcode == barcode).first()
    if existing and existing.id != product_id:
        raise DuplicateBarcodeError(barcode)


def _commit_product(barcode: str | None) -> None:
    """
    Commit a created/updated product.

    A writer that slipped past _ensure_barcode_free trips uq_products_barcode;
    that surfaces as DuplicateBarcodeError like the pre-check does.
    """
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if barcode and get_product_by_barcode(barcode) is not None:
            raise DuplicateBarcodeError(barcode)
        raise


def get_product(product_id: int) -> Product | None:
    return db.session.get(Product, product_id)


def require_product(product_id: int) -> Product:
    product = get_product(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def get_product_by_barcode(barcode: str) -> Product | None:
    return db.session.query(Product).filter(Product.barcode == barcode).first()


def list_products(category: str | None = None, search: str | None = None) -> list[Product]:
    """
    List products, optionally filtered.

    search: case-insensitive substring match on name
    category: exact category name
    """
    query = db.session.query(Product)

    if search:
        query = query.filter(Product.name.ilike(f"%{search.strip()}%"))
    if category:
        query = query.filter(Product.category == category)

    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def list_low_stock(threshold: int | None = None) -> list[Product]:
    """Products with stock at or below threshold (LOW_STOCK_THRESHOLD by default)."""
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    return (
        db.session.query(Product)
        .filter(Product.stock <= threshold)
        .order_by(Product.stock.asc(), Product.name.asc())
        .all()
    )


def create_product(*, patch: dict, user_id: int | None = None) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: If required fields are missing
        DuplicateBarcodeError: If the barcode is already in use
    """
    for field in ("name", "price"):
        if patch.get(field) is None:
            raise ValidationError(f"{field} is required")

    _ensure_barcode_free(patch.get("barcode"))

    p = Product(created_by_user_id=user_id, stock=0)
    apply_product_patch(p, patch)

    db.session.add(p)
    _commit_product(patch.get("barcode"))
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    """
    Apply a validated partial update.

    Raises:
        NotFoundError: If the product does not exist
        DuplicateBarcodeError: If another product already holds the barcode
    """
    p = require_product(product_id)

    if "barcode" in patch:
        _ensure_barcode_free(patch["barcode"], product_id=p.id)

    apply_product_patch(p, patch)
    _commit_product(patch.get("barcode"))
    return p


def delete_product(*, product_id: int) -> None:
    """
    Delete a product.

    Historical sales keep their snapshot lines; nothing cascades.
    """
    p = require_product(product_id)
    db.session.delete(p)
    db.session.commit()


def decrement_stock(product: Product, amount: int) -> None:
    """
    Take `amount` units off a loaded product inside the caller's transaction.

    Does not commit. The change is flushed with a version_id check, so a
    concurrent writer surfaces as StaleDataError at flush time.
    """
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    if product.stock < amount:
        raise InsufficientStockError(product.name, product.stock, amount)
    product.stock = product.stock - amount


def adjust_stock(*, product_id: int, operation: str, quantity: int) -> Product:
    """
    Manual stock adjustment.

    operation: "add" or "subtract"
    Raises InsufficientStockError if the result would be negative.
    """
    if operation not in STOCK_OPERATIONS:
        raise ValidationError("operation must be 'add' or 'subtract'")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer")

    def _op():
        p = require_product(product_id)

        if operation == "add":
            p.stock = p.stock + quantity
        else:
            decrement_stock(p, quantity)

        db.session.commit()
        return p

    return run_with_retry(_op)
