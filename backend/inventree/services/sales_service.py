"""
Sales Service - checkout in one transaction

WHY: A sale must either happen completely (sale row, snapshot lines, stock
decrements) or not at all. Validation of every requested item finishes
before any stock is touched, and the whole sequence commits once.

CONCURRENCY: Products carry a version_id. Decrements are flushed as
UPDATE ... WHERE version_id = <read version>; if another checkout changed the
row in between, the flush raises StaleDataError, everything rolls back and
the sale is re-validated from scratch (run_with_retry).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import current_app

from ..extensions import db
from ..models import Product, Sale, SaleLine, SALE_STATUSES
from inventree.time_utils import utcnow
from ..validation import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    require_positive_int,
)
from .concurrency import lock_for_update, run_with_retry
from .products_service import decrement_stock

MAX_LIST_LIMIT = 500
TAX_RATE_PLACES = Decimal("0.0001")


def _normalize_items(items) -> list[tuple[int, int]]:
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    normalized = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{i}] must be an object")
        product_id = item.get("product_id")
        if isinstance(product_id, bool) or not isinstance(product_id, int):
            raise ValidationError(f"items[{i}].product_id must be an integer")
        quantity = require_positive_int(item.get("quantity"), f"items[{i}].quantity")
        normalized.append((product_id, quantity))
    return normalized


def resolve_tax_rate(tax_rate) -> Decimal:
    """
    Explicit rate wins (0 included); None falls back to DEFAULT_TAX_RATE.
    """
    if tax_rate is None:
        tax_rate = current_app.config.get("DEFAULT_TAX_RATE", "0.10")
    if isinstance(tax_rate, bool):
        raise ValidationError("tax_rate must be a number")

    try:
        rate = Decimal(str(tax_rate))
    except InvalidOperation:
        raise ValidationError("tax_rate must be a number")

    if not rate.is_finite() or rate < 0 or rate > 1:
        raise ValidationError("tax_rate must be between 0 and 1")
    if rate != rate.quantize(TAX_RATE_PLACES):
        raise ValidationError("tax_rate cannot have more than 4 decimal places")
    return rate


def _clean_optional(value, field: str, max_length: int = 255) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return value or None


def create_sale(
    *,
    items,
    payment_method: str,
    customer_name: str | None = None,
    customer_email: str | None = None,
    tax_rate=None,
    user_id: int | None = None,
) -> int:
    """
    Record a completed sale and take its quantities out of stock.

    items: [{"product_id": int, "quantity": int > 0}, ...] in submission order

    Raises:
        ValidationError: malformed request
        NotFoundError: first item whose product does not exist
        InsufficientStockError: first item whose quantity exceeds stock
            (earlier lines for the same product count against it)

    Returns the new sale id.
    """
    requested = _normalize_items(items)
    payment_method = _clean_optional(payment_method, "payment_method", max_length=32)
    if not payment_method:
        raise ValidationError("payment_method is required")
    customer_name = _clean_optional(customer_name, "customer_name")
    customer_email = _clean_optional(customer_email, "customer_email")
    rate = resolve_tax_rate(tax_rate)

    def _op() -> int:
        products: dict[int, Product] = {}
        claimed: dict[int, int] = {}
        lines: list[SaleLine] = []
        subtotal = Decimal("0.00")

        # Phase 1: validate every item and build snapshot lines
        for position, (product_id, quantity) in enumerate(requested, start=1):
            product = products.get(product_id)
            if product is None:
                product = lock_for_update(
                    db.session.query(Product).filter_by(id=product_id)
                ).first()
                if product is None:
                    raise NotFoundError("Product", product_id)
                products[product_id] = product

            available = product.stock - claimed.get(product_id, 0)
            if available < quantity:
                raise InsufficientStockError(product.name, available, quantity)
            claimed[product_id] = claimed.get(product_id, 0) + quantity

            unit_price = product.price
            line_total = unit_price * quantity
            subtotal += line_total

            lines.append(SaleLine(
                position=position,
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total,
            ))

        tax = subtotal * rate
        sale = Sale(
            lines=lines,
            subtotal=subtotal,
            tax_rate=rate,
            tax=tax,
            total=subtotal + tax,
            customer_name=customer_name,
            customer_email=customer_email,
            payment_method=payment_method,
            status="completed",
            created_by_user_id=user_id,
            created_at=utcnow(),
        )
        db.session.add(sale)

        # Phase 2: decrement the rows validated above (version-checked on flush)
        for product_id, quantity in claimed.items():
            decrement_stock(products[product_id], quantity)

        db.session.commit()
        return sale.id

    try:
        return run_with_retry(_op)
    except (ValidationError, NotFoundError, ConflictError):
        db.session.rollback()
        raise


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


def list_sales(*, status: str | None = None, limit: int | None = None) -> list[Sale]:
    """Newest sales first, optionally filtered by status."""
    if limit is None:
        limit = current_app.config.get("SALES_LIST_LIMIT", 50)
    if limit <= 0:
        raise ValidationError("limit must be > 0")
    limit = min(limit, MAX_LIST_LIMIT)

    query = db.session.query(Sale)
    if status:
        if status not in SALE_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(SALE_STATUSES)}")
        query = query.filter(Sale.status == status)

    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()
