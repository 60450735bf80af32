# Overview: Service-layer operations for reporting; revenue totals and top products over recorded sales.

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from inventree.extensions import db
from inventree.models import Sale
from inventree.time_utils import local_midnight_utc, parse_iso_datetime, to_utc_naive, to_utc_z
from inventree.validation import ValidationError

TOP_PRODUCTS_LIMIT = 10


def _coerce_bound(value, name: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        # created_at is stored UTC-naive
        return to_utc_naive(value)
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an ISO-8601 datetime")


def _sales_between(start_dt: datetime | None, end_dt: datetime | None) -> list[Sale]:
    query = db.session.query(Sale)
    if start_dt:
        query = query.filter(Sale.created_at >= start_dt)
    if end_dt:
        query = query.filter(Sale.created_at <= end_dt)
    # Oldest first: the aggregation below relies on this for first-seen order
    return query.order_by(Sale.created_at.asc(), Sale.id.asc()).all()


def _revenue(sales: list[Sale]) -> Decimal:
    return sum((sale.total for sale in sales), Decimal("0"))


def top_products(sales: list[Sale], limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    """
    Rank products by summed line revenue, highest first.

    Uses the snapshotted product_name from the first line seen for each
    product_id, never the live catalog. Ties keep first-seen order
    (sorted() is stable and the dict preserves insertion order).
    """
    per_product: dict[int, dict] = {}
    for sale in sales:
        for line in sale.lines:
            entry = per_product.get(line.product_id)
            if entry is None:
                entry = {
                    "product_id": line.product_id,
                    "name": line.product_name,
                    "quantity": 0,
                    "revenue": Decimal("0"),
                }
                per_product[line.product_id] = entry
            entry["quantity"] += line.quantity
            entry["revenue"] += line.line_total

    ranked = sorted(per_product.values(), key=lambda e: e["revenue"], reverse=True)
    return ranked[:limit]


def todays_sales(*, now: datetime | None = None) -> dict:
    """
    Sales created on or after local midnight of the current day.
    """
    midnight = local_midnight_utc(now)
    sales = _sales_between(midnight, None)

    return {
        "since": to_utc_z(midnight),
        "sales": sales,
        "total_revenue": _revenue(sales),
        "total_transactions": len(sales),
    }


def sales_report(*, start=None, end=None) -> dict:
    """
    Aggregate sales inside inclusive [start, end] bounds.

    start/end: datetime or ISO-8601 string; None means unbounded.
    average_transaction is 0 when nothing matches.
    """
    start_dt = _coerce_bound(start, "start")
    end_dt = _coerce_bound(end, "end")
    if start_dt and end_dt and start_dt > end_dt:
        raise ValidationError("start must be before end")

    sales = _sales_between(start_dt, end_dt)

    total_revenue = _revenue(sales)
    total_transactions = len(sales)
    average = total_revenue / total_transactions if total_transactions else Decimal("0")

    return {
        "start": to_utc_z(start_dt) if start_dt else None,
        "end": to_utc_z(end_dt) if end_dt else None,
        "total_revenue": total_revenue,
        "total_transactions": total_transactions,
        "average_transaction": average,
        "top_products": top_products(sales),
        "sales": sales,
    }
