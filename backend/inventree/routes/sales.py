# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/inventree/routes/sales.py
"""Sales API routes: checkout, history and invoices."""

from flask import Blueprint, request, jsonify, current_app

from ..services import sales_service
from ..services.invoice_service import render_invoice
from ..validation import ValidationError, NotFoundError, ConflictError
from ..decorators import require_auth, current_user_id


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Record a completed sale.

    Body:
    {
        "items": [{"product_id": 1, "quantity": 2}, ...],
        "payment_method": "cash",
        "customer_name": "optional",
        "customer_email": "optional",
        "tax_rate": 0.10            # optional, defaults to DEFAULT_TAX_RATE
    }

    Returns 201 with the stored sale; 409 if any line is short on stock.
    """
    data = request.get_json(silent=True) or {}

    try:
        sale_id = sales_service.create_sale(
            items=data.get("items"),
            payment_method=data.get("payment_method"),
            customer_name=data.get("customer_name"),
            customer_email=data.get("customer_email"),
            tax_rate=data.get("tax_rate"),
            user_id=current_user_id(),
        )
        sale = sales_service.get_sale(sale_id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify(e.to_dict()), 409
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Sale recorded: id=%s reference=%s total=%s items=%d",
        sale.id, sale.reference, sale.total, len(sale.lines),
    )
    return jsonify({"sale": sale.to_dict()}), 201


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    List recent sales, newest first.

    Query params:
    - status: completed | pending | cancelled (optional)
    - limit: int (optional, default SALES_LIST_LIMIT)
    """
    try:
        sales = sales_service.list_sales(
            status=request.args.get("status"),
            limit=request.args.get("limit", type=int),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)}), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.get("/<int:sale_id>/invoice")
@require_auth
def get_invoice_route(sale_id: int):
    """
    Render the printable invoice for a sale.

    Returns {"document": "<html>...", "filename": "invoice-XXXXXXXX.html"}.
    Nothing is stored; the client decides whether to save or print it.
    """
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    invoice = render_invoice(
        sale,
        business_name=current_app.config.get("BUSINESS_NAME", "Inventree"),
        tagline=current_app.config.get("BUSINESS_TAGLINE", "Inventory & Billing System"),
    )
    return jsonify(invoice), 200
