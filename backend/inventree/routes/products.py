# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/inventree/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication (@require_auth). There are no
roles; any logged-in staff member may manage the catalog.
"""
from flask import Blueprint, request, jsonify

from ..services import products_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth, current_user_id

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "barcode", "price", "cost", "stock", "category", "image_ref"},
    required_on_create={"name", "price", "stock"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products():
    """
    List products.

    Query params:
    - category: str (optional) - exact category name
    - search: str (optional) - case-insensitive substring of the name
    """
    products = products_service.list_products(
        category=request.args.get("category"),
        search=request.args.get("search"),
    )
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/low-stock")
@require_auth
def low_stock():
    """Products at or below ?threshold= (default LOW_STOCK_THRESHOLD)."""
    threshold = request.args.get("threshold", type=int)
    products = products_service.list_low_stock(threshold)
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/barcode/<string:barcode>")
@require_auth
def get_by_barcode(barcode: str):
    product = products_service.get_product_by_barcode(barcode)
    if product is None:
        return {"error": "Product not found"}, 404
    return product.to_dict(), 200


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    product = products_service.get_product(product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product.to_dict(), 200


@products_bp.post("")
@require_auth
def create_product_route():
    """Create a new product."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        created = products_service.create_product(patch=patch, user_id=current_user_id())
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return e.to_dict(), 409

    return created.to_dict(), 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    """Partially update a product (only the fields provided)."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return e.to_dict(), 409

    return updated.to_dict(), 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return {"ok": True}, 200


@products_bp.post("/<int:product_id>/stock")
@require_auth
def adjust_stock_route(product_id: int):
    """
    Manual stock adjustment.

    Body: {"operation": "add" | "subtract", "quantity": int > 0}
    """
    data = request.get_json(silent=True) or {}

    try:
        product = products_service.adjust_stock(
            product_id=product_id,
            operation=data.get("operation"),
            quantity=data.get("quantity"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return e.to_dict(), 409

    return jsonify(product.to_dict()), 200
