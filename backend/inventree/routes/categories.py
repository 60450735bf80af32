# backend/inventree/routes/categories.py
"""Category reference data routes."""

from flask import Blueprint, request, jsonify

from ..services import categories_service
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth, current_user_id

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
def list_categories_route():
    categories = categories_service.list_categories()
    return jsonify({"items": [c.to_dict() for c in categories], "count": len(categories)}), 200


@categories_bp.post("")
@require_auth
def create_category_route():
    data = request.get_json(silent=True) or {}

    try:
        category = categories_service.create_category(
            name=data.get("name"),
            description=data.get("description"),
            user_id=current_user_id(),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(category.to_dict()), 201


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    try:
        categories_service.delete_category(category_id=category_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"ok": True}), 200
