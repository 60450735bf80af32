# Overview: Service-layer operations for product categories (reference data).

from __future__ import annotations

from ..extensions import db
from ..models import Category
from ..validation import NotFoundError, ValidationError


def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.name.asc(), Category.id.asc()).all()


def create_category(*, name: str, description: str | None = None, user_id: int | None = None) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required")
    if len(name) > 120:
        raise ValidationError("name exceeds max length 120")

    category = Category(
        name=name,
        description=(description or "").strip() or None,
        created_by_user_id=user_id,
    )
    db.session.add(category)
    db.session.commit()
    return category


def delete_category(*, category_id: int) -> None:
    """Delete a category. Products keep their category name."""
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category", category_id)
    db.session.delete(category)
    db.session.commit()
