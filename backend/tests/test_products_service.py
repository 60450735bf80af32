"""
Catalog tests: barcode uniqueness, stock adjustments, search, low stock.
"""

from decimal import Decimal

import pytest

from inventree.models import Product
from inventree.services import products_service, categories_service
from inventree.validation import (
    DuplicateBarcodeError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    validate_payload,
    enforce_rules_product,
)
from inventree.routes.products import PRODUCT_POLICY


def _patch(**fields):
    return {"name": "Widget", "price": Decimal("1.00"), "stock": 0, **fields}


class TestBarcodeUniqueness:

    def test_create_with_taken_barcode_fails(self, db_session):
        products_service.create_product(patch=_patch(barcode="123"))
        with pytest.raises(DuplicateBarcodeError) as exc_info:
            products_service.create_product(patch=_patch(name="Other", barcode="123"))
        assert str(exc_info.value) == "Product with this barcode already exists"
        assert db_session.query(Product).count() == 1

    def test_products_without_barcode_do_not_collide(self, db_session):
        products_service.create_product(patch=_patch(name="A"))
        products_service.create_product(patch=_patch(name="B"))
        assert db_session.query(Product).count() == 2

    def test_update_to_own_barcode_succeeds(self, db_session):
        p = products_service.create_product(patch=_patch(barcode="123"))
        updated = products_service.update_product(product_id=p.id, patch={"barcode": "123", "name": "Renamed"})
        assert updated.name == "Renamed"

    def test_update_to_other_products_barcode_fails(self, db_session):
        products_service.create_product(patch=_patch(name="A", barcode="111"))
        b = products_service.create_product(patch=_patch(name="B", barcode="222"))
        with pytest.raises(DuplicateBarcodeError):
            products_service.update_product(product_id=b.id, patch={"barcode": "111"})

    def test_racing_create_surfaces_as_duplicate(self, db_session, monkeypatch):
        """Another writer takes the barcode between the pre-check and commit."""
        products_service.create_product(patch=_patch(name="First", barcode="777"))
        monkeypatch.setattr(products_service, "_ensure_barcode_free", lambda barcode, product_id=None: None)

        with pytest.raises(DuplicateBarcodeError):
            products_service.create_product(patch=_patch(name="Second", barcode="777"))

        assert [p.name for p in db_session.query(Product).all()] == ["First"]

    def test_racing_update_surfaces_as_duplicate(self, db_session, monkeypatch):
        products_service.create_product(patch=_patch(name="A", barcode="111"))
        b = products_service.create_product(patch=_patch(name="B", barcode="222"))
        monkeypatch.setattr(products_service, "_ensure_barcode_free", lambda barcode, product_id=None: None)

        with pytest.raises(DuplicateBarcodeError):
            products_service.update_product(product_id=b.id, patch={"barcode": "111"})

        assert products_service.get_product(b.id).barcode == "222"

    def test_lookup_by_barcode(self, make_product):
        p = make_product(name="Scanned", barcode="0042")
        assert products_service.get_product_by_barcode("0042").id == p.id
        assert products_service.get_product_by_barcode("nope") is None


class TestStockAdjustment:

    def test_add_and_subtract(self, make_product):
        p = make_product(stock=5)
        assert products_service.adjust_stock(product_id=p.id, operation="add", quantity=3).stock == 8
        assert products_service.adjust_stock(product_id=p.id, operation="subtract", quantity=8).stock == 0

    def test_subtract_below_zero_fails(self, make_product):
        p = make_product(stock=2)
        with pytest.raises(InsufficientStockError):
            products_service.adjust_stock(product_id=p.id, operation="subtract", quantity=3)

    @pytest.mark.parametrize("operation,quantity", [("set", 1), ("add", 0), ("add", -1), ("add", "3")])
    def test_invalid_adjustments(self, make_product, operation, quantity):
        p = make_product(stock=2)
        with pytest.raises(ValidationError):
            products_service.adjust_stock(product_id=p.id, operation=operation, quantity=quantity)

    def test_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            products_service.adjust_stock(product_id=404, operation="add", quantity=1)


class TestQueries:

    def test_search_is_case_insensitive_substring(self, make_product):
        make_product(name="Blue Widget")
        make_product(name="Red Gadget")
        names = [p.name for p in products_service.list_products(search="WIDG")]
        assert names == ["Blue Widget"]

    def test_category_filter(self, make_product):
        make_product(name="Apple", category="Fruit")
        make_product(name="Hammer", category="Tools")
        assert [p.name for p in products_service.list_products(category="Tools")] == ["Hammer"]

    def test_low_stock_uses_threshold(self, make_product):
        make_product(name="Plenty", stock=50)
        make_product(name="Few", stock=3)
        make_product(name="Edge", stock=10)

        assert [p.name for p in products_service.list_low_stock()] == ["Few", "Edge"]
        assert [p.name for p in products_service.list_low_stock(5)] == ["Few"]


class TestProductPayload:

    def test_price_is_decimal(self, app):
        patch = validate_payload(
            model=Product,
            payload={"name": "Tea", "price": "3.10", "stock": 4},
            policy=PRODUCT_POLICY,
            partial=False,
        )
        assert patch["price"] == Decimal("3.10")

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Tea", "price": "-1", "stock": 1},
            {"name": "Tea", "price": "1.234", "stock": 1},
            {"name": "Tea", "price": "1.00", "stock": -1},
            {"name": "Tea", "price": "1.00", "stock": 1.5},
        ],
    )
    def test_rejected_values(self, app, payload):
        with pytest.raises(ValidationError):
            patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
            enforce_rules_product(patch)

    def test_unknown_field_rejected(self, app):
        with pytest.raises(ValidationError):
            validate_payload(
                model=Product,
                payload={"name": "Tea", "price": "1", "stock": 1, "version_id": 7},
                policy=PRODUCT_POLICY,
                partial=False,
            )

    def test_blank_barcode_becomes_null(self, app):
        patch = validate_payload(model=Product, payload={"barcode": "  "}, policy=PRODUCT_POLICY, partial=True)
        assert patch["barcode"] is None


class TestCategories:

    def test_create_list_delete(self, db_session):
        categories_service.create_category(name="Snacks")
        drinks = categories_service.create_category(name="Drinks", description="Cold")
        assert [c.name for c in categories_service.list_categories()] == ["Drinks", "Snacks"]

        categories_service.delete_category(category_id=drinks.id)
        assert [c.name for c in categories_service.list_categories()] == ["Snacks"]

        with pytest.raises(NotFoundError):
            categories_service.delete_category(category_id=drinks.id)

    def test_blank_name_rejected(self, db_session):
        with pytest.raises(ValidationError):
            categories_service.create_category(name="   ")
