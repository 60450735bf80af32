"""
Pytest fixtures for Inventree backend tests.

Provides an in-memory database, a logged-in staff user, and small factories
for products and historical sales.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from inventree import create_app
from inventree.extensions import db
from inventree.models import Product, Sale, SaleLine
from inventree.services.auth_service import create_user


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'DEFAULT_TAX_RATE': '0.10',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def staff_user(db_session):
    """A regular active staff account."""
    return create_user(username="cashier", email="cashier@shop.test", password=TEST_PASSWORD)


@pytest.fixture(scope='function')
def auth_token(client, staff_user):
    return get_auth_token(client, staff_user.username, TEST_PASSWORD)


@pytest.fixture(scope='function')
def headers(auth_token):
    return auth_headers(auth_token)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(name="Widget", price="10.00", stock=5, barcode=None)."""
    def _make(name="Widget", price="10.00", stock=5, barcode=None, category=None):
        product = Product(
            name=name,
            price=Decimal(str(price)),
            stock=stock,
            barcode=barcode,
            category=category,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def make_sale(db_session):
    """
    Factory for historical sales written directly (no stock movement).

    lines: [(product_id, product_name, quantity, unit_price), ...]
    """
    def _make(lines, created_at: datetime, tax_rate="0.10", payment_method="cash"):
        rate = Decimal(tax_rate)
        sale_lines = []
        subtotal = Decimal("0.00")
        for position, (product_id, name, quantity, unit_price) in enumerate(lines, start=1):
            unit_price = Decimal(str(unit_price))
            line_total = unit_price * quantity
            subtotal += line_total
            sale_lines.append(SaleLine(
                position=position,
                product_id=product_id,
                product_name=name,
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total,
            ))
        tax = subtotal * rate
        sale = Sale(
            lines=sale_lines,
            subtotal=subtotal,
            tax_rate=rate,
            tax=tax,
            total=subtotal + tax,
            payment_method=payment_method,
            status="completed",
            created_at=created_at,
        )
        db_session.add(sale)
        db_session.commit()
        return sale

    return _make


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
