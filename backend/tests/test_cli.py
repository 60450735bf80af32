"""
CLI command tests (flask system / users / products groups).
"""

from inventree.models import User


def test_users_create_and_list(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "users", "create",
        "--username", "manager",
        "--email", "Manager@Shop.test",
        "--password", "Password123!",
    ])
    assert result.exit_code == 0, result.output
    assert "PASS Created user: manager (manager@shop.test)" in result.output
    assert db_session.query(User).filter_by(username="manager").one().email == "manager@shop.test"

    result = runner.invoke(args=["users", "list"])
    assert result.exit_code == 0
    assert "manager <manager@shop.test> active" in result.output


def test_users_create_rejects_weak_password(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "users", "create",
        "--username", "weak",
        "--email", "weak@shop.test",
        "--password", "short",
    ])

    assert result.exit_code == 1
    assert "FAIL Password validation failed" in result.output
    assert db_session.query(User).count() == 0


def test_users_create_rejects_duplicate(app, staff_user):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "users", "create",
        "--username", staff_user.username,
        "--email", "other@shop.test",
        "--password", "Password123!",
    ])

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_products_low_stock(app, make_product):
    make_product(name="Almost Gone", stock=2, barcode="555")
    make_product(name="Plenty", stock=200)
    runner = app.test_cli_runner()

    result = runner.invoke(args=["products", "low-stock"])

    assert result.exit_code == 0
    assert "Almost Gone (barcode 555): 2 left" in result.output
    assert "Plenty" not in result.output


def test_products_low_stock_empty(app, db_session):
    result = app.test_cli_runner().invoke(args=["products", "low-stock", "--threshold", "0"])
    assert result.exit_code == 0
    assert "No products are low on stock" in result.output


def test_init_db_is_idempotent(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "init-db"])
    assert result.exit_code == 0
    assert "PASS Database ready" in result.output
