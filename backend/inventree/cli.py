# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/inventree/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent; prefer `flask db upgrade` once migrations are in use).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all staff users with active status and last login.
# - python -m flask users create --username admin --email admin@inventree.local --password "Password123!"
#   Create a user (prompts if options are omitted).
#
# Catalog inspection:
# - python -m flask products low-stock [--threshold 5]
#   List products at or below the low-stock threshold.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import products_service
from .services.auth_service import create_user, PasswordValidationError
from .validation import ConflictError
from .time_utils import to_utc_z


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database ready")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(username, email, password):
    """
    Create a new staff user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(username=username, email=email, password=password)
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        raise SystemExit(1)
    except ConflictError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({user.email}) [ID: {user.id}]")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found. Run 'flask users create' first.")
        return

    click.echo("\nUSERS:")
    for u in users:
        status = "active" if u.is_active else "inactive"
        last_login = to_utc_z(u.last_login_at) or "never"
        click.echo(f"  [{u.id}] {u.username} <{u.email}> {status}, last login: {last_login}")


@click.group('products')
def products_group():
    """Catalog inspection commands."""


@products_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Stock level to flag (default LOW_STOCK_THRESHOLD)')
@with_appcontext
def low_stock_cli(threshold):
    """List products whose stock is at or below the threshold."""
    products = products_service.list_low_stock(threshold)

    if not products:
        click.echo("PASS No products are low on stock")
        return

    click.echo(f"\nLOW STOCK ({len(products)}):")
    for p in products:
        barcode = p.barcode or "-"
        click.echo(f"  [{p.id}] {p.name} (barcode {barcode}): {p.stock} left")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
