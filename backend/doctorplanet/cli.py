# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/doctorplanet/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply migrations (Flask-Migrate).
#
# System bootstrap:
# - python -m flask system init --admin-email admin@doctorplanet.local
#   Idempotent: creates the global discount row and an admin user, prints a token.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users and tokens:
# - python -m flask users create --email sm@doctorplanet.local --role SALESMAN --name "Ali"
# - python -m flask users issue-token --email sm@doctorplanet.local
#   Prints a new Bearer token (shown once).
# - python -m flask users revoke-tokens --email sm@doctorplanet.local
# - python -m flask users list
#
# Catalog:
# - python -m flask catalog add-product --sku SCR-001 --name "Scrub Suit" --price-cents 350000 \
#       --color-size-stock '{"Navy": {"M": 5, "L": 3}}'
# - python -m flask catalog low-stock

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import ROLES, ROLE_ADMIN
from .services import catalog_service, discount_service, session_service
from .services.catalog_service import CatalogError
from .services.session_service import UserError
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--admin-email', default='admin@doctorplanet.local', help='Admin email')
@click.option('--admin-name', default='Administrator', help='Admin display name')
@with_appcontext
def init_system(admin_email, admin_name):
    """Create the global discount row and an admin user (with a token)."""
    click.echo("START Initializing Doctor Planet back office...")

    discount_service.get_global_discount()
    click.echo("PASS Global discount row ready")

    admin = db.session.query(User).filter_by(email=admin_email.lower()).first()
    if admin:
        click.echo(f"WARN  Admin '{admin.email}' already exists, skipping...")
        return

    admin = session_service.create_user(email=admin_email, role=ROLE_ADMIN, name=admin_name)
    _, token = session_service.issue_token(admin.id)
    click.echo(f"PASS Created admin: {admin.email} (ID: {admin.id})")
    click.echo(f"\nAPI token (shown once): {token}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        return
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User and API token commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--role', type=click.Choice(ROLES, case_sensitive=False), prompt=True, help='Role')
@click.option('--name', default=None, help='Display name')
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_user_cli(email, role, name, phone):
    """Create a user."""
    try:
        user = session_service.create_user(email=email, role=role, name=name, phone=phone)
        click.echo(f"PASS Created user: {user.email} ({user.role}, ID: {user.id})")
    except UserError as e:
        click.echo(f"FAIL {e}")


def _user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=email.strip().lower()).first()


@users_group.command('issue-token')
@click.option('--email', prompt=True, help='Email address')
@with_appcontext
def issue_token_cli(email):
    """Issue a Bearer token for a user."""
    user = _user_by_email(email)
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return
    try:
        _, token = session_service.issue_token(user.id)
    except UserError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(token)


@users_group.command('revoke-tokens')
@click.option('--email', prompt=True, help='Email address')
@with_appcontext
def revoke_tokens_cli(email):
    """Revoke every active token of a user."""
    user = _user_by_email(email)
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return
    count = session_service.revoke_tokens(user.id)
    click.echo(f"PASS Revoked {count} token(s) for {user.email}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.email:<36} {user.role:<9} {status}")


@click.group('catalog')
def catalog_group():
    """Product catalog commands."""


@catalog_group.command('add-product')
@click.option('--sku', required=True)
@click.option('--name', required=True)
@click.option('--price-cents', type=int, required=True)
@click.option('--sale-price-cents', type=int, default=None)
@click.option('--barcode', default=None)
@click.option('--category', default=None)
@click.option('--stock', type=int, default=0, help='Flat stock (ignored with --color-size-stock)')
@click.option('--color-size-stock', default=None, help='JSON {color: {size: count}}')
@with_appcontext
def add_product_cli(sku, name, price_cents, sale_price_cents, barcode, category, stock, color_size_stock):
    """Add a product to the catalog."""
    try:
        matrix = json.loads(color_size_stock) if color_size_stock else None
    except json.JSONDecodeError as e:
        click.echo(f"FAIL --color-size-stock is not valid JSON: {e}")
        return

    try:
        product = catalog_service.create_product(
            sku=sku,
            name=name,
            price_cents=price_cents,
            sale_price_cents=sale_price_cents,
            barcode=barcode,
            category=category,
            stock=stock,
            color_size_stock=matrix,
        )
    except (ValidationError, CatalogError) as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created product: {product.name} (ID: {product.id}, stock: {product.stock})")


@catalog_group.command('low-stock')
@click.option('--limit', type=int, default=20)
@with_appcontext
def low_stock_cli(limit):
    """List products under the low-stock threshold."""
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    products = catalog_service.low_stock_products(threshold, limit=limit)
    if not products:
        click.echo(f"No products under {threshold}")
        return
    for p in products:
        click.echo(f"{p.id:>4}  {p.sku:<16} {p.name:<32} {p.stock}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(catalog_group)
