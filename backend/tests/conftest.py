"""
Pytest fixtures for Doctor Planet backend tests.

Provides test database setup, users with API tokens, products and test client.
"""

from datetime import datetime

import pytest
from doctorplanet import create_app
from doctorplanet.extensions import db
from doctorplanet.models import Product, Order, OrderItem, Shop
from doctorplanet.models.auth import ROLE_ADMIN, ROLE_SALESMAN, ROLE_USER
from doctorplanet.services import session_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_TIMEZONE': 'UTC',
        'POS_ALLOW_OVERSELL': True,
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

        # Tests may flip config flags; restore the defaults
        app.config.update(STORE_TIMEZONE='UTC', POS_ALLOW_OVERSELL=True)

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _user_with_token(email: str, role: str, name: str):
    user = session_service.create_user(email=email, role=role, name=name)
    _, token = session_service.issue_token(user.id)
    return user, token


@pytest.fixture(scope='function')
def admin(db_session):
    """Admin user and a Bearer token."""
    return _user_with_token("admin@doctorplanet.test", ROLE_ADMIN, "Admin")


@pytest.fixture(scope='function')
def salesman(db_session):
    return _user_with_token("ali@doctorplanet.test", ROLE_SALESMAN, "Ali")


@pytest.fixture(scope='function')
def other_salesman(db_session):
    return _user_with_token("bilal@doctorplanet.test", ROLE_SALESMAN, "Bilal")


@pytest.fixture(scope='function')
def customer(db_session):
    return _user_with_token("sara@example.test", ROLE_USER, "Sara")


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(admin[1])


@pytest.fixture(scope='function')
def salesman_headers(salesman):
    return auth_headers(salesman[1])


@pytest.fixture(scope='function')
def customer_headers(customer):
    return auth_headers(customer[1])


@pytest.fixture(scope='function')
def flat_product(db_session):
    """Product tracked by a flat stock count."""
    product = Product(sku="STH-001", barcode="8901234567890", name="Stethoscope", price_cents=100000, stock=10)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def variant_product(db_session):
    """Scrub suit with a color/size stock matrix (stock == sum of cells)."""
    product = Product(
        sku="SCR-001",
        name="Scrub Suit",
        price_cents=350000,
        sale_price_cents=300000,
        color_size_stock={"Navy": {"M": 5, "L": 3}, "Wine": {"M": 2}},
        stock=10,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def shop(db_session, salesman):
    shop = Shop(name="City Medical Store", owner_name="Hamza", phone="0300-0000000", created_by_user_id=salesman[0].id)
    db_session.add(shop)
    db_session.commit()
    return shop


def make_order(db_session, user, *, total_cents: int, status: str = "PENDING", created_at: datetime | None = None,
               number: str | None = None, product: Product | None = None) -> Order:
    """Insert a web order directly; checkout is not part of this backend."""
    count = db_session.query(Order).count() + 1
    order = Order(
        order_number=number or f"DP-{count:06d}",
        user_id=user.id,
        status=status,
        subtotal_cents=total_cents,
        shipping_fee_cents=0,
        total_cents=total_cents,
        shipping_address={"full_name": user.display_name, "address": "12 Mall Road", "city": "Lahore"},
    )
    if created_at is not None:
        order.created_at = created_at
    if product is not None:
        order.items.append(
            OrderItem(product_id=product.id, product_name=product.name, quantity=1, price_cents=total_cents)
        )
    db_session.add(order)
    db_session.commit()
    return order


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
