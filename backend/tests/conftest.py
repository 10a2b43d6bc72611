"""
Pytest fixtures for the back-office backend tests.

Provides an in-memory database, a test client, an acting user and
product factories.
"""

from decimal import Decimal

import pytest
from app import create_app
from app.extensions import db
from app.models import User, Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOG_LEVEL': 'WARNING',
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
def user(db_session):
    """Active admin user that records sales and expenses."""
    u = User(name="Admin User", email="admin@test.local", role="admin", is_active=True)
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture(scope='function')
def headers(user):
    return user_headers(user)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(sku="A", stock=10, cost="6.00", price="10.00", **extra)."""
    counter = {"n": 0}

    def _make(sku=None, *, stock=10, cost="6.00", price="10.00", **extra):
        counter["n"] += 1
        sku = sku or f"SKU-{counter['n']:03d}"
        p = Product(
            name=extra.pop("name", f"Product {sku}"),
            sku=sku,
            cost_price=Decimal(cost),
            selling_price=Decimal(price),
            stock_quantity=stock,
            **extra,
        )
        db_session.add(p)
        db_session.commit()
        return p

    return _make


def user_headers(u: User) -> dict:
    """Helper to create acting-user headers."""
    return {'X-User-Id': str(u.id)}

