"""
Pytest fixtures for pharmacy backend tests.

Provides test database setup, users with both roles, and an
authenticated test client.
"""

import pytest
from pharmacy import create_app
from pharmacy.extensions import db
from pharmacy.models.auth import ROLE_ADMIN, ROLE_PHARMACIST
from pharmacy.services import auth_service, products_service, inventory_service
from pharmacy.numeric import as_decimal


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
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
def admin_user(db_session):
    return auth_service.create_user("admin", TEST_PASSWORD, ROLE_ADMIN)


@pytest.fixture(scope='function')
def pharmacist_user(db_session):
    return auth_service.create_user("pharmacist", TEST_PASSWORD, ROLE_PHARMACIST)


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, "admin", TEST_PASSWORD))


@pytest.fixture(scope='function')
def pharmacist_headers(client, pharmacist_user):
    return auth_headers(get_auth_token(client, "pharmacist", TEST_PASSWORD))


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: insert a product through the ledger and optionally receive stock for it."""
    def _make(name: str, price, product_id: str | None = None, stock=None) -> dict:
        return _insert_product(name, price, product_id, stock)
    return _make


def _insert_product(name, price, product_id=None, stock=None) -> dict:
    patch = {"name": name, "sale_price": as_decimal(price)}
    if product_id is not None:
        patch["product_id"] = product_id
    product = products_service.create_product(patch=patch)
    if stock:
        inventory_service.record_purchase(product_id=product["productId"], quantity=as_decimal(stock))
    return product


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
