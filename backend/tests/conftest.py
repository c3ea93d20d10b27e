"""
Pytest fixtures for the pipeworks backend tests.

Provides the application, a test client, a per-test clean database and
small factories for the records most tests need.
"""

from datetime import date

import pytest

from pipeworks import create_app
from pipeworks.config import TestConfig
from pipeworks.extensions import db
from pipeworks.services import items_service, orders_service, staff_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

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
        staff_service.ensure_default_roles()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture
def make_item(db_session):
    def _make(**overrides):
        patch = {
            "name": "Steel Pipe Standard",
            "category": "steel",
            "diameter_mm": 25.0,
            "length_m": 6.0,
            "price_cents": 4550,
            "stock_quantity": 150,
            "minimum_stock": 20,
            "material": "Carbon Steel",
        }
        patch.update(overrides)
        return items_service.create_item(patch=patch)
    return _make


@pytest.fixture
def make_staff(db_session):
    def _make(**overrides):
        patch = {
            "first_name": "Mike",
            "last_name": "Chen",
            "email": "mike.chen@example.com",
            "role": "machine_operator",
            "department": "production",
            "job_title": "CNC Machine Operator",
            "hire_date": date(2022, 1, 10),
            "salary_cents": 4_500_000,
        }
        patch.update(overrides)
        return staff_service.create_staff(patch=patch)
    return _make


@pytest.fixture
def make_order(db_session):
    def _make(lines=None, **overrides):
        patch = {
            "customer_name": "John Smith",
            "customer_company": "ABC Construction Ltd.",
            "tax_cents": 0,
        }
        patch.update(overrides)
        lines = lines or [{"name": "Steel Pipe", "quantity": 2, "unit_price_cents": 1000}]
        return orders_service.create_order(patch=patch, lines=lines, created_by="tester")
    return _make

