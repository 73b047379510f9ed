"""
Pytest fixtures for Stockbook backend tests.

Provides the app on in-memory SQLite, a clean database per test, and a
`store` fixture that runs every service test against both storage adapters.
"""

from datetime import date
from decimal import Decimal

import pytest
from stockbook import create_app
from stockbook.entities import Customer, Supplier
from stockbook.extensions import db
from stockbook.services import purchase_order_service, setup_service
from stockbook.storage import LocalStore, SqlStore
from stockbook.validation import ImeiDetails, ProductBatch, ProductInfo, PurchaseOrderDetails, QuantityDetails


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_BACKEND': 'sql',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
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


@pytest.fixture(scope='function', params=['sql', 'local'])
def store(request, db_session):
    """Each service test runs once per storage adapter."""
    if request.param == 'sql':
        return SqlStore()
    return LocalStore()


@pytest.fixture(scope='function')
def seeded_store(store):
    """Store with the default categories, walk-in customer and supplier."""
    setup_service.initialize_store(store)
    return store


def find_customer(store, name='Walk-in Customer') -> Customer:
    with store.unit_of_work() as uow:
        return next(c for c in uow.list(Customer) if c.name == name)


def find_supplier(store, name='Default Supplier') -> Supplier:
    with store.unit_of_work() as uow:
        return uow.find_by_name(Supplier, name)


def product_info(name='iPhone 15', category='Smartphones', purchase_price='700.00', selling_price='999.00'):
    return ProductInfo(
        product_name=name,
        category=category,
        purchase_date=date(2026, 3, 1),
        purchase_price=Decimal(purchase_price),
        selling_price=Decimal(selling_price),
    )


def imei_batch(*imeis, **info) -> ProductBatch:
    return ProductBatch(product_info=product_info(**info), details=ImeiDetails(imeis=tuple(imeis)))


def quantity_batch(quantity, **info) -> ProductBatch:
    info.setdefault('name', 'USB Cable')
    info.setdefault('category', 'Accessories')
    info.setdefault('purchase_price', '2.50')
    info.setdefault('selling_price', '9.99')
    return ProductBatch(product_info=product_info(**info), details=QuantityDetails(quantity=quantity))


def receive(store, *batches, po_number='PO-1001'):
    """Restock through a purchase order from the default supplier."""
    supplier = find_supplier(store)
    details = PurchaseOrderDetails(supplier_id=supplier.id, po_number=po_number)
    return purchase_order_service.create_purchase_order(store, details, list(batches))
