# Overview: Pytest coverage for store initialization, status and unavailable-store errors.

import pytest

from stockbook import create_app
from stockbook.entities import Category
from stockbook.extensions import db
from stockbook.services import products_service, registry_service, setup_service
from stockbook.storage import SqlStore
from stockbook.validation import StoreUnavailableError


class TestInitializeStore:
    def test_seeds_defaults(self, store):
        result = setup_service.initialize_store(store)
        assert result['seeded'] == {'categories': 4, 'customers': 1, 'suppliers': 1}

        names = {c.name for c in registry_service.list_categories(store)}
        assert names == {'Smartphones', 'Laptops', 'Accessories', 'Tablets'}

        (customer,) = registry_service.list_customers(store)
        assert (customer.name, customer.phone) == ('Walk-in Customer', 'N/A')

        (supplier,) = registry_service.list_suppliers(store)
        assert supplier.to_dict() == {
            'id': supplier.id,
            'name': 'Default Supplier',
            'email': 'contact@default.com',
            'phone': '123-456-7890',
        }

    def test_is_idempotent(self, store):
        setup_service.initialize_store(store)
        again = setup_service.initialize_store(store)
        assert again['seeded'] == {'categories': 0, 'customers': 0, 'suppliers': 0}
        assert len(registry_service.list_categories(store)) == 4

    def test_only_empty_tables_are_seeded(self, store):
        registry_service.create_category(store, {'name': 'Cameras'})
        result = setup_service.initialize_store(store)
        assert result['seeded']['categories'] == 0
        assert [c.name for c in registry_service.list_categories(store)] == ['Cameras']

    def test_status_reports_counts(self, seeded_store):
        status = setup_service.store_status(seeded_store)
        assert status['initialized'] is True
        assert status['counts']['categories'] == 4
        assert status['counts']['products'] == 0


class TestUninitializedDatabase:
    """A database without tables answers StoreUnavailableError, never a driver error."""

    @pytest.fixture()
    def bare_app(self):
        app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
            'STORAGE_BACKEND': 'sql',
        })
        with app.app_context():
            yield app
            db.session.remove()

    def test_listing_raises_store_unavailable(self, bare_app):
        with pytest.raises(StoreUnavailableError) as exc:
            products_service.list_products(SqlStore())
        assert exc.value.code == 'DB_TABLE_NOT_FOUND'
        assert 'no such table' not in exc.value.message

    def test_status_reports_uninitialized(self, bare_app):
        status = setup_service.store_status(SqlStore())
        assert status == {'backend': 'sql', 'initialized': False, 'counts': {}}

    def test_setup_creates_schema(self, bare_app):
        store = SqlStore()
        setup_service.initialize_store(store)
        assert store.has_schema()
        assert len(registry_service.list_categories(store)) == 4


class TestSqlUnitOfWork:
    def test_back_to_back_units_of_work_commit(self, db_session):
        store = SqlStore()
        with store.unit_of_work() as uow:
            uow.add(Category(name='Drones'))
        with store.unit_of_work() as uow:
            assert uow.find_by_name(Category, 'Drones') is not None
            uow.add(Category(name='Cameras'))
        assert [c.name for c in registry_service.list_categories(store)] == ['Cameras', 'Drones']

    def test_failed_unit_of_work_rolls_back(self, db_session):
        store = SqlStore()
        with pytest.raises(RuntimeError):
            with store.unit_of_work() as uow:
                uow.add(Category(name='Drones'))
                raise RuntimeError('boom')
        assert registry_service.list_categories(store) == []
