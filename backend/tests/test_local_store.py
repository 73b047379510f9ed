# Overview: Pytest coverage for the local (JSON file / in-memory) store adapter.

import json
import threading

import pytest

from stockbook.entities import Category, Customer, Product
from stockbook.services import invoice_service, registry_service, setup_service
from stockbook.storage import LocalStore, build_store
from stockbook.validation import ConflictError, InvoiceLine

from conftest import find_customer, quantity_batch, receive


@pytest.fixture()
def store_path(tmp_path):
    return str(tmp_path / 'stockbook.json')


class TestLocalStore:
    def test_failed_unit_of_work_leaves_state_untouched(self):
        store = LocalStore()
        setup_service.initialize_store(store)

        with pytest.raises(RuntimeError):
            with store.unit_of_work() as uow:
                uow.add(Category(name='Drones'))
                raise RuntimeError('boom')

        assert 'Drones' not in [c.name for c in registry_service.list_categories(store)]

    def test_entities_are_detached_copies(self):
        store = LocalStore()
        setup_service.initialize_store(store)
        with store.unit_of_work() as uow:
            customer = uow.list(Customer)[0]
        customer.name = 'Changed'
        assert find_customer(store).name == 'Walk-in Customer'

    def test_unique_keys_are_enforced(self):
        store = LocalStore()
        setup_service.initialize_store(store)
        with pytest.raises(ConflictError):
            with store.unit_of_work() as uow:
                uow.add(Category(name='Laptops'))

    def test_state_persists_to_file(self, store_path):
        store = LocalStore(store_path)
        setup_service.initialize_store(store)
        customer = find_customer(store)
        _, (cable,) = receive(store, quantity_batch(10))
        invoice = invoice_service.create_invoice(store, customer.id, [InvoiceLine(cable.id, 4)])

        with open(store_path, encoding='utf-8') as fh:
            raw = json.load(fh)
        assert set(raw) >= {'products', 'invoices', 'purchase-orders', 'sequences'}
        assert raw['invoices'][invoice.id]['invoiceNumber'] == invoice.invoice_number

        reopened = LocalStore(store_path)
        with reopened.unit_of_work() as uow:
            assert uow.get(Product, cable.id).quantity == 6
        second = invoice_service.create_invoice(reopened, customer.id, [InvoiceLine(cable.id, 1)])
        assert second.invoice_number.endswith('-0002')

    def test_reads_do_not_rewrite_file(self, store_path, monkeypatch):
        store = LocalStore(store_path)
        setup_service.initialize_store(store)
        writes = []
        monkeypatch.setattr(store, '_write', lambda: writes.append(1))

        registry_service.list_categories(store)
        setup_service.store_status(store)
        with store.unit_of_work() as uow:
            uow.list(Product)
        assert writes == []

        registry_service.create_category(store, {'name': 'Drones'})
        assert writes == [1]

    def test_drop_schema_removes_file(self, store_path):
        store = LocalStore(store_path)
        setup_service.initialize_store(store)
        store.drop_schema()
        assert not store.has_schema()
        assert setup_service.store_status(store)['initialized'] is False

    def test_concurrent_sales_never_oversell(self):
        store = LocalStore()
        setup_service.initialize_store(store)
        customer = find_customer(store)
        _, (cable,) = receive(store, quantity_batch(10))

        results = []

        def worker():
            try:
                invoice_service.create_invoice(store, customer.id, [InvoiceLine(cable.id, 3)])
                results.append('ok')
            except Exception as exc:
                results.append(type(exc).__name__)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count('ok') == 3
        assert results.count('InsufficientStockError') == 2
        with store.unit_of_work() as uow:
            assert uow.get(Product, cable.id).quantity == 1
        numbers = [i.invoice_number for i in invoice_service.list_invoices(store)]
        assert len(set(numbers)) == 3


class TestBuildStore:
    def test_selects_adapter(self, store_path):
        assert build_store({'STORAGE_BACKEND': 'sql'}).backend == 'sql'
        local = build_store({'STORAGE_BACKEND': 'local', 'LOCAL_STORE_PATH': store_path})
        assert local.backend == 'local'
        assert local.path == store_path

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValueError):
            build_store({'STORAGE_BACKEND': 'mongo'})
