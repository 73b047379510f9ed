# Overview: Pytest coverage for category, customer and supplier registries.

import pytest

from stockbook.entities import Product
from stockbook.services import invoice_service, registry_service
from stockbook.validation import ConflictError, InvoiceLine, NotFoundError, ValidationError

from conftest import find_customer, find_supplier, imei_batch, quantity_batch, receive


class TestCategories:
    def test_create_and_list(self, seeded_store):
        created = registry_service.create_category(seeded_store, {'name': 'Drones'})
        names = [c.name for c in registry_service.list_categories(seeded_store)]
        assert 'Drones' in names
        assert names == sorted(names)
        assert created.id

    def test_create_duplicate_name(self, seeded_store):
        with pytest.raises(ConflictError):
            registry_service.create_category(seeded_store, {'name': 'Laptops'})

    def test_save_returns_existing_category(self, seeded_store):
        existing = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Tablets')
        saved, created = registry_service.save_category(seeded_store, {'name': 'Tablets'})
        assert created is False
        assert saved.id == existing.id

        saved, created = registry_service.save_category(seeded_store, {'name': 'Wearables'})
        assert created is True
        assert saved.name == 'Wearables'

    def test_save_with_id_renames_category(self, seeded_store):
        _, (phone,) = receive(seeded_store, imei_batch('111'))
        smartphones = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Smartphones')

        saved, created = registry_service.save_category(seeded_store, {'id': smartphones.id, 'name': 'Phones'})

        assert created is False
        assert (saved.id, saved.name) == (smartphones.id, 'Phones')
        names = [c.name for c in registry_service.list_categories(seeded_store)]
        assert 'Phones' in names and 'Smartphones' not in names
        with seeded_store.unit_of_work() as uow:
            assert uow.get(Product, phone.id).category == 'Phones'

    def test_save_with_id_onto_taken_name(self, seeded_store):
        laptops = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Laptops')
        with pytest.raises(ConflictError):
            registry_service.save_category(seeded_store, {'id': laptops.id, 'name': 'Tablets'})

    def test_blank_name(self, seeded_store):
        with pytest.raises(ValidationError):
            registry_service.save_category(seeded_store, {'name': '  '})

    def test_rename_carries_onto_products(self, seeded_store):
        _, (cable,) = receive(seeded_store, quantity_batch(5))
        accessories = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Accessories')

        registry_service.update_category(seeded_store, {'id': accessories.id, 'name': 'Cables'})

        with seeded_store.unit_of_work() as uow:
            assert uow.get(Product, cable.id).category == 'Cables'
            assert uow.products_in_category('Accessories') == 0

    def test_rename_onto_existing_name(self, seeded_store):
        laptops = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Laptops')
        with pytest.raises(ConflictError):
            registry_service.update_category(seeded_store, {'id': laptops.id, 'name': 'Tablets'})

    def test_delete_in_use_category(self, seeded_store):
        receive(seeded_store, quantity_batch(5))
        accessories = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Accessories')
        with pytest.raises(ConflictError, match='in use'):
            registry_service.delete_category(seeded_store, accessories.id)

    def test_delete_unused_category(self, seeded_store):
        tablets = next(c for c in registry_service.list_categories(seeded_store) if c.name == 'Tablets')
        registry_service.delete_category(seeded_store, tablets.id)
        assert 'Tablets' not in [c.name for c in registry_service.list_categories(seeded_store)]

    def test_delete_missing_category(self, seeded_store):
        with pytest.raises(NotFoundError):
            registry_service.delete_category(seeded_store, 'missing')


class TestCustomers:
    def test_create_defaults_phone(self, seeded_store):
        customer = registry_service.create_customer(seeded_store, {'name': 'Frank'})
        assert customer.phone == 'N/A'

    def test_names_are_not_unique(self, seeded_store):
        registry_service.create_customer(seeded_store, {'name': 'Grace', 'phone': '1'})
        registry_service.create_customer(seeded_store, {'name': 'Grace', 'phone': '2'})
        graces = [c for c in registry_service.list_customers(seeded_store) if c.name == 'Grace']
        assert len(graces) == 2

    def test_name_required(self, seeded_store):
        with pytest.raises(ValidationError, match='name'):
            registry_service.create_customer(seeded_store, {'phone': '555'})

    def test_save_updates_known_id(self, seeded_store):
        customer, created = registry_service.save_customer(seeded_store, {'name': 'Heidi', 'phone': '555'})
        assert created is True

        updated, created = registry_service.save_customer(
            seeded_store, {'id': customer.id, 'name': 'Heidi K', 'phone': '556'}
        )
        assert created is False
        assert updated.id == customer.id
        assert updated.name == 'Heidi K'

    def test_update_missing_customer(self, seeded_store):
        with pytest.raises(NotFoundError):
            registry_service.update_customer(seeded_store, {'id': 'missing', 'name': 'X'})

    def test_delete_blocked_by_invoice(self, seeded_store):
        customer = find_customer(seeded_store)
        _, (cable,) = receive(seeded_store, quantity_batch(5))
        invoice_service.create_invoice(seeded_store, customer.id, [InvoiceLine(cable.id, 1)])

        with pytest.raises(ConflictError, match='invoice'):
            registry_service.delete_customer(seeded_store, customer.id)

    def test_delete_unreferenced_customer(self, seeded_store):
        customer = registry_service.create_customer(seeded_store, {'name': 'Ivan'})
        registry_service.delete_customer(seeded_store, customer.id)
        assert customer.id not in [c.id for c in registry_service.list_customers(seeded_store)]


class TestSuppliers:
    def test_create_duplicate_name(self, seeded_store):
        with pytest.raises(ConflictError):
            registry_service.create_supplier(seeded_store, {'name': 'Default Supplier'})

    def test_save_by_name_updates_contact(self, seeded_store):
        existing = find_supplier(seeded_store)
        saved, created = registry_service.save_supplier(
            seeded_store, {'name': 'Default Supplier', 'email': 'sales@default.com', 'phone': '999'}
        )
        assert created is False
        assert saved.id == existing.id
        assert find_supplier(seeded_store).email == 'sales@default.com'

    def test_save_by_id_renames(self, seeded_store):
        existing = find_supplier(seeded_store)
        saved, created = registry_service.save_supplier(
            seeded_store, {'id': existing.id, 'name': 'Acme Wholesale'}
        )
        assert created is False
        assert saved.name == 'Acme Wholesale'
        assert find_supplier(seeded_store, 'Default Supplier') is None

    def test_save_new_supplier(self, seeded_store):
        saved, created = registry_service.save_supplier(seeded_store, {'name': 'Parts Co', 'email': 'p@parts.co'})
        assert created is True
        assert len(registry_service.list_suppliers(seeded_store)) == 2

    def test_update_supplier(self, seeded_store):
        existing = find_supplier(seeded_store)
        updated = registry_service.update_supplier(seeded_store, {'id': existing.id, 'phone': '000'})
        assert updated.phone == '000'
        assert updated.name == 'Default Supplier'

    def test_delete_blocked_by_purchase_order(self, seeded_store):
        supplier = find_supplier(seeded_store)
        receive(seeded_store, quantity_batch(1))
        with pytest.raises(ConflictError, match='purchase order'):
            registry_service.delete_supplier(seeded_store, supplier.id)

    def test_delete_unreferenced_supplier(self, seeded_store):
        supplier = registry_service.create_supplier(seeded_store, {'name': 'Temp Supplier'})
        registry_service.delete_supplier(seeded_store, supplier.id)
        assert 'Temp Supplier' not in [s.name for s in registry_service.list_suppliers(seeded_store)]
