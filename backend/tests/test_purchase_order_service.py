# Overview: Pytest coverage for purchase order creation and restocking.

import pytest
from decimal import Decimal

from stockbook.entities import STATUS_AVAILABLE, Product
from stockbook.services import products_service, purchase_order_service
from stockbook.validation import (
    ConflictError,
    NotFoundError,
    PurchaseOrderDetails,
    ValidationError,
)

from conftest import find_supplier, imei_batch, quantity_batch, receive


class TestCreatePurchaseOrder:
    def test_imei_batch_of_three(self, seeded_store):
        po, products = receive(
            seeded_store, imei_batch('111', '222', '333', purchase_price='650.00'), po_number='PO-2001'
        )

        assert len(products) == 3
        assert {p.imei for p in products} == {'111', '222', '333'}
        assert all(p.purchase_order_id == po.id for p in products)
        assert all(p.status == STATUS_AVAILABLE and p.quantity == 1 for p in products)
        assert po.total_cost == Decimal('1950.00')
        assert po.product_ids == [p.id for p in products]
        assert po.supplier_name == 'Default Supplier'
        assert po.status == 'Ordered'

        listed = products_service.list_products(seeded_store)
        assert {p.id for p in listed} == {p.id for p in products}

    def test_mixed_batches_accumulate_cost(self, seeded_store):
        po, products = receive(
            seeded_store,
            imei_batch('111', purchase_price='700.00'),
            quantity_batch(20, purchase_price='2.50'),
        )
        assert len(products) == 2
        assert po.total_cost == Decimal('750.00')
        assert po.to_dict()['totalCost'] == 750.0

    def test_accepts_wire_dictionaries(self, seeded_store):
        supplier = find_supplier(seeded_store)
        po, products = purchase_order_service.create_purchase_order(
            seeded_store,
            {'supplierId': supplier.id, 'poNumber': 'PO-WIRE', 'status': 'Draft', 'notes': 'rush'},
            [{
                'productInfo': {
                    'productName': 'Galaxy Tab',
                    'category': 'Tablets',
                    'purchaseDate': '2026-03-02T10:00:00.000Z',
                    'purchasePrice': 300,
                    'sellingPrice': 450,
                },
                'details': {'trackingType': 'quantity', 'quantity': 4},
            }],
        )
        assert po.status == 'Draft'
        assert po.notes == 'rush'
        assert products[0].purchase_date.isoformat() == '2026-03-02'
        assert po.total_cost == Decimal('1200.00')

    def test_duplicate_po_number_is_conflict_and_validation(self, seeded_store):
        receive(seeded_store, quantity_batch(1), po_number='PO-DUP')
        with pytest.raises(ConflictError) as exc:
            receive(seeded_store, quantity_batch(1), po_number='PO-DUP')
        assert isinstance(exc.value, ValidationError)
        assert len(purchase_order_service.list_purchase_orders(seeded_store)) == 1

    def test_blank_po_number(self, seeded_store):
        supplier = find_supplier(seeded_store)
        with pytest.raises(ValidationError, match='PO Number'):
            purchase_order_service.create_purchase_order(
                seeded_store, PurchaseOrderDetails(supplier_id=supplier.id, po_number=''), [quantity_batch(1)]
            )

    def test_unknown_supplier(self, seeded_store):
        with pytest.raises(NotFoundError, match='Supplier'):
            purchase_order_service.create_purchase_order(
                seeded_store, PurchaseOrderDetails(supplier_id='ghost', po_number='PO-X'), [quantity_batch(1)]
            )

    def test_existing_imei_rejects_whole_order(self, seeded_store):
        receive(seeded_store, imei_batch('111'), po_number='PO-A')

        with pytest.raises(ConflictError):
            receive(seeded_store, quantity_batch(5), imei_batch('999', '111'), po_number='PO-B')

        with seeded_store.unit_of_work() as uow:
            assert uow.count(Product) == 1
            assert not uow.po_number_exists('PO-B')

    def test_duplicate_imei_across_batches(self, seeded_store):
        with pytest.raises(ConflictError):
            receive(seeded_store, imei_batch('111'), imei_batch('111'))
        assert products_service.list_products(seeded_store) == []

    def test_invalid_status(self, seeded_store):
        supplier = find_supplier(seeded_store)
        with pytest.raises(ValidationError, match='status'):
            purchase_order_service.create_purchase_order(
                seeded_store, {'supplierId': supplier.id, 'poNumber': 'PO-S', 'status': 'Shipped'}, []
            )


class TestPurchaseOrderQueries:
    def test_list_and_get(self, seeded_store):
        first, _ = receive(seeded_store, quantity_batch(1), po_number='PO-1')
        second, _ = receive(seeded_store, quantity_batch(1), po_number='PO-2')

        listed = purchase_order_service.list_purchase_orders(seeded_store)
        assert {po.po_number for po in listed} == {'PO-1', 'PO-2'}

        fetched = purchase_order_service.get_purchase_order(seeded_store, second.id)
        assert fetched.po_number == 'PO-2'
        assert fetched.product_ids == second.product_ids

    def test_get_missing(self, seeded_store):
        with pytest.raises(NotFoundError):
            purchase_order_service.get_purchase_order(seeded_store, 'missing')

    def test_received_product_cannot_be_deleted(self, seeded_store):
        _, (cable,) = receive(seeded_store, quantity_batch(3))
        with pytest.raises(ConflictError, match='purchase order'):
            products_service.delete_product(seeded_store, cable.id)
