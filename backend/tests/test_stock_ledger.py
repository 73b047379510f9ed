# Overview: Pytest coverage for stock ledger transitions.

"""
Stock Ledger Tests

Sale, restock and archive transitions on single products, plus restock
validation against a live unit of work.
"""

from datetime import date
from decimal import Decimal

import pytest
from stockbook.entities import STATUS_ARCHIVED, STATUS_AVAILABLE, STATUS_SOLD, Product
from stockbook.services.stock_ledger import (
    StockPolicy,
    apply_restock,
    apply_sale,
    archive,
    unarchive,
)
from stockbook.validation import (
    ConflictError,
    ImeiDetails,
    InsufficientStockError,
    ProductBatch,
    QuantityDetails,
    ValidationError,
)

from conftest import imei_batch, product_info, quantity_batch


def make_product(**overrides) -> Product:
    fields = dict(
        product_name='USB Cable',
        category='Accessories',
        purchase_date=date(2026, 3, 1),
        purchase_price=Decimal('2.50'),
        selling_price=Decimal('9.99'),
        tracking_type='quantity',
        quantity=10,
    )
    fields.update(overrides)
    return Product(**fields)


def make_phone(**overrides) -> Product:
    fields = dict(
        product_name='iPhone 15',
        category='Smartphones',
        tracking_type='imei',
        imei='356789012345678',
        quantity=1,
        purchase_price=Decimal('700.00'),
        selling_price=Decimal('999.00'),
    )
    fields.update(overrides)
    return make_product(**fields)


class TestApplySale:
    def test_imei_sale_marks_sold_and_records_buyer(self):
        phone = make_phone()
        apply_sale(phone, 1, 'Alice', 'inv-1')
        assert phone.status == STATUS_SOLD
        assert phone.customer_name == 'Alice'
        assert phone.invoice_id == 'inv-1'
        assert phone.quantity == 1

    def test_imei_sale_of_more_than_one_unit_is_rejected(self):
        phone = make_phone()
        with pytest.raises(ValidationError, match='exactly 1 unit'):
            apply_sale(phone, 2, 'Alice', 'inv-1')
        assert phone.status == STATUS_AVAILABLE
        assert phone.invoice_id is None

    def test_partial_quantity_sale_stays_available(self):
        cable = make_product()
        apply_sale(cable, 4, 'Bob', 'inv-1')
        assert cable.quantity == 6
        assert cable.status == STATUS_AVAILABLE
        assert cable.invoice_id == 'inv-1'
        assert cable.customer_name is None

    def test_sell_out_marks_sold(self):
        cable = make_product(quantity=6)
        apply_sale(cable, 6, 'Bob', 'inv-2')
        assert cable.quantity == 0
        assert cable.status == STATUS_SOLD
        assert cable.customer_name == 'Bob'

    def test_sell_out_buyer_recording_can_be_disabled(self):
        cable = make_product(quantity=3)
        apply_sale(cable, 3, 'Bob', 'inv-2', StockPolicy(record_buyer_on_sell_out=False))
        assert cable.status == STATUS_SOLD
        assert cable.customer_name is None
        assert cable.invoice_id == 'inv-2'

    def test_oversell_leaves_product_untouched(self):
        cable = make_product(quantity=3)
        with pytest.raises(InsufficientStockError) as exc:
            apply_sale(cable, 5, 'Bob', 'inv-3')
        assert cable.quantity == 3
        assert cable.status == STATUS_AVAILABLE
        assert cable.invoice_id is None
        assert 'Insufficient stock for USB Cable' in exc.value.message
        assert exc.value.details['shortfall'] == 2

    def test_sold_product_has_no_sellable_stock(self):
        phone = make_phone(status=STATUS_SOLD)
        with pytest.raises(InsufficientStockError) as exc:
            apply_sale(phone, 1, 'Carol', 'inv-4')
        assert exc.value.available == 0

    def test_archived_product_cannot_be_sold(self):
        cable = make_product(status=STATUS_ARCHIVED)
        with pytest.raises(InsufficientStockError):
            apply_sale(cable, 1, 'Carol', 'inv-4')

    def test_zero_quantity_request_is_invalid(self):
        with pytest.raises(ValidationError):
            apply_sale(make_product(), 0, 'Bob', 'inv-1')


class TestArchive:
    def test_archive_then_unarchive_clears_buyer(self):
        phone = make_phone(status=STATUS_SOLD, customer_name='Alice', invoice_id='inv-1')
        archive(phone)
        assert phone.status == STATUS_ARCHIVED
        unarchive(phone)
        assert phone.status == STATUS_AVAILABLE
        assert phone.customer_name is None
        assert phone.invoice_id == 'inv-1'

    def test_unarchive_can_keep_buyer(self):
        phone = make_phone(status=STATUS_ARCHIVED, customer_name='Alice')
        unarchive(phone, StockPolicy(clear_buyer_on_unarchive=False))
        assert phone.status == STATUS_AVAILABLE
        assert phone.customer_name == 'Alice'

    def test_unarchive_requires_archived_product(self):
        with pytest.raises(ValidationError):
            unarchive(make_product())


class TestApplyRestock:
    def test_imei_batch_creates_one_product_per_imei(self, seeded_store):
        with seeded_store.unit_of_work() as uow:
            products = apply_restock(uow, imei_batch('111', '222', '333'), None)

        assert [p.imei for p in products] == ['111', '222', '333']
        assert all(p.quantity == 1 and p.tracking_type == 'imei' for p in products)
        assert all(p.status == STATUS_AVAILABLE for p in products)
        assert len({p.id for p in products}) == 3

    def test_quantity_batch_creates_single_product(self, seeded_store):
        with seeded_store.unit_of_work() as uow:
            products = apply_restock(uow, quantity_batch(25), None)

        assert len(products) == 1
        assert products[0].quantity == 25
        assert products[0].imei is None

    def test_repeated_imei_in_batch_is_rejected(self, seeded_store):
        with pytest.raises(ConflictError):
            with seeded_store.unit_of_work() as uow:
                apply_restock(uow, imei_batch('111', '111'), None)

    def test_existing_imei_is_rejected(self, seeded_store):
        with seeded_store.unit_of_work() as uow:
            apply_restock(uow, imei_batch('111'), None)

        with pytest.raises(ValidationError):
            with seeded_store.unit_of_work() as uow:
                apply_restock(uow, imei_batch('222', '111'), None)

        with seeded_store.unit_of_work() as uow:
            assert uow.existing_imeis(['222']) == set()

    def test_unknown_category_is_rejected(self, seeded_store):
        with pytest.raises(ValidationError, match='Category'):
            with seeded_store.unit_of_work() as uow:
                apply_restock(uow, quantity_batch(5, category='Drones'), None)

    def test_empty_or_non_positive_details_are_rejected(self, seeded_store):
        with seeded_store.unit_of_work() as uow:
            with pytest.raises(ValidationError):
                apply_restock(uow, ProductBatch(product_info(), ImeiDetails(imeis=())), None)
            with pytest.raises(ValidationError):
                apply_restock(uow, ProductBatch(product_info(), QuantityDetails(quantity=0)), None)


class TestStockPolicyConfig:
    def test_defaults_when_unset(self):
        assert StockPolicy.from_config({}) == StockPolicy()

    @pytest.mark.parametrize('raw, expected', [
        ('false', False), ('0', False), ('no', False), ('TRUE', True), ('on', True), (False, False), (True, True),
    ])
    def test_string_and_bool_overrides(self, raw, expected):
        policy = StockPolicy.from_config({'RECORD_BUYER_ON_SELL_OUT': raw, 'CLEAR_BUYER_ON_UNARCHIVE': raw})
        assert policy.record_buyer_on_sell_out is expected
        assert policy.clear_buyer_on_unarchive is expected
