# Overview: Pytest coverage for the inventory and sales summary.

from stockbook.services import invoice_service, products_service, reporting_service
from stockbook.validation import InvoiceLine

from conftest import find_customer, imei_batch, quantity_batch, receive


class TestSummary:
    def test_empty_store(self, seeded_store):
        result = reporting_service.summary(seeded_store)
        assert result['totalStock'] == 0
        assert result['inventoryValue'] == 0.0
        assert result['grossProfit'] == 0.0
        assert result['invoiceCount'] == 0
        assert result['generatedAt'].endswith('Z')

    def test_figures_after_sales(self, seeded_store):
        customer = find_customer(seeded_store)
        _, (phone_a, phone_b, cable) = receive(seeded_store, imei_batch('111', '222'), quantity_batch(10))
        invoice_service.create_invoice(
            seeded_store, customer.id, [{'productId': phone_a.id, 'quantity': 1, 'sellingPrice': 949.5}]
        )
        invoice_service.create_invoice(seeded_store, customer.id, [InvoiceLine(cable.id, 4)])

        result = reporting_service.summary(seeded_store)

        assert result['totalStock'] == 7
        assert result['inventoryValue'] == 715.0
        assert result['totalSales'] == 989.46
        assert result['costOfGoodsSold'] == 710.0
        assert result['grossProfit'] == 279.46
        assert result['invoiceCount'] == 2

    def test_archived_stock_is_not_counted(self, seeded_store):
        _, (phone, cable) = receive(seeded_store, imei_batch('111'), quantity_batch(4))
        products_service.archive_product(seeded_store, cable.id)

        result = reporting_service.summary(seeded_store)
        assert result['totalStock'] == 1
        assert result['inventoryValue'] == 700.0
