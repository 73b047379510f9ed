# Overview: Service-layer operations for customer invoices; sells stock through the stock ledger.

"""
Invoice Service

WHY: An invoice, its line items and the stock it consumes must change
together. create_invoice does all three in one unit of work: if any line
cannot be covered nothing is written and no invoice number is used up.

AUDIT TRAIL: customer name, product names, imeis and unit prices are copied
onto the invoice at issue time. Only the customer binding may change later
(update_invoice_customer).

NUMBERING: INV-<year>-<seq:04d>, seq from the store's INVOICE sequence.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from stockbook.entities import Customer, Invoice, InvoiceItem, Product, new_id
from stockbook.time_utils import utcnow
from stockbook.validation import (
    CENT,
    InvoiceLine,
    NotFoundError,
    ValidationError,
    optional_text,
    parse_invoice_line,
    require_text,
)
from .stock_ledger import DEFAULT_POLICY, StockPolicy, apply_sale

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE = "INVOICE"


def format_invoice_number(year: int, seq: int) -> str:
    return f"INV-{year}-{seq:04d}"


def create_invoice(
    store,
    customer_id: str,
    items,
    *,
    actor_id: str | None = None,
    policy: StockPolicy = DEFAULT_POLICY,
    issue_date: datetime | None = None,
) -> Invoice:
    """
    Issue an invoice and take its items out of stock.

    Args:
        store: InventoryStore
        customer_id: Customer being invoiced
        items: InvoiceLine objects or {"productId", "quantity", "sellingPrice"} dicts.
            sellingPrice is the unit price charged; when omitted the product's
            current selling price is used.
        actor_id: Operator id for the log trail
        policy: StockPolicy for buyer attribution
        issue_date: Override the creation timestamp (imports/tests)

    Raises:
        ValidationError: empty or malformed items, or an imei line for more than 1 unit
        NotFoundError: unknown customer or product ids
        InsufficientStockError: a line exceeds what its product has on hand
    """
    customer_id = require_text(customer_id, "customerId")
    if not items:
        raise ValidationError("customerId and a non-empty array of items are required.")
    lines: list[InvoiceLine] = [parse_invoice_line(i) for i in items]

    def _op() -> Invoice:
        with store.unit_of_work() as uow:
            customer = uow.get(Customer, customer_id)
            if customer is None:
                raise NotFoundError("customer", customer_id)

            product_ids = list(dict.fromkeys(line.product_id for line in lines))
            products = uow.get_many(Product, product_ids, for_update=True)
            missing = [pid for pid in product_ids if pid not in products]
            if missing:
                raise NotFoundError("product", missing)

            invoice_id = new_id()
            invoice_items: list[InvoiceItem] = []
            # Repeated lines for one product draw down the same staged entity.
            for line in lines:
                product = products[line.product_id]
                unit_price = line.selling_price if line.selling_price is not None else product.selling_price
                apply_sale(product, line.quantity, customer.name, invoice_id, policy)
                invoice_items.append(
                    InvoiceItem(
                        product_id=product.id,
                        product_name=product.product_name,
                        imei=product.imei,
                        quantity=line.quantity,
                        selling_price=unit_price,
                    )
                )

            total = sum((item.subtotal for item in invoice_items), Decimal("0")).quantize(CENT)
            issued_at = issue_date or utcnow()
            seq = uow.next_sequence(INVOICE_SEQUENCE, floor=uow.count(Invoice))

            invoice = Invoice(
                id=invoice_id,
                invoice_number=format_invoice_number(issued_at.year, seq),
                customer_id=customer.id,
                customer_name=customer.name,
                issue_date=issued_at,
                items=invoice_items,
                total_amount=total,
            )
            uow.add(invoice)
            for product in products.values():
                uow.save(product)
            return invoice

    invoice = store.run(_op)
    logger.info(
        "Invoice %s issued to %s: %d item(s), total %s (actor=%s)",
        invoice.invoice_number,
        invoice.customer_name,
        len(invoice.items),
        invoice.total_amount,
        actor_id,
    )
    return invoice


def update_invoice_customer(
    store,
    invoice_id: str,
    *,
    customer_id: str | None = None,
    customer_name: str | None = None,
    actor_id: str | None = None,
) -> Invoice:
    """
    Rebind who an invoice is attributed to.

    With customer_id the name is taken from that customer. With only
    customer_name the invoice becomes a free-text attribution (no customer id).
    Items, totals and stock are never touched.
    """
    invoice_id = require_text(invoice_id, "id")
    customer_id = optional_text(customer_id)
    customer_name = optional_text(customer_name)
    if customer_id is None and customer_name is None:
        raise ValidationError("customerId or customerName is required")

    def _op() -> Invoice:
        with store.unit_of_work() as uow:
            invoice = uow.get(Invoice, invoice_id)
            if invoice is None:
                raise NotFoundError("invoice", invoice_id)
            if customer_id is not None:
                customer = uow.get(Customer, customer_id)
                if customer is None:
                    raise NotFoundError("customer", customer_id)
                invoice.customer_id = customer.id
                invoice.customer_name = customer.name
            else:
                invoice.customer_id = None
                invoice.customer_name = customer_name
            uow.save(invoice)
            return invoice

    invoice = store.run(_op)
    logger.info(
        "Invoice %s rebound to %s (actor=%s)", invoice.invoice_number, invoice.customer_name, actor_id
    )
    return invoice


def get_invoice(store, invoice_id: str) -> Invoice:
    with store.unit_of_work() as uow:
        invoice = uow.get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("invoice", invoice_id)
    return invoice


def list_invoices(store) -> list[Invoice]:
    """Newest first."""
    with store.unit_of_work() as uow:
        return uow.list(Invoice)
