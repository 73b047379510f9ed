# Overview: Service-layer operations for products outside of invoices and purchase orders.

"""
Products Service

Manual maintenance of the product catalog: listing, hand-entered stock,
full edits, deletion and archiving. Stock normally enters through purchase
orders and leaves through invoices; these operations are the operator's
escape hatch and apply the same tracking rules.

DELETE: a product that an invoice line or a purchase order points at is
part of a document's history and cannot be deleted (archive it instead).
"""
from __future__ import annotations

import logging

from stockbook.entities import PRODUCT_STATUSES, STATUS_AVAILABLE, Product, PurchaseOrder
from stockbook.validation import (
    TRACKING_IMEI,
    ConflictError,
    NotFoundError,
    ValidationError,
    require_text,
)
from .stock_ledger import DEFAULT_POLICY, StockPolicy, archive, check_new_imeis, require_category, unarchive

logger = logging.getLogger(__name__)

# Document links a full-replacement edit keeps when the client leaves them out
LINK_FIELDS = {"invoiceId": "invoice_id", "purchaseOrderId": "purchase_order_id"}


def list_products(store, status: str | None = None) -> list[Product]:
    if status is not None and status not in PRODUCT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(PRODUCT_STATUSES))}")
    with store.unit_of_work() as uow:
        products = uow.list(Product)
    if status is None:
        return products
    return [p for p in products if p.status == status]


def list_available_products(store) -> list[Product]:
    """Products that can go on an invoice right now."""
    return [p for p in list_products(store, STATUS_AVAILABLE) if p.quantity > 0]


def _check_links(uow, product: Product) -> None:
    require_category(uow, product.category)
    if product.purchase_order_id and uow.get(PurchaseOrder, product.purchase_order_id) is None:
        raise NotFoundError("purchase order", product.purchase_order_id)


def add_products(store, products, *, actor_id: str | None = None) -> list[Product]:
    """
    Insert hand-entered products; all or nothing.

    Raises:
        ValidationError: empty list, bad fields, unknown category
        ConflictError: an imei already exists or repeats in the request
    """
    if not isinstance(products, list) or not products:
        raise ValidationError("Request body must be a non-empty array of products.")
    parsed = [p if isinstance(p, Product) else Product.from_payload(p) for p in products]
    for product in parsed:
        product.check_invariants()

    def _op() -> list[Product]:
        with store.unit_of_work() as uow:
            imeis = [p.imei for p in parsed if p.tracking_type == TRACKING_IMEI]
            if imeis:
                check_new_imeis(uow, imeis)
            for product in parsed:
                _check_links(uow, product)
                uow.add(product)
            return parsed

    added = store.run(_op)
    logger.info("%d product(s) added manually (actor=%s)", len(added), actor_id)
    return added


def update_product(store, payload, *, actor_id: str | None = None) -> Product:
    """
    Replace a product with the submitted fields.

    invoiceId and purchaseOrderId are kept from the stored product when the
    payload does not mention them.
    """
    product = payload if isinstance(payload, Product) else Product.from_payload(payload, require_id=True)
    omitted_links = [] if isinstance(payload, Product) else [k for k in LINK_FIELDS if k not in payload]

    def _op() -> Product:
        with store.unit_of_work() as uow:
            current = uow.get(Product, product.id, for_update=True)
            if current is None:
                raise NotFoundError("product", product.id)
            for key in omitted_links:
                attr = LINK_FIELDS[key]
                setattr(product, attr, getattr(current, attr))
            if product.imei:
                check_new_imeis(uow, [product.imei], exclude_product_id=product.id)
            _check_links(uow, product)
            uow.save(product)
            return product

    updated = store.run(_op)
    logger.info("Product %s updated (actor=%s)", updated.id, actor_id)
    return updated


def delete_product(store, product_id: str, *, actor_id: str | None = None) -> None:
    product_id = require_text(product_id, "id")

    def _op() -> Product:
        with store.unit_of_work() as uow:
            product = uow.get(Product, product_id, for_update=True)
            if product is None:
                raise NotFoundError("product", product_id)
            invoice_numbers = uow.invoice_numbers_for_product(product.id)
            if invoice_numbers:
                raise ConflictError(
                    f"Product '{product.product_name}' is referenced by invoice(s) {', '.join(invoice_numbers)}",
                    details={"invoices": invoice_numbers},
                )
            if product.purchase_order_id:
                raise ConflictError(
                    f"Product '{product.product_name}' belongs to a purchase order",
                    details={"purchaseOrderId": product.purchase_order_id},
                )
            uow.delete(product)
            return product

    product = store.run(_op)
    logger.info("Product %s (%s) deleted (actor=%s)", product.id, product.product_name, actor_id)


def archive_product(store, product_id: str, *, actor_id: str | None = None) -> Product:
    product_id = require_text(product_id, "id")

    def _op() -> Product:
        with store.unit_of_work() as uow:
            product = uow.get(Product, product_id, for_update=True)
            if product is None:
                raise NotFoundError("product", product_id)
            archive(product)
            uow.save(product)
            return product

    product = store.run(_op)
    logger.info("Product %s archived (actor=%s)", product.id, actor_id)
    return product


def unarchive_product(
    store,
    product_id: str,
    *,
    policy: StockPolicy = DEFAULT_POLICY,
    actor_id: str | None = None,
) -> Product:
    product_id = require_text(product_id, "id")

    def _op() -> Product:
        with store.unit_of_work() as uow:
            product = uow.get(Product, product_id, for_update=True)
            if product is None:
                raise NotFoundError("product", product_id)
            unarchive(product, policy)
            uow.save(product)
            return product

    product = store.run(_op)
    logger.info("Product %s unarchived (actor=%s)", product.id, actor_id)
    return product
