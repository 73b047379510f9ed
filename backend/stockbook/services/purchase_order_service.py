# Overview: Service-layer operations for supplier purchase orders; restocks through the stock ledger.

"""
Purchase Order Service

WHY: A purchase order is the only way stock enters the system in bulk. The
order header and every product it generates commit together; a duplicate
imei or PO number anywhere rejects the whole order.

COST: totalCost = sum(purchasePrice * units) over every generated product,
where an imei batch contributes one unit per imei.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from stockbook.entities import Product, PurchaseOrder, Supplier
from stockbook.time_utils import utcnow
from stockbook.validation import (
    CENT,
    ConflictError,
    NotFoundError,
    ValidationError,
    parse_po_details,
    parse_product_batch,
)
from .stock_ledger import apply_restock

logger = logging.getLogger(__name__)


def create_purchase_order(
    store,
    po_details,
    batches,
    *,
    actor_id: str | None = None,
    issue_date: datetime | None = None,
) -> tuple[PurchaseOrder, list[Product]]:
    """
    Record a purchase order and create the products it delivers.

    Args:
        po_details: PurchaseOrderDetails or {"supplierId", "poNumber", "status", "notes"}
        batches: ProductBatch objects or {"productInfo", "details"} dicts

    Returns:
        (purchase_order, new_products)

    Raises:
        NotFoundError: unknown supplier
        ValidationError: blank poNumber, bad batch data, unknown category
        ConflictError: poNumber or an imei already exists (or repeats)
    """
    details = parse_po_details(po_details)
    batches = [parse_product_batch(b) for b in (batches or [])]
    if not details.po_number:
        raise ValidationError("PO Number is required.")

    def _op() -> tuple[PurchaseOrder, list[Product]]:
        with store.unit_of_work() as uow:
            supplier = uow.get(Supplier, details.supplier_id)
            if supplier is None:
                raise NotFoundError("supplier", details.supplier_id)
            if uow.po_number_exists(details.po_number):
                raise ConflictError(
                    f"PO number '{details.po_number}' already exists",
                    details={"poNumber": details.po_number},
                )

            po = PurchaseOrder(
                po_number=details.po_number,
                supplier_id=supplier.id,
                supplier_name=supplier.name,
                issue_date=issue_date or utcnow(),
                status=details.status,
                notes=details.notes,
            )
            # Header first: generated products reference it.
            uow.add(po)

            new_products: list[Product] = []
            total_cost = Decimal("0")
            for batch in batches:
                created = apply_restock(uow, batch, po.id)
                for product in created:
                    total_cost += product.purchase_price * product.quantity
                new_products.extend(created)

            po.total_cost = total_cost.quantize(CENT)
            po.product_ids = [p.id for p in new_products]
            uow.save(po)
            return po, new_products

    po, new_products = store.run(_op)
    logger.info(
        "Purchase order %s from %s: %d product(s), total cost %s (actor=%s)",
        po.po_number,
        po.supplier_name,
        len(new_products),
        po.total_cost,
        actor_id,
    )
    return po, new_products


def get_purchase_order(store, purchase_order_id: str) -> PurchaseOrder:
    with store.unit_of_work() as uow:
        po = uow.get(PurchaseOrder, purchase_order_id)
    if po is None:
        raise NotFoundError("purchase order", purchase_order_id)
    return po


def list_purchase_orders(store) -> list[PurchaseOrder]:
    """Newest first."""
    with store.unit_of_work() as uow:
        return uow.list(PurchaseOrder)
