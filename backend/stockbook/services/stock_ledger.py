# Overview: Stock state transitions for products (restock, sale, archive).

"""
Stock Ledger

Every change to a product's quantity or status goes through this module, so
the invoice and purchase-order services share one definition of what a sale
or a restock does.

TRACKING TYPES:
- imei: one product per physical unit, quantity always 1, imei unique.
- quantity: one product per bulk lot, quantity counts down to 0.

Functions here mutate the entities they are given (or add new ones through
the unit of work); committing is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockbook.config import as_flag
from stockbook.entities import (
    STATUS_ARCHIVED,
    STATUS_AVAILABLE,
    STATUS_SOLD,
    Category,
    Product,
)
from stockbook.validation import (
    TRACKING_IMEI,
    TRACKING_QUANTITY,
    ConflictError,
    ImeiDetails,
    InsufficientStockError,
    ProductBatch,
    QuantityDetails,
    ValidationError,
)


@dataclass(frozen=True)
class StockPolicy:
    """
    Switches for the two attribution behaviors that differ between
    deployments.

    record_buyer_on_sell_out: a quantity sale that empties the lot records the
        buyer's name on the product (imei sales always do).
    clear_buyer_on_unarchive: unarchiving forgets the last buyer's name.
        invoiceId is always kept.
    """
    record_buyer_on_sell_out: bool = True
    clear_buyer_on_unarchive: bool = True

    @classmethod
    def from_config(cls, config) -> "StockPolicy":
        return cls(
            record_buyer_on_sell_out=as_flag(config.get("RECORD_BUYER_ON_SELL_OUT"), True),
            clear_buyer_on_unarchive=as_flag(config.get("CLEAR_BUYER_ON_UNARCHIVE"), True),
        )


DEFAULT_POLICY = StockPolicy()


def require_category(uow, category_name: str) -> None:
    if uow.find_by_name(Category, category_name) is None:
        raise ValidationError(
            f"Category '{category_name}' does not exist",
            details={"category": category_name},
        )


def check_new_imeis(uow, imeis, *, exclude_product_id: str | None = None) -> None:
    """Reject blank, repeated or already-registered imeis."""
    seen: set[str] = set()
    repeated: list[str] = []
    for imei in imeis:
        if not imei or not str(imei).strip():
            raise ValidationError("imei cannot be blank")
        if imei in seen and imei not in repeated:
            repeated.append(imei)
        seen.add(imei)
    if repeated:
        raise ConflictError(
            f"Duplicate IMEI in request: {', '.join(repeated)}",
            details={"imeis": repeated},
        )

    existing = uow.existing_imeis(seen, exclude_product_id=exclude_product_id)
    if existing:
        ordered = sorted(existing)
        raise ConflictError(
            f"IMEI already exists: {', '.join(ordered)}",
            details={"imeis": ordered},
        )


def apply_restock(uow, batch: ProductBatch, purchase_order_id: str | None) -> list[Product]:
    """
    Materialize one restock batch as new Available products.

    imei batch -> one product per imei (quantity 1).
    quantity batch -> one product holding the whole quantity.
    """
    info = batch.product_info
    details = batch.details
    require_category(uow, info.category)

    def _product(tracking_type: str, quantity: int, imei: str | None) -> Product:
        return Product(
            product_name=info.product_name,
            category=info.category,
            purchase_date=info.purchase_date,
            purchase_price=info.purchase_price,
            selling_price=info.selling_price,
            notes=info.notes,
            tracking_type=tracking_type,
            quantity=quantity,
            imei=imei,
            status=STATUS_AVAILABLE,
            purchase_order_id=purchase_order_id,
        )

    if isinstance(details, ImeiDetails):
        if not details.imeis:
            raise ValidationError("imeis must be a non-empty list")
        check_new_imeis(uow, details.imeis)
        products = [_product(TRACKING_IMEI, 1, imei) for imei in details.imeis]
    elif isinstance(details, QuantityDetails):
        if details.quantity <= 0:
            raise ValidationError("quantity must be >= 1")
        products = [_product(TRACKING_QUANTITY, details.quantity, None)]
    else:
        raise ValidationError("Unknown tracking details")

    for product in products:
        product.check_invariants()
        uow.add(product)
    return products


def restock_quantity(products: list[Product]) -> int:
    """Units a batch contributed, for cost totals."""
    return sum(p.quantity for p in products)


def apply_sale(
    product: Product,
    requested_qty: int,
    buyer_name: str | None,
    invoice_id: str,
    policy: StockPolicy = DEFAULT_POLICY,
) -> Product:
    """
    Take requested_qty units of product for invoice_id.

    Raises InsufficientStockError and leaves the product untouched when it
    cannot cover the request. Products that are not Available have nothing
    to sell.
    """
    if requested_qty < 1:
        raise ValidationError("quantity must be >= 1")
    if product.tracking_type == TRACKING_IMEI and requested_qty != 1:
        raise ValidationError(
            f"Product {product.product_name} is imei-tracked; each invoice line sells exactly 1 unit"
        )

    available = product.sellable_quantity
    if requested_qty > available:
        raise InsufficientStockError(product.product_name, requested_qty, available)

    if product.tracking_type == TRACKING_IMEI:
        product.status = STATUS_SOLD
        product.customer_name = buyer_name
    else:
        product.quantity = available - requested_qty
        if product.quantity == 0:
            product.status = STATUS_SOLD
            if policy.record_buyer_on_sell_out:
                product.customer_name = buyer_name
    product.invoice_id = invoice_id
    return product


def archive(product: Product) -> Product:
    product.status = STATUS_ARCHIVED
    return product


def unarchive(product: Product, policy: StockPolicy = DEFAULT_POLICY) -> Product:
    if product.status != STATUS_ARCHIVED:
        raise ValidationError(f"Product {product.id} is not archived")
    product.status = STATUS_AVAILABLE
    if policy.clear_buyer_on_unarchive:
        product.customer_name = None
    return product
