# Overview: Service-layer inventory and sales summary figures.

from __future__ import annotations

from decimal import Decimal

from stockbook.entities import STATUS_AVAILABLE, Invoice, Product, money_out
from stockbook.time_utils import to_utc_z, utcnow
from stockbook.validation import CENT


def _unit_cost(item, by_id: dict[str, Product], by_imei: dict[str, Product]) -> Decimal:
    product = by_id.get(item.product_id) or (by_imei.get(item.imei) if item.imei else None)
    return product.purchase_price if product is not None else Decimal("0")


def summary(store) -> dict:
    """
    Headline figures for the shop.

    - totalStock: units on hand across Available products
    - inventoryValue: purchasePrice * quantity across Available products
    - totalSales: sum of invoice totals
    - costOfGoodsSold: each invoice line's quantity at its product's current
      purchasePrice; lines whose product no longer exists cost 0
    - grossProfit: totalSales - costOfGoodsSold
    - invoiceCount
    """
    with store.unit_of_work() as uow:
        products = uow.list(Product)
        invoices = uow.list(Invoice)

    on_hand = [p for p in products if p.status == STATUS_AVAILABLE]
    total_stock = sum(p.quantity for p in on_hand)
    inventory_value = sum((p.purchase_price * p.quantity for p in on_hand), Decimal("0"))

    by_id = {p.id: p for p in products}
    by_imei = {p.imei: p for p in products if p.imei}
    total_sales = sum((inv.total_amount for inv in invoices), Decimal("0"))
    cost_of_goods = sum(
        (_unit_cost(item, by_id, by_imei) * item.quantity for inv in invoices for item in inv.items),
        Decimal("0"),
    )

    return {
        "totalStock": total_stock,
        "inventoryValue": money_out(inventory_value.quantize(CENT)),
        "totalSales": money_out(total_sales.quantize(CENT)),
        "costOfGoodsSold": money_out(cost_of_goods.quantize(CENT)),
        "grossProfit": money_out((total_sales - cost_of_goods).quantize(CENT)),
        "invoiceCount": len(invoices),
        "generatedAt": to_utc_z(utcnow()),
    }
