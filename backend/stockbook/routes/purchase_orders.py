# Overview: Flask API routes for purchase orders; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_store
from ..services import purchase_order_service
from ..validation import parse_purchase_order_request

purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
@translate_errors
def list_purchase_orders():
    orders = purchase_order_service.list_purchase_orders(get_store())
    return jsonify([po.to_dict() for po in orders])


@purchase_orders_bp.get("/<purchase_order_id>")
@translate_errors
def get_purchase_order(purchase_order_id):
    po = purchase_order_service.get_purchase_order(get_store(), purchase_order_id)
    return jsonify(po.to_dict())


@purchase_orders_bp.post("")
@with_actor
@translate_errors
def create_purchase_order():
    """
    Request body:
    {
        "poDetails": {"supplierId", "poNumber", "status"?, "notes"?},
        "productsData": [{"productInfo": {...}, "details": {"trackingType", "imeis" | "quantity"}}]
    }

    Returns:
        {"po": PurchaseOrder, "newProducts": Product[]} (201)
    """
    details, batches = parse_purchase_order_request(request.get_json(silent=True))
    po, new_products = purchase_order_service.create_purchase_order(
        get_store(), details, batches, actor_id=g.actor_id
    )
    return jsonify({"po": po.to_dict(), "newProducts": [p.to_dict() for p in new_products]}), 201
