# Overview: Flask API routes for invoices; parses input and returns JSON responses.

"""
Invoice routes.

POST creates an invoice and takes its items out of stock in one
transaction. Issued invoices are immutable apart from the customer binding
(PATCH).
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_policy, get_store
from ..services import invoice_service
from ..validation import parse_invoice_request

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@translate_errors
def list_invoices():
    invoices = invoice_service.list_invoices(get_store())
    return jsonify([i.to_dict() for i in invoices])


@invoices_bp.get("/<invoice_id>")
@translate_errors
def get_invoice(invoice_id):
    invoice = invoice_service.get_invoice(get_store(), invoice_id)
    return jsonify(invoice.to_dict())


@invoices_bp.post("")
@with_actor
@translate_errors
def create_invoice():
    """
    Request body:
    {
        "customerId": "...",
        "items": [{"productId": "...", "quantity": 1, "sellingPrice": 99.0}, ...]
    }

    Returns:
        The created invoice (201)
    """
    customer_id, lines = parse_invoice_request(request.get_json(silent=True))
    invoice = invoice_service.create_invoice(
        get_store(),
        customer_id,
        lines,
        actor_id=g.actor_id,
        policy=get_policy(),
    )
    return jsonify(invoice.to_dict()), 201


@invoices_bp.patch("/<invoice_id>")
@with_actor
@translate_errors
def update_invoice_customer(invoice_id):
    """Request body: {"customerId"} or {"customerName"}."""
    data = request.get_json(silent=True) or {}
    invoice = invoice_service.update_invoice_customer(
        get_store(),
        invoice_id,
        customer_id=data.get("customerId"),
        customer_name=data.get("customerName"),
        actor_id=g.actor_id,
    )
    return jsonify(invoice.to_dict())
