# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_store
from ..services import registry_service

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@translate_errors
def list_customers():
    customers = registry_service.list_customers(get_store())
    return jsonify([c.to_dict() for c in customers])


@customers_bp.post("")
@with_actor
@translate_errors
def save_customer():
    """
    Create a customer, or update it when the body carries a known id.

    Request body: {"id"?, "name", "phone"?}
    """
    data = request.get_json(silent=True) or {}
    customer, created = registry_service.save_customer(get_store(), data, actor_id=g.actor_id)
    return jsonify(customer.to_dict()), 201 if created else 200


@customers_bp.put("")
@with_actor
@translate_errors
def update_customer():
    data = request.get_json(silent=True) or {}
    customer = registry_service.update_customer(get_store(), data, actor_id=g.actor_id)
    return jsonify(customer.to_dict())


@customers_bp.delete("")
@with_actor
@translate_errors
def delete_customer():
    data = request.get_json(silent=True) or {}
    registry_service.delete_customer(get_store(), data.get("id"), actor_id=g.actor_id)
    return jsonify({"success": True})
