# Overview: Flask API routes for products; parses input and returns JSON responses.

"""
Product routes.

Stock normally changes through invoices and purchase orders; these routes
cover listing and the operator's manual maintenance. DELETE carries the id
in the JSON body ({"id": ...}) like the browser client sends it.
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_policy, get_store
from ..services import products_service

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@translate_errors
def list_products():
    """
    List products, newest purchase first.

    Query params:
    - status: Available | Sold | Archived (optional)
    """
    status = request.args.get("status") or None
    products = products_service.list_products(get_store(), status=status)
    return jsonify([p.to_dict() for p in products])


@products_bp.get("/available")
@translate_errors
def list_available_products():
    products = products_service.list_available_products(get_store())
    return jsonify([p.to_dict() for p in products])


@products_bp.post("")
@with_actor
@translate_errors
def add_products():
    """Request body: a non-empty array of product objects."""
    data = request.get_json(silent=True)
    products = products_service.add_products(get_store(), data, actor_id=g.actor_id)
    return jsonify([p.to_dict() for p in products]), 201


@products_bp.put("")
@with_actor
@translate_errors
def update_product():
    """Request body: the full product object, id included."""
    data = request.get_json(silent=True) or {}
    product = products_service.update_product(get_store(), data, actor_id=g.actor_id)
    return jsonify(product.to_dict())


@products_bp.delete("")
@with_actor
@translate_errors
def delete_product():
    data = request.get_json(silent=True) or {}
    products_service.delete_product(get_store(), data.get("id"), actor_id=g.actor_id)
    return jsonify({"success": True})


@products_bp.post("/<product_id>/archive")
@with_actor
@translate_errors
def archive_product(product_id):
    product = products_service.archive_product(get_store(), product_id, actor_id=g.actor_id)
    return jsonify(product.to_dict())


@products_bp.post("/<product_id>/unarchive")
@with_actor
@translate_errors
def unarchive_product(product_id):
    product = products_service.unarchive_product(
        get_store(), product_id, policy=get_policy(), actor_id=g.actor_id
    )
    return jsonify(product.to_dict())
