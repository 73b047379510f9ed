# Overview: Flask API routes for suppliers; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_store
from ..services import registry_service

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@translate_errors
def list_suppliers():
    suppliers = registry_service.list_suppliers(get_store())
    return jsonify([s.to_dict() for s in suppliers])


@suppliers_bp.post("")
@with_actor
@translate_errors
def save_supplier():
    """
    Upsert a supplier: by id, else by name, else insert.

    Request body: {"id"?, "name", "email"?, "phone"?}
    """
    data = request.get_json(silent=True) or {}
    supplier, created = registry_service.save_supplier(get_store(), data, actor_id=g.actor_id)
    return jsonify(supplier.to_dict()), 201 if created else 200


@suppliers_bp.delete("")
@with_actor
@translate_errors
def delete_supplier():
    data = request.get_json(silent=True) or {}
    registry_service.delete_supplier(get_store(), data.get("id"), actor_id=g.actor_id)
    return jsonify({"success": True})
