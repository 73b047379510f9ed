# Overview: Flask API routes for product categories; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import translate_errors, with_actor
from ..extensions import get_store
from ..services import registry_service

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@translate_errors
def list_categories():
    categories = registry_service.list_categories(get_store())
    return jsonify([c.to_dict() for c in categories])


@categories_bp.post("")
@with_actor
@translate_errors
def save_category():
    """
    Save a category by name.

    An existing category with the same name is returned as-is (200);
    otherwise it is created (201).
    """
    data = request.get_json(silent=True) or {}
    category, created = registry_service.save_category(get_store(), data, actor_id=g.actor_id)
    return jsonify(category.to_dict()), 201 if created else 200


@categories_bp.put("")
@with_actor
@translate_errors
def rename_category():
    """Request body: {"id", "name"}. Products follow the new name."""
    data = request.get_json(silent=True) or {}
    category = registry_service.update_category(get_store(), data, actor_id=g.actor_id)
    return jsonify(category.to_dict())


@categories_bp.delete("")
@with_actor
@translate_errors
def delete_category():
    data = request.get_json(silent=True) or {}
    registry_service.delete_category(get_store(), data.get("id"), actor_id=g.actor_id)
    return jsonify({"success": True})
