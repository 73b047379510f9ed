# backend/stockbook/routes/system.py
"""
Setup, health and summary endpoints.

/api/setup is idempotent; clients call it when a listing answers 503 with
code DB_TABLE_NOT_FOUND.
"""

import time
from flask import Blueprint, current_app, g, jsonify

from ..decorators import translate_errors, with_actor
from ..extensions import get_store
from ..services import reporting_service, setup_service
from ..validation import StoreUnavailableError

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.post("/setup")
@with_actor
@translate_errors
def setup():
    result = setup_service.initialize_store(get_store())
    current_app.logger.info("Store setup requested (actor=%s)", g.actor_id)
    return jsonify({"message": "Database initialized successfully.", **result})


@system_bp.get("/db-status")
@translate_errors
def db_status():
    status = setup_service.store_status(get_store())
    if not status["initialized"]:
        error = StoreUnavailableError("Database not initialized. Run setup to create tables.")
        return jsonify({**error.to_dict(), **status}), 503
    return jsonify({"status": "ok", **status})


@system_bp.get("/health")
def health():
    """Liveness plus a store round-trip with latency."""
    start_time = time.time()
    try:
        status = setup_service.store_status(get_store())
        store_health = {"status": "healthy" if status["initialized"] else "uninitialized"}
    except Exception:
        current_app.logger.exception("Store health check failed")
        store_health = {"status": "unhealthy", "error": "Store error"}
    store_health["latency_ms"] = round((time.time() - start_time) * 1000, 2)

    overall = "ok" if store_health["status"] == "healthy" else "degraded"
    return jsonify({"status": overall, "backend": get_store().backend, "store": store_health})


@system_bp.get("/summary")
@translate_errors
def summary():
    """Stock, inventory value, gross profit and invoice count."""
    return jsonify(reporting_service.summary(get_store()))
