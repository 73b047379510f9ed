# Overview: Request decorators for API routes (actor context, error translation).

from functools import wraps
from flask import current_app, g, jsonify, request

from .validation import (
    ConflictError,
    InsufficientStockError,
    InventoryError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

ACTOR_HEADER = "X-User-Id"

# Most specific first: ConflictError is also a ValidationError.
STATUS_BY_ERROR = (
    (ConflictError, 409),
    (InsufficientStockError, 409),
    (NotFoundError, 404),
    (StoreUnavailableError, 503),
    (ValidationError, 400),
)


def status_for(exc: InventoryError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def with_actor(f):
    """
    Record the calling operator in g.actor_id.

    Authentication lives in front of this service; whatever gate is there
    passes the operator id in the X-User-Id header. Missing is allowed.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = (request.headers.get(ACTOR_HEADER) or "").strip()
        g.actor_id = actor or None
        return f(*args, **kwargs)

    return decorated_function


def translate_errors(f):
    """
    Map service errors to JSON responses.

    - ValidationError 400, NotFoundError 404
    - ConflictError / InsufficientStockError 409
    - StoreUnavailableError 503 (with code)
    Anything else is logged and returned as 500 without internals.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except InventoryError as e:
            return jsonify(e.to_dict()), status_for(e)
        except Exception:
            current_app.logger.exception("Unhandled error in %s %s", request.method, request.path)
            return jsonify({"error": "Internal server error"}), 500

    return decorated_function
