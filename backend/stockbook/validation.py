from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Union

from stockbook.time_utils import parse_iso_date


# Maximum price: 99,999,999.99 (Numeric(10, 2) column limit)
MAX_PRICE = Decimal("99999999.99")
CENT = Decimal("0.01")

TRACKING_IMEI = "imei"
TRACKING_QUANTITY = "quantity"
TRACKING_TYPES = {TRACKING_IMEI, TRACKING_QUANTITY}

PO_STATUSES = {"Draft", "Ordered", "Completed"}


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class InventoryError(Exception):
    """Base for every error the service layer raises on purpose."""

    kind = "error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message, "kind": self.kind}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(InventoryError, ValueError):
    """400-level input problem."""

    kind = "validation"


class ConflictError(ValidationError):
    """409-level business rule conflict (duplicate key, record still in use)."""

    kind = "conflict"


class NotFoundError(InventoryError, LookupError):
    """A referenced entity does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, ids=None):
        if ids is None:
            ids = []
        elif isinstance(ids, (str, int)):
            ids = [ids]
        ids = [str(i) for i in ids]
        self.entity = entity
        self.ids = ids
        if len(ids) > 1:
            message = f"One or more {entity}s not found: {', '.join(ids)}"
        elif ids:
            message = f"{entity.capitalize()} {ids[0]} not found"
        else:
            message = f"{entity.capitalize()} not found"
        super().__init__(message, details={"entity": entity, "ids": ids})


class InsufficientStockError(InventoryError):
    """Requested quantity exceeds what a product has on hand."""

    kind = "insufficient_stock"

    def __init__(self, product_name: str, requested: int, available: int):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Requested: {requested}, Available: {available}",
            details={
                "productName": product_name,
                "requested": requested,
                "available": available,
                "shortfall": requested - available,
            },
        )


class StoreUnavailableError(InventoryError):
    """Backing store unreachable or its schema has not been created."""

    kind = "store_unavailable"

    def __init__(self, message: str = "Database not initialized.", code: str = "DB_TABLE_NOT_FOUND"):
        self.code = code
        super().__init__(message, details={"code": code})

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["code"] = self.code
        return payload


# =============================================================================
# SCALAR COERCION
# =============================================================================

def require_text(value: Any, field_name: str) -> str:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field_name} cannot be blank")
    return text


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_money(value: Any, field_name: str) -> Decimal:
    """Coerce a JSON number or decimal string to a non-negative 2dp Decimal."""
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    if amount > MAX_PRICE:
        raise ValidationError(f"{field_name} cannot exceed {MAX_PRICE}")
    return amount.quantize(CENT)


def to_int(value: Any, field_name: str, *, minimum: int | None = None) -> int:
    # Integers - strict validation to reject floats and scientific notation
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field_name} must be an integer, not a decimal")
        result = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field_name} must be a plain integer")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field_name} must be an integer")
    else:
        raise ValidationError(f"{field_name} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return result


def to_date(value: Any, field_name: str) -> date:
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 date")
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


# =============================================================================
# PAYLOAD POLICY
# =============================================================================

@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - fields: wire key -> coercer for what clients are allowed to set
    - required_on_create: keys required for POST
    Unknown keys are ignored: the browser client posts whole entity objects.
    """
    fields: dict[str, Callable[[Any, str], Any]]
    required_on_create: set[str] = field(default_factory=set)


def validate_payload(*, payload: Any, policy: ModelValidationPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming JSON against a policy.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch: dict = {}
    for key, coerce in policy.fields.items():
        if key not in payload:
            continue
        patch[key] = coerce(payload[key], key)
    return patch


CUSTOMER_POLICY = ModelValidationPolicy(
    fields={
        "id": lambda v, k: optional_text(v),
        "name": require_text,
        "phone": lambda v, k: optional_text(v),
    },
    required_on_create={"name"},
)

SUPPLIER_POLICY = ModelValidationPolicy(
    fields={
        "id": lambda v, k: optional_text(v),
        "name": require_text,
        "email": lambda v, k: optional_text(v),
        "phone": lambda v, k: optional_text(v),
    },
    required_on_create={"name"},
)

CATEGORY_POLICY = ModelValidationPolicy(
    fields={
        "id": lambda v, k: optional_text(v),
        "name": require_text,
    },
    required_on_create={"name"},
)


# =============================================================================
# OPERATION INPUTS
# =============================================================================

@dataclass(frozen=True)
class ProductInfo:
    """Fields shared by every product generated from one batch."""
    product_name: str
    category: str
    purchase_date: date
    purchase_price: Decimal
    selling_price: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class ImeiDetails:
    imeis: tuple[str, ...]
    tracking_type: str = TRACKING_IMEI


@dataclass(frozen=True)
class QuantityDetails:
    quantity: int
    tracking_type: str = TRACKING_QUANTITY


TrackingDetails = Union[ImeiDetails, QuantityDetails]


@dataclass(frozen=True)
class ProductBatch:
    product_info: ProductInfo
    details: TrackingDetails


@dataclass(frozen=True)
class PurchaseOrderDetails:
    supplier_id: str
    po_number: str
    status: str = "Ordered"
    notes: str | None = None


@dataclass(frozen=True)
class InvoiceLine:
    product_id: str
    quantity: int = 1
    selling_price: Decimal | None = None


def parse_product_info(data: Any) -> ProductInfo:
    if isinstance(data, ProductInfo):
        return data
    if not isinstance(data, dict):
        raise ValidationError("productInfo must be an object")
    return ProductInfo(
        product_name=require_text(data.get("productName"), "productName"),
        category=require_text(data.get("category"), "category"),
        purchase_date=to_date(data.get("purchaseDate"), "purchaseDate"),
        purchase_price=to_money(data.get("purchasePrice"), "purchasePrice"),
        selling_price=to_money(data.get("sellingPrice"), "sellingPrice"),
        notes=optional_text(data.get("notes")),
    )


def parse_tracking_details(data: Any) -> TrackingDetails:
    """Tagged union on trackingType: an imei list or one bulk quantity."""
    if isinstance(data, (ImeiDetails, QuantityDetails)):
        return data
    if not isinstance(data, dict):
        raise ValidationError("details must be an object")

    tracking_type = data.get("trackingType")
    if tracking_type == TRACKING_IMEI:
        imeis = data.get("imeis")
        if not isinstance(imeis, (list, tuple)) or not imeis:
            raise ValidationError("imeis must be a non-empty list")
        return ImeiDetails(imeis=tuple(require_text(i, "imei") for i in imeis))
    if tracking_type == TRACKING_QUANTITY:
        return QuantityDetails(quantity=to_int(data.get("quantity"), "quantity", minimum=1))
    raise ValidationError(f"trackingType must be one of: {', '.join(sorted(TRACKING_TYPES))}")


def parse_product_batch(data: Any) -> ProductBatch:
    if isinstance(data, ProductBatch):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Each product batch must be an object")
    return ProductBatch(
        product_info=parse_product_info(data.get("productInfo")),
        details=parse_tracking_details(data.get("details")),
    )


def parse_po_details(data: Any) -> PurchaseOrderDetails:
    if isinstance(data, PurchaseOrderDetails):
        return data
    if not isinstance(data, dict):
        raise ValidationError("poDetails must be an object")
    status = data.get("status") or "Ordered"
    if status not in PO_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(PO_STATUSES))}")
    return PurchaseOrderDetails(
        supplier_id=require_text(data.get("supplierId"), "supplierId"),
        po_number=str(data.get("poNumber") or "").strip(),
        status=status,
        notes=optional_text(data.get("notes")),
    )


def parse_invoice_line(data: Any) -> InvoiceLine:
    if isinstance(data, InvoiceLine):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Each invoice item must be an object")
    price = data.get("sellingPrice")
    return InvoiceLine(
        product_id=require_text(data.get("productId"), "productId"),
        quantity=to_int(data.get("quantity", 1), "quantity", minimum=1),
        selling_price=to_money(price, "sellingPrice") if price is not None else None,
    )


def parse_invoice_request(payload: Any) -> tuple[str, list[InvoiceLine]]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    items = payload.get("items")
    if not payload.get("customerId") or not isinstance(items, list) or not items:
        raise ValidationError("customerId and a non-empty array of items are required.")
    customer_id = require_text(payload.get("customerId"), "customerId")
    return customer_id, [parse_invoice_line(i) for i in items]


def parse_purchase_order_request(payload: Any) -> tuple[PurchaseOrderDetails, list[ProductBatch]]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    batches = payload.get("productsData")
    if not payload.get("poDetails") or not isinstance(batches, list):
        raise ValidationError("Missing required PO data.")
    return parse_po_details(payload["poDetails"]), [parse_product_batch(b) for b in batches]
