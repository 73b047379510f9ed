# Overview: Storage-neutral entity shapes shared by services and both store adapters.

"""
Entity model

Services only ever see these dataclasses. The SQL adapter maps them to and
from ORM rows, the local adapter to and from JSON dictionaries; both use the
camelCase wire shape produced by to_dict() so the two persistence modes stay
interchangeable.

Money is Decimal (2dp) in memory and a JSON number on the wire.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal

from stockbook.time_utils import parse_iso_datetime, to_utc_z
from stockbook.validation import (
    CENT,
    TRACKING_IMEI,
    TRACKING_QUANTITY,
    TRACKING_TYPES,
    ValidationError,
    optional_text,
    require_text,
    to_date,
    to_int,
    to_money,
)

STATUS_AVAILABLE = "Available"
STATUS_SOLD = "Sold"
STATUS_ARCHIVED = "Archived"
PRODUCT_STATUSES = {STATUS_AVAILABLE, STATUS_SOLD, STATUS_ARCHIVED}


def new_id() -> str:
    return str(uuid.uuid4())


def money_out(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value)


def money_in(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


def _datetime_in(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return parse_iso_datetime(str(value))


@dataclass
class Product:
    product_name: str
    category: str
    purchase_date: date
    purchase_price: Decimal
    selling_price: Decimal
    tracking_type: str
    quantity: int
    status: str = STATUS_AVAILABLE
    imei: str | None = None
    notes: str | None = None
    invoice_id: str | None = None
    purchase_order_id: str | None = None
    customer_name: str | None = None
    id: str = field(default_factory=new_id)

    @property
    def sellable_quantity(self) -> int:
        """Units that can still go on an invoice."""
        if self.status != STATUS_AVAILABLE:
            return 0
        return self.quantity

    def check_invariants(self) -> None:
        """Tracking-type rules every persisted product must satisfy."""
        if self.tracking_type not in TRACKING_TYPES:
            raise ValidationError(f"trackingType must be one of: {', '.join(sorted(TRACKING_TYPES))}")
        if self.status not in PRODUCT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(sorted(PRODUCT_STATUSES))}")
        if self.tracking_type == TRACKING_IMEI:
            if not self.imei or not self.imei.strip():
                raise ValidationError("imei is required for imei-tracked products")
            if self.quantity != 1:
                raise ValidationError("imei-tracked products always have quantity 1")
        else:
            if self.imei:
                raise ValidationError("quantity-tracked products cannot carry an imei")
            if self.quantity < 0:
                raise ValidationError("quantity must be >= 0")

    def copy(self) -> "Product":
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productName": self.product_name,
            "category": self.category,
            "purchaseDate": self.purchase_date.isoformat() if self.purchase_date else None,
            "purchasePrice": money_out(self.purchase_price),
            "sellingPrice": money_out(self.selling_price),
            "status": self.status,
            "trackingType": self.tracking_type,
            "imei": self.imei,
            "quantity": self.quantity,
            "notes": self.notes,
            "invoiceId": self.invoice_id,
            "purchaseOrderId": self.purchase_order_id,
            "customerName": self.customer_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Trusted load from a store; no validation."""
        return cls(
            id=data["id"],
            product_name=data["productName"],
            category=data["category"],
            purchase_date=date.fromisoformat(data["purchaseDate"]),
            purchase_price=money_in(data["purchasePrice"]),
            selling_price=money_in(data["sellingPrice"]),
            status=data["status"],
            tracking_type=data["trackingType"],
            imei=data.get("imei"),
            quantity=int(data["quantity"]),
            notes=data.get("notes"),
            invoice_id=data.get("invoiceId"),
            purchase_order_id=data.get("purchaseOrderId"),
            customer_name=data.get("customerName"),
        )

    @classmethod
    def from_payload(cls, data, *, require_id: bool = False) -> "Product":
        """
        Validated load from an untrusted request body (manual add / edit).

        imei products default to quantity 1; an empty imei on a quantity
        product is normalized to None.
        """
        if not isinstance(data, dict):
            raise ValidationError("Each product must be an object")

        tracking_type = data.get("trackingType") or TRACKING_QUANTITY
        imei = optional_text(data.get("imei"))
        if tracking_type == TRACKING_IMEI:
            quantity = to_int(data.get("quantity", 1), "quantity")
        else:
            quantity = to_int(data.get("quantity"), "quantity", minimum=0)

        product = cls(
            product_name=require_text(data.get("productName"), "productName"),
            category=require_text(data.get("category"), "category"),
            purchase_date=to_date(data.get("purchaseDate"), "purchaseDate"),
            purchase_price=to_money(data.get("purchasePrice"), "purchasePrice"),
            selling_price=to_money(data.get("sellingPrice"), "sellingPrice"),
            status=data.get("status") or STATUS_AVAILABLE,
            tracking_type=tracking_type,
            imei=imei,
            quantity=quantity,
            notes=optional_text(data.get("notes")),
            invoice_id=optional_text(data.get("invoiceId")),
            purchase_order_id=optional_text(data.get("purchaseOrderId")),
            customer_name=optional_text(data.get("customerName")),
        )
        if require_id:
            product.id = require_text(data.get("id"), "id")
        elif data.get("id"):
            product.id = str(data["id"])
        product.check_invariants()
        return product


@dataclass
class Customer:
    name: str
    phone: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "phone": self.phone}

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        return cls(id=data["id"], name=data["name"], phone=data.get("phone") or "")


@dataclass
class Supplier:
    name: str
    email: str | None = None
    phone: str | None = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}

    @classmethod
    def from_dict(cls, data: dict) -> "Supplier":
        return cls(id=data["id"], name=data["name"], email=data.get("email"), phone=data.get("phone"))


@dataclass
class Category:
    name: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(id=data["id"], name=data["name"])


@dataclass
class InvoiceItem:
    product_id: str
    product_name: str
    quantity: int
    selling_price: Decimal
    imei: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.selling_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "imei": self.imei,
            "quantity": self.quantity,
            "sellingPrice": money_out(self.selling_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceItem":
        return cls(
            product_id=data["productId"],
            product_name=data["productName"],
            imei=data.get("imei"),
            quantity=int(data["quantity"]),
            selling_price=money_in(data["sellingPrice"]),
        )


@dataclass
class Invoice:
    invoice_number: str
    customer_id: str | None
    customer_name: str
    issue_date: datetime
    items: list[InvoiceItem] = field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoiceNumber": self.invoice_number,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "issueDate": to_utc_z(self.issue_date),
            "items": [item.to_dict() for item in self.items],
            "totalAmount": money_out(self.total_amount),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        return cls(
            id=data["id"],
            invoice_number=data["invoiceNumber"],
            customer_id=data.get("customerId"),
            customer_name=data.get("customerName") or "",
            issue_date=_datetime_in(data["issueDate"]),
            items=[InvoiceItem.from_dict(i) for i in data.get("items", [])],
            total_amount=money_in(data["totalAmount"]),
        )


@dataclass
class PurchaseOrder:
    po_number: str
    supplier_id: str
    supplier_name: str
    issue_date: datetime
    status: str
    total_cost: Decimal = Decimal("0.00")
    notes: str | None = None
    product_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "poNumber": self.po_number,
            "supplierId": self.supplier_id,
            "supplierName": self.supplier_name,
            "issueDate": to_utc_z(self.issue_date),
            "status": self.status,
            "notes": self.notes,
            "totalCost": money_out(self.total_cost),
            "productIds": list(self.product_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrder":
        return cls(
            id=data["id"],
            po_number=data["poNumber"],
            supplier_id=data["supplierId"],
            supplier_name=data.get("supplierName") or "",
            issue_date=_datetime_in(data["issueDate"]),
            status=data["status"],
            notes=data.get("notes"),
            total_cost=money_in(data["totalCost"]),
            product_ids=list(data.get("productIds", [])),
        )
