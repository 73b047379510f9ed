# Overview: Service-layer operations for categories, customers and suppliers.

"""
Registry Service

Reference data the documents point at. Each mutation is its own unit of
work.

REFERENTIAL RULES:
- Category: name unique; products reference it by NAME, so a rename is
  carried onto those products and delete is refused while any use it.
- Customer: no uniqueness; delete refused while invoices reference it.
- Supplier: name unique; delete refused while purchase orders reference it.

save_* functions are the upsert entry points the HTTP edge uses; they return
(entity, created).
"""

from __future__ import annotations

import logging

from stockbook.entities import Category, Customer, Supplier
from stockbook.validation import (
    CATEGORY_POLICY,
    CUSTOMER_POLICY,
    SUPPLIER_POLICY,
    ConflictError,
    NotFoundError,
    require_text,
    validate_payload,
)

logger = logging.getLogger(__name__)

DEFAULT_PHONE = "N/A"


def _list(store, entity_type):
    with store.unit_of_work() as uow:
        return uow.list(entity_type)


def _require(uow, entity_type, entity_id: str, kind: str):
    entity = uow.get(entity_type, entity_id)
    if entity is None:
        raise NotFoundError(kind, entity_id)
    return entity


# =============================================================================
# CATEGORIES
# =============================================================================

def list_categories(store) -> list[Category]:
    return _list(store, Category)


def create_category(store, payload, *, actor_id: str | None = None) -> Category:
    data = validate_payload(payload=payload, policy=CATEGORY_POLICY, partial=False)

    def _op() -> Category:
        with store.unit_of_work() as uow:
            if uow.find_by_name(Category, data["name"]) is not None:
                raise ConflictError(f"Category '{data['name']}' already exists")
            category = Category(name=data["name"])
            if data.get("id"):
                category.id = data["id"]
            uow.add(category)
            return category

    category = store.run(_op)
    logger.info("Category %r created (actor=%s)", category.name, actor_id)
    return category


def _rename_category(uow, category: Category, new_name: str) -> tuple[str, int]:
    old_name = category.name
    if new_name == old_name:
        return old_name, 0
    if uow.find_by_name(Category, new_name) is not None:
        raise ConflictError(f"Category '{new_name}' already exists")
    category.name = new_name
    uow.save(category)
    return old_name, uow.rename_category_on_products(old_name, new_name)


def _log_rename(old_name: str, category: Category, moved: int, actor_id: str | None) -> None:
    if old_name != category.name:
        logger.info(
            "Category %r renamed to %r, %d product(s) updated (actor=%s)",
            old_name, category.name, moved, actor_id,
        )


def save_category(store, payload, *, actor_id: str | None = None) -> tuple[Category, bool]:
    """
    Upsert: an id naming an existing category renames it; otherwise an
    existing category with that name is returned unchanged, else insert.
    """
    data = validate_payload(payload=payload, policy=CATEGORY_POLICY, partial=False)

    def _op() -> tuple[Category, bool, str | None, int]:
        with store.unit_of_work() as uow:
            current = uow.get(Category, data["id"]) if data.get("id") else None
            if current is not None:
                old_name, moved = _rename_category(uow, current, data["name"])
                return current, False, old_name, moved

            existing = uow.find_by_name(Category, data["name"])
            if existing is not None:
                return existing, False, None, 0
            category = Category(name=data["name"])
            if data.get("id"):
                category.id = data["id"]
            uow.add(category)
            return category, True, None, 0

    category, created, old_name, moved = store.run(_op)
    if created:
        logger.info("Category %r created (actor=%s)", category.name, actor_id)
    elif old_name is not None:
        _log_rename(old_name, category, moved, actor_id)
    return category, created


def update_category(store, payload, *, actor_id: str | None = None) -> Category:
    """Rename a category; products using the old name follow it."""
    data = validate_payload(payload=payload, policy=CATEGORY_POLICY, partial=False)
    category_id = require_text(data.get("id"), "id")

    def _op() -> tuple[Category, str, int]:
        with store.unit_of_work() as uow:
            category = _require(uow, Category, category_id, "category")
            old_name, moved = _rename_category(uow, category, data["name"])
            return category, old_name, moved

    category, old_name, moved = store.run(_op)
    _log_rename(old_name, category, moved, actor_id)
    return category


def delete_category(store, category_id: str, *, actor_id: str | None = None) -> None:
    category_id = require_text(category_id, "id")

    def _op() -> Category:
        with store.unit_of_work() as uow:
            category = _require(uow, Category, category_id, "category")
            in_use = uow.products_in_category(category.name)
            if in_use:
                raise ConflictError(
                    f"Category '{category.name}' is in use by {in_use} product(s)",
                    details={"products": in_use},
                )
            uow.delete(category)
            return category

    category = store.run(_op)
    logger.info("Category %r deleted (actor=%s)", category.name, actor_id)


# =============================================================================
# CUSTOMERS
# =============================================================================

def list_customers(store) -> list[Customer]:
    return _list(store, Customer)


def create_customer(store, payload, *, actor_id: str | None = None) -> Customer:
    data = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=False)
    customer = Customer(name=data["name"], phone=data.get("phone") or DEFAULT_PHONE)
    if data.get("id"):
        customer.id = data["id"]

    def _op() -> Customer:
        with store.unit_of_work() as uow:
            uow.add(customer)
            return customer

    store.run(_op)
    logger.info("Customer %r created (actor=%s)", customer.name, actor_id)
    return customer


def update_customer(store, payload, *, actor_id: str | None = None) -> Customer:
    """Patch name/phone. Issued invoices keep their customer name snapshot."""
    data = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=True)
    customer_id = require_text(data.get("id"), "id")

    def _op() -> Customer:
        with store.unit_of_work() as uow:
            customer = _require(uow, Customer, customer_id, "customer")
            if "name" in data:
                customer.name = data["name"]
            if "phone" in data:
                customer.phone = data["phone"] or DEFAULT_PHONE
            uow.save(customer)
            return customer

    customer = store.run(_op)
    logger.info("Customer %s updated (actor=%s)", customer.id, actor_id)
    return customer


def save_customer(store, payload, *, actor_id: str | None = None) -> tuple[Customer, bool]:
    """Update when the id is known, else insert."""
    data = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=False)
    if data.get("id"):
        with store.unit_of_work() as uow:
            exists = uow.get(Customer, data["id"]) is not None
        if exists:
            return update_customer(store, payload, actor_id=actor_id), False
    return create_customer(store, payload, actor_id=actor_id), True


def delete_customer(store, customer_id: str, *, actor_id: str | None = None) -> None:
    customer_id = require_text(customer_id, "id")

    def _op() -> Customer:
        with store.unit_of_work() as uow:
            customer = _require(uow, Customer, customer_id, "customer")
            invoices = uow.invoices_for_customer(customer.id)
            if invoices:
                raise ConflictError(
                    f"Customer '{customer.name}' is referenced by {invoices} invoice(s)",
                    details={"invoices": invoices},
                )
            uow.delete(customer)
            return customer

    customer = store.run(_op)
    logger.info("Customer %r deleted (actor=%s)", customer.name, actor_id)


# =============================================================================
# SUPPLIERS
# =============================================================================

def list_suppliers(store) -> list[Supplier]:
    return _list(store, Supplier)


def create_supplier(store, payload, *, actor_id: str | None = None) -> Supplier:
    data = validate_payload(payload=payload, policy=SUPPLIER_POLICY, partial=False)

    def _op() -> Supplier:
        with store.unit_of_work() as uow:
            if uow.find_by_name(Supplier, data["name"]) is not None:
                raise ConflictError(f"Supplier '{data['name']}' already exists")
            supplier = Supplier(name=data["name"], email=data.get("email"), phone=data.get("phone"))
            if data.get("id"):
                supplier.id = data["id"]
            uow.add(supplier)
            return supplier

    supplier = store.run(_op)
    logger.info("Supplier %r created (actor=%s)", supplier.name, actor_id)
    return supplier


def update_supplier(store, payload, *, actor_id: str | None = None) -> Supplier:
    """Patch a supplier. Issued purchase orders keep their supplier name snapshot."""
    data = validate_payload(payload=payload, policy=SUPPLIER_POLICY, partial=True)
    supplier_id = require_text(data.get("id"), "id")

    def _op() -> Supplier:
        with store.unit_of_work() as uow:
            supplier = _require(uow, Supplier, supplier_id, "supplier")
            if "name" in data and data["name"] != supplier.name:
                clash = uow.find_by_name(Supplier, data["name"])
                if clash is not None:
                    raise ConflictError(f"Supplier '{data['name']}' already exists")
                supplier.name = data["name"]
            if "email" in data:
                supplier.email = data["email"]
            if "phone" in data:
                supplier.phone = data["phone"]
            uow.save(supplier)
            return supplier

    supplier = store.run(_op)
    logger.info("Supplier %s updated (actor=%s)", supplier.id, actor_id)
    return supplier


def save_supplier(store, payload, *, actor_id: str | None = None) -> tuple[Supplier, bool]:
    """
    Upsert: by id when it exists, else by name (contact fields refreshed),
    else insert.
    """
    data = validate_payload(payload=payload, policy=SUPPLIER_POLICY, partial=False)

    def _op() -> tuple[Supplier, bool]:
        with store.unit_of_work() as uow:
            supplier = uow.get(Supplier, data["id"]) if data.get("id") else None
            if supplier is not None:
                if data["name"] != supplier.name and uow.find_by_name(Supplier, data["name"]) is not None:
                    raise ConflictError(f"Supplier '{data['name']}' already exists")
                supplier.name = data["name"]
            else:
                supplier = uow.find_by_name(Supplier, data["name"])

            if supplier is None:
                supplier = Supplier(name=data["name"], email=data.get("email"), phone=data.get("phone"))
                if data.get("id"):
                    supplier.id = data["id"]
                uow.add(supplier)
                return supplier, True

            supplier.email = data.get("email")
            supplier.phone = data.get("phone")
            uow.save(supplier)
            return supplier, False

    supplier, created = store.run(_op)
    logger.info(
        "Supplier %r %s (actor=%s)", supplier.name, "created" if created else "updated", actor_id
    )
    return supplier, created


def delete_supplier(store, supplier_id: str, *, actor_id: str | None = None) -> None:
    supplier_id = require_text(supplier_id, "id")

    def _op() -> Supplier:
        with store.unit_of_work() as uow:
            supplier = _require(uow, Supplier, supplier_id, "supplier")
            orders = uow.purchase_orders_for_supplier(supplier.id)
            if orders:
                raise ConflictError(
                    f"Supplier '{supplier.name}' is referenced by {orders} purchase order(s)",
                    details={"purchaseOrders": orders},
                )
            uow.delete(supplier)
            return supplier

    supplier = store.run(_op)
    logger.info("Supplier %r deleted (actor=%s)", supplier.name, actor_id)
