# Overview: Client-local fallback adapter for the storage port (JSON file or memory).

"""
Local store

Used when no database is configured. Keeps the same entity shapes (the
camelCase wire dictionaries) grouped under the collection names the browser
client used for its fallback cache.

ATOMICITY: a unit of work runs under the store lock against a deep copy of
the state; the copy replaces the live state only when the block exits
normally, then the file is rewritten (temp file + os.replace).

UNIQUENESS: the same keys the relational schema declares unique are checked
here in-process and raise ConflictError.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from stockbook import entities
from stockbook.validation import ConflictError, NotFoundError
from .base import InventoryStore, UnitOfWork

logger = logging.getLogger(__name__)

COLLECTIONS = {
    entities.Product: "products",
    entities.Customer: "customers",
    entities.Category: "categories",
    entities.Supplier: "suppliers",
    entities.Invoice: "invoices",
    entities.PurchaseOrder: "purchase-orders",
}

ENTITY_NAMES = {
    entities.Product: "product",
    entities.Category: "category",
    entities.Customer: "customer",
    entities.Supplier: "supplier",
    entities.Invoice: "invoice",
    entities.PurchaseOrder: "purchase order",
}

SEQUENCES = "sequences"


def _newest_first(key: str):
    def _key(record: dict):
        return record.get(key) or ""
    return _key


def _sorted(entity_type, records: list[dict]) -> list[dict]:
    if entity_type is entities.Product:
        records = sorted(records, key=lambda r: (r["productName"], r["id"]))
        return sorted(records, key=_newest_first("purchaseDate"), reverse=True)
    if entity_type is entities.Invoice:
        return sorted(records, key=lambda r: (r.get("issueDate") or "", r["invoiceNumber"]), reverse=True)
    if entity_type is entities.PurchaseOrder:
        records = sorted(records, key=lambda r: r["poNumber"])
        return sorted(records, key=_newest_first("issueDate"), reverse=True)
    return sorted(records, key=lambda r: (r["name"], r["id"]))


def _collection(entity_type) -> str:
    try:
        return COLLECTIONS[entity_type]
    except KeyError:
        raise TypeError(f"Unsupported entity type: {entity_type!r}")


def empty_state() -> dict:
    state = {name: {} for name in COLLECTIONS.values()}
    state[SEQUENCES] = {}
    return state


class LocalUnitOfWork(UnitOfWork):
    def __init__(self, state: dict):
        self.state = state

    def _records(self, entity_type) -> dict:
        return self.state[_collection(entity_type)]

    def get(self, entity_type, entity_id, *, for_update=False):
        record = self._records(entity_type).get(entity_id)
        return entity_type.from_dict(record) if record else None

    def get_many(self, entity_type, ids, *, for_update=False):
        records = self._records(entity_type)
        return {i: entity_type.from_dict(records[i]) for i in ids if i in records}

    def list(self, entity_type):
        records = _sorted(entity_type, list(self._records(entity_type).values()))
        return [entity_type.from_dict(r) for r in records]

    def find_by_name(self, entity_type, name):
        for record in self._records(entity_type).values():
            if record["name"] == name:
                return entity_type.from_dict(record)
        return None

    def count(self, entity_type):
        return len(self._records(entity_type))

    def _check_unique(self, entity) -> None:
        others = [r for r in self._records(type(entity)).values() if r["id"] != entity.id]
        if isinstance(entity, (entities.Category, entities.Supplier)):
            if any(r["name"] == entity.name for r in others):
                raise ConflictError(f"{ENTITY_NAMES[type(entity)].capitalize()} '{entity.name}' already exists")
        elif isinstance(entity, entities.Product):
            if entity.imei and any(r.get("imei") == entity.imei for r in others):
                raise ConflictError(f"IMEI '{entity.imei}' already exists")
        elif isinstance(entity, entities.PurchaseOrder):
            if any(r["poNumber"] == entity.po_number for r in others):
                raise ConflictError(f"PO number '{entity.po_number}' already exists")
        elif isinstance(entity, entities.Invoice):
            if any(r["invoiceNumber"] == entity.invoice_number for r in others):
                raise ConflictError(f"Invoice number '{entity.invoice_number}' already exists")

    def add(self, entity):
        records = self._records(type(entity))
        if entity.id in records:
            raise ConflictError(f"{ENTITY_NAMES[type(entity)].capitalize()} {entity.id} already exists")
        self._check_unique(entity)
        records[entity.id] = entity.to_dict()

    def save(self, entity):
        records = self._records(type(entity))
        if entity.id not in records:
            raise NotFoundError(ENTITY_NAMES[type(entity)], entity.id)
        self._check_unique(entity)
        records[entity.id] = entity.to_dict()

    def delete(self, entity):
        self._records(type(entity)).pop(entity.id, None)

    def existing_imeis(self, imeis, *, exclude_product_id=None):
        wanted = {i for i in imeis if i}
        return {
            r["imei"]
            for r in self._records(entities.Product).values()
            if r.get("imei") in wanted and r["id"] != exclude_product_id
        }

    def po_number_exists(self, po_number):
        return any(r["poNumber"] == po_number for r in self._records(entities.PurchaseOrder).values())

    def products_in_category(self, category_name):
        return sum(1 for r in self._records(entities.Product).values() if r["category"] == category_name)

    def rename_category_on_products(self, old_name, new_name):
        renamed = 0
        for record in self._records(entities.Product).values():
            if record["category"] == old_name:
                record["category"] = new_name
                renamed += 1
        return renamed

    def invoices_for_customer(self, customer_id):
        return sum(1 for r in self._records(entities.Invoice).values() if r.get("customerId") == customer_id)

    def purchase_orders_for_supplier(self, supplier_id):
        return sum(1 for r in self._records(entities.PurchaseOrder).values() if r["supplierId"] == supplier_id)

    def invoice_numbers_for_product(self, product_id):
        return sorted(
            r["invoiceNumber"]
            for r in self._records(entities.Invoice).values()
            if any(item["productId"] == product_id for item in r.get("items", []))
        )

    def next_sequence(self, name, *, floor=0):
        sequences = self.state[SEQUENCES]
        value = max(sequences.get(name, 1), floor + 1)
        sequences[name] = value + 1
        return value


class LocalStore(InventoryStore):
    """
    Best-effort store for running without a database.

    path=None keeps everything in memory (tests, demos).
    """
    backend = "local"

    def __init__(self, path: str | None = None):
        self.path = path
        self._lock = threading.RLock()
        self._state: dict | None = None
        if path and os.path.exists(path):
            self._state = self._read()
            logger.info("Loaded local store from %s", path)

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as fh:
            loaded = json.load(fh)
        state = empty_state()
        for key in state:
            state[key].update(loaded.get(key) or {})
        return state

    def _write(self) -> None:
        if not self.path:
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._state, fh, indent=2, default=self._json_default)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _json_default(value):
        if isinstance(value, datetime):
            return value.isoformat()
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    @contextmanager
    def unit_of_work(self) -> Iterator[LocalUnitOfWork]:
        with self._lock:
            if self._state is None:
                # Local mode needs no setup step.
                self._state = empty_state()
            staged = copy.deepcopy(self._state)
            yield LocalUnitOfWork(staged)
            if staged != self._state:
                self._state = staged
                self._write()

    def create_schema(self) -> None:
        with self._lock:
            if self._state is None:
                self._state = empty_state()
                self._write()

    def drop_schema(self) -> None:
        with self._lock:
            self._state = None
            if self.path and os.path.exists(self.path):
                os.unlink(self.path)

    def has_schema(self) -> bool:
        return self._state is not None
