# Overview: Transactional relational adapter for the storage port (Flask-SQLAlchemy).

"""
SQL store

One UnitOfWork == one database transaction on the Flask-SQLAlchemy scoped
session. Requires an application context.

CONCURRENCY:
- SQLite: BEGIN IMMEDIATE takes the write lock up front, serializing writers.
- Other databases: products and sequences are read with SELECT ... FOR UPDATE.
- Product rows carry version_id (optimistic locking) as a second line of
  defense; StaleDataError is retried by run_with_retry with fresh reads.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import func, inspect, text
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from stockbook import entities, models
from stockbook.extensions import db
from stockbook.services.concurrency import lock_for_update, run_with_retry
from stockbook.validation import ConflictError, NotFoundError, StoreUnavailableError
from .base import InventoryStore, UnitOfWork

logger = logging.getLogger(__name__)

ROW_TYPES = {
    entities.Product: models.Product,
    entities.Category: models.Category,
    entities.Customer: models.Customer,
    entities.Supplier: models.Supplier,
    entities.Invoice: models.Invoice,
    entities.PurchaseOrder: models.PurchaseOrder,
}

ENTITY_NAMES = {
    entities.Product: "product",
    entities.Category: "category",
    entities.Customer: "customer",
    entities.Supplier: "supplier",
    entities.Invoice: "invoice",
    entities.PurchaseOrder: "purchase order",
}

DISPLAY_ORDER = {
    models.Product: (models.Product.purchase_date.desc(), models.Product.product_name.asc(), models.Product.id.asc()),
    models.Category: (models.Category.name.asc(),),
    models.Customer: (models.Customer.name.asc(), models.Customer.id.asc()),
    models.Supplier: (models.Supplier.name.asc(),),
    models.Invoice: (models.Invoice.issue_date.desc(), models.Invoice.invoice_number.desc()),
    models.PurchaseOrder: (models.PurchaseOrder.issue_date.desc(), models.PurchaseOrder.po_number.asc()),
}

MISSING_TABLE_MARKERS = ("no such table", "undefinedtable", "does not exist")
UNREACHABLE_MARKERS = ("unable to open database", "could not connect", "connection refused", "could not translate host")


def _row_type(entity_type):
    try:
        return ROW_TYPES[entity_type]
    except KeyError:
        raise TypeError(f"Unsupported entity type: {entity_type!r}")


def translate_store_error(exc: Exception) -> StoreUnavailableError | None:
    """Map driver errors that mean 'no usable schema/connection' to StoreUnavailableError."""
    message = str(getattr(exc, "orig", exc)).lower()
    if any(marker in message for marker in MISSING_TABLE_MARKERS):
        return StoreUnavailableError("Database not initialized. Run setup to create tables.")
    if any(marker in message for marker in UNREACHABLE_MARKERS):
        return StoreUnavailableError("Database unreachable.", code="DB_UNREACHABLE")
    return None


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session):
        self.session = session

    def _load(self, row_type, entity_id: str, *, for_update: bool = False):
        query = self.session.query(row_type).filter(row_type.id == entity_id)
        if for_update:
            query = lock_for_update(query)
        return query.first()

    def get(self, entity_type, entity_id, *, for_update=False):
        row = self._load(_row_type(entity_type), entity_id, for_update=for_update)
        return row.to_entity() if row else None

    def get_many(self, entity_type, ids, *, for_update=False):
        ids = list(dict.fromkeys(ids))
        if not ids:
            return {}
        row_type = _row_type(entity_type)
        query = self.session.query(row_type).filter(row_type.id.in_(ids))
        if for_update:
            query = lock_for_update(query.order_by(row_type.id))
        return {row.id: row.to_entity() for row in query.all()}

    def list(self, entity_type):
        row_type = _row_type(entity_type)
        rows = self.session.query(row_type).order_by(*DISPLAY_ORDER[row_type]).all()
        return [row.to_entity() for row in rows]

    def find_by_name(self, entity_type, name):
        row_type = _row_type(entity_type)
        row = self.session.query(row_type).filter(row_type.name == name).first()
        return row.to_entity() if row else None

    def count(self, entity_type):
        row_type = _row_type(entity_type)
        return self.session.query(func.count(row_type.id)).scalar() or 0

    def add(self, entity):
        row_type = _row_type(type(entity))
        self.session.add(row_type.from_entity(entity))
        self.session.flush()

    def save(self, entity):
        row_type = _row_type(type(entity))
        row = self.session.get(row_type, entity.id)
        if row is None:
            raise NotFoundError(ENTITY_NAMES[type(entity)], entity.id)
        row.apply_entity(entity)
        self.session.flush()

    def delete(self, entity):
        row_type = _row_type(type(entity))
        row = self.session.get(row_type, entity.id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()

    def existing_imeis(self, imeis, *, exclude_product_id=None):
        imeis = [i for i in imeis if i]
        if not imeis:
            return set()
        query = self.session.query(models.Product.imei).filter(models.Product.imei.in_(imeis))
        if exclude_product_id:
            query = query.filter(models.Product.id != exclude_product_id)
        return {imei for (imei,) in query.all()}

    def po_number_exists(self, po_number):
        return (
            self.session.query(models.PurchaseOrder.id)
            .filter(models.PurchaseOrder.po_number == po_number)
            .first()
            is not None
        )

    def products_in_category(self, category_name):
        return (
            self.session.query(func.count(models.Product.id))
            .filter(models.Product.category == category_name)
            .scalar()
            or 0
        )

    def rename_category_on_products(self, old_name, new_name):
        rows = self.session.query(models.Product).filter(models.Product.category == old_name).all()
        for row in rows:
            row.category = new_name
        self.session.flush()
        return len(rows)

    def invoices_for_customer(self, customer_id):
        return (
            self.session.query(func.count(models.Invoice.id))
            .filter(models.Invoice.customer_id == customer_id)
            .scalar()
            or 0
        )

    def purchase_orders_for_supplier(self, supplier_id):
        return (
            self.session.query(func.count(models.PurchaseOrder.id))
            .filter(models.PurchaseOrder.supplier_id == supplier_id)
            .scalar()
            or 0
        )

    def invoice_numbers_for_product(self, product_id):
        rows = (
            self.session.query(models.Invoice.invoice_number)
            .join(models.InvoiceItem, models.InvoiceItem.invoice_id == models.Invoice.id)
            .filter(models.InvoiceItem.product_id == product_id)
            .distinct()
            .order_by(models.Invoice.invoice_number.asc())
            .all()
        )
        return [number for (number,) in rows]

    def next_sequence(self, name, *, floor=0):
        Seq = models.DocumentSequence
        seq = lock_for_update(self.session.query(Seq).filter(Seq.name == name)).first()
        if seq is None:
            try:
                with self.session.begin_nested():
                    seq = Seq(name=name, next_value=1)
                    self.session.add(seq)
            except IntegrityError:
                # Another writer created it first
                seq = lock_for_update(self.session.query(Seq).filter(Seq.name == name)).one()

        value = max(seq.next_value, floor + 1)
        seq.next_value = value + 1
        self.session.flush()
        return value


class SqlStore(InventoryStore):
    backend = "sql"

    def __init__(self, database=db):
        self.db = database

    @contextmanager
    def unit_of_work(self) -> Iterator[SqlUnitOfWork]:
        session = self.db.session
        try:
            if self.db.engine.dialect.name == "sqlite" and not session().in_transaction():
                session.execute(text("BEGIN IMMEDIATE"))
            yield SqlUnitOfWork(session)
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.info("Unique constraint rejected write: %s", exc.orig)
            raise ConflictError("Duplicate record rejected by the database.") from exc
        except (OperationalError, ProgrammingError) as exc:
            session.rollback()
            translated = translate_store_error(exc)
            if translated is not None:
                raise translated from exc
            raise
        except BaseException:
            session.rollback()
            raise

    def run(self, operation):
        return run_with_retry(operation)

    def create_schema(self) -> None:
        from stockbook import models  # noqa: F401

        self.db.create_all()

    def drop_schema(self) -> None:
        self.db.drop_all()

    def has_schema(self) -> bool:
        try:
            tables = set(inspect(self.db.engine).get_table_names())
        except OperationalError as exc:
            translated = translate_store_error(exc)
            if translated is not None:
                raise translated from exc
            raise
        return {t.__tablename__ for t in ROW_TYPES.values()}.issubset(tables)
