# Overview: Storage port shared by the relational and local adapters.

"""
Storage port

WHY: Invoice, purchase-order and registry logic must behave identically
whether entities live in a relational database or in the client-local
fallback store. Services talk to an InventoryStore and do every read and
write of one business operation through a single UnitOfWork.

CONTRACT:
- Everything done through a UnitOfWork becomes visible only when the
  unit_of_work() block exits normally; any exception discards it all.
- Entities returned by a UnitOfWork are detached copies. Mutating them has
  no effect until save() is called.
- Unique keys (category name, supplier name, product imei, PO number,
  invoice number) are enforced by the store and surface as ConflictError.
- next_sequence() is an atomic allocation; two units of work never receive
  the same value for the same sequence name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, TypeVar

T = TypeVar("T")


class UnitOfWork(ABC):
    @abstractmethod
    def get(self, entity_type: type[T], entity_id: str, *, for_update: bool = False) -> T | None:
        """Fetch one entity by id (row-locked when for_update is set)."""

    @abstractmethod
    def get_many(self, entity_type: type[T], ids: Iterable[str], *, for_update: bool = False) -> dict[str, T]:
        """Fetch several entities by id; missing ids are simply absent."""

    @abstractmethod
    def list(self, entity_type: type[T]) -> list[T]:
        """All entities of a type in their display order."""

    @abstractmethod
    def find_by_name(self, entity_type: type[T], name: str) -> T | None:
        """Lookup by unique name (Category, Supplier)."""

    @abstractmethod
    def count(self, entity_type: type) -> int:
        ...

    @abstractmethod
    def add(self, entity) -> None:
        ...

    @abstractmethod
    def save(self, entity) -> None:
        """Write back a modified entity previously returned by this unit of work."""

    @abstractmethod
    def delete(self, entity) -> None:
        ...

    @abstractmethod
    def existing_imeis(self, imeis: Iterable[str], *, exclude_product_id: str | None = None) -> set[str]:
        """Subset of imeis already held by some product."""

    @abstractmethod
    def po_number_exists(self, po_number: str) -> bool:
        ...

    @abstractmethod
    def products_in_category(self, category_name: str) -> int:
        ...

    @abstractmethod
    def rename_category_on_products(self, old_name: str, new_name: str) -> int:
        ...

    @abstractmethod
    def invoices_for_customer(self, customer_id: str) -> int:
        ...

    @abstractmethod
    def purchase_orders_for_supplier(self, supplier_id: str) -> int:
        ...

    @abstractmethod
    def invoice_numbers_for_product(self, product_id: str) -> list[str]:
        ...

    @abstractmethod
    def next_sequence(self, name: str, *, floor: int = 0) -> int:
        """
        Allocate the next value of a named sequence.

        The value is never lower than floor + 1, so a sequence created on top
        of existing rows continues after them.
        """


class InventoryStore(ABC):
    backend = "abstract"

    @abstractmethod
    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        ...

    def run(self, operation: Callable[[], T]) -> T:
        """Execute one business operation (adapters may add retry)."""
        return operation()

    @abstractmethod
    def create_schema(self) -> None:
        ...

    @abstractmethod
    def drop_schema(self) -> None:
        ...

    @abstractmethod
    def has_schema(self) -> bool:
        ...
