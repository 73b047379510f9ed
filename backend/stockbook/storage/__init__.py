# Overview: Storage port and adapter selection.

from .base import InventoryStore, UnitOfWork
from .local_store import LocalStore
from .sql_store import SqlStore

BACKENDS = ("sql", "local")


def build_store(config) -> InventoryStore:
    """Pick the adapter named by STORAGE_BACKEND."""
    backend = (config.get("STORAGE_BACKEND") or "sql").strip().lower()
    if backend == "sql":
        return SqlStore()
    if backend == "local":
        return LocalStore(config.get("LOCAL_STORE_PATH"))
    raise ValueError(f"Unknown STORAGE_BACKEND {backend!r}; expected one of {', '.join(BACKENDS)}")


__all__ = ["InventoryStore", "UnitOfWork", "LocalStore", "SqlStore", "build_store", "BACKENDS"]
