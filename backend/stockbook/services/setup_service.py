# Overview: Store initialization (schema + seed data) and status reporting.

"""
Setup Service

initialize_store is safe to run any number of times: the schema is created
if missing and each seed set is only inserted into an empty table, so an
operator's own categories, customers and suppliers are never touched.
"""

from __future__ import annotations

import logging

from stockbook.entities import Category, Customer, Invoice, Product, PurchaseOrder, Supplier

logger = logging.getLogger(__name__)

SEED_CATEGORIES = ("Smartphones", "Laptops", "Accessories", "Tablets")
WALK_IN_CUSTOMER = {"name": "Walk-in Customer", "phone": "N/A"}
DEFAULT_SUPPLIER = {"name": "Default Supplier", "email": "contact@default.com", "phone": "123-456-7890"}


def initialize_store(store) -> dict:
    """
    Create the schema and seed empty registries.

    Returns:
        {"backend", "seeded": {"categories": n, "customers": n, "suppliers": n}}
    """
    store.create_schema()

    def _op() -> dict:
        seeded = {"categories": 0, "customers": 0, "suppliers": 0}
        with store.unit_of_work() as uow:
            if uow.count(Category) == 0:
                for name in SEED_CATEGORIES:
                    uow.add(Category(name=name))
                seeded["categories"] = len(SEED_CATEGORIES)
            if uow.count(Customer) == 0:
                uow.add(Customer(**WALK_IN_CUSTOMER))
                seeded["customers"] = 1
            if uow.count(Supplier) == 0:
                uow.add(Supplier(**DEFAULT_SUPPLIER))
                seeded["suppliers"] = 1
        return seeded

    seeded = store.run(_op)
    logger.info("Store initialized (backend=%s, seeded=%s)", store.backend, seeded)
    return {"backend": store.backend, "seeded": seeded}


def store_status(store) -> dict:
    """
    Report whether the store is usable and how much it holds.

    Never raises for a missing schema; that is what this reports.
    """
    if not store.has_schema():
        return {"backend": store.backend, "initialized": False, "counts": {}}

    with store.unit_of_work() as uow:
        counts = {
            "products": uow.count(Product),
            "categories": uow.count(Category),
            "customers": uow.count(Customer),
            "suppliers": uow.count(Supplier),
            "invoices": uow.count(Invoice),
            "purchaseOrders": uow.count(PurchaseOrder),
        }
    return {"backend": store.backend, "initialized": True, "counts": counts}
