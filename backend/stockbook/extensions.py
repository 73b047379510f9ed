# Overview: Flask extension instances for database and migrations, plus the active inventory store.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

EXTENSION_KEY = "stockbook"


def get_store():
    """The InventoryStore configured for the current app."""
    return current_app.extensions[EXTENSION_KEY]["store"]


def get_policy():
    """The StockPolicy configured for the current app."""
    return current_app.extensions[EXTENSION_KEY]["policy"]
