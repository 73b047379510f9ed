# backend/stockbook/config.py
from __future__ import annotations
import os


def as_flag(raw, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return bool(raw)


def _env_flag(name: str, default: bool) -> bool:
    return as_flag(os.environ.get(name), default)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stockbook.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockbook.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" uses SQLALCHEMY_DATABASE_URI; "local" keeps entities in a JSON file
    # (or purely in memory when LOCAL_STORE_PATH is unset).
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")
    LOCAL_STORE_PATH = os.environ.get("LOCAL_STORE_PATH")

    # Stock ledger policy switches
    RECORD_BUYER_ON_SELL_OUT = _env_flag("RECORD_BUYER_ON_SELL_OUT", True)
    CLEAR_BUYER_ON_UNARCHIVE = _env_flag("CLEAR_BUYER_ON_UNARCHIVE", True)

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }
