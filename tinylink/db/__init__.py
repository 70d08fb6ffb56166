"""Database module for the TinyLink application."""
from tinylink.db.base import Database, get_engine_config
from tinylink.db.session import get_db, get_database, db_transaction

__all__ = [
    "Database",
    "get_engine_config",
    "get_db",
    "get_database",
    "db_transaction",
]
