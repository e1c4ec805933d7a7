"""Database module."""
from database.db import get_connection
from database.schema import init_db, reset_db
from database.errors import StoreError

__all__ = ['get_connection', 'init_db', 'reset_db', 'StoreError']
