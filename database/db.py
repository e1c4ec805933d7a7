"""Database connection handling."""
import sqlite3
from pathlib import Path
from typing import Optional, Union

import config


def get_connection(db_path: Optional[Union[str, Path]] = None):
    """Get a database connection with row factory."""
    # Use Postgres if DB_URL is configured
    if config.DB_URL and "postgres" in config.DB_URL:
        from database.compat import get_postgres_connection
        return get_postgres_connection(config.DB_URL)

    conn = sqlite3.connect(str(db_path or config.DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
