"""psycopg2 adapter exposing the subset of the sqlite3 API the stores use."""
import psycopg2
import psycopg2.extras

from database.errors import StoreError


def to_postgres(query: str) -> str:
    """Rewrite SQLite-flavoured SQL for Postgres."""
    pg_query = query.replace('?', '%s')
    if "INSERT OR IGNORE" in pg_query.upper():
        pg_query = pg_query.replace("INSERT OR IGNORE", "INSERT")
        pg_query = pg_query.rstrip().rstrip(';') + " ON CONFLICT DO NOTHING"
    return pg_query


class PostgresCursor:
    def __init__(self, cursor):
        self._cursor = cursor
        self.rowcount = -1

    @property
    def description(self):
        return self._cursor.description

    def execute(self, query, params=None):
        try:
            self._cursor.execute(to_postgres(query), params)
        except psycopg2.Error as e:
            raise StoreError(f"Postgres query failed: {e}") from e
        self.rowcount = self._cursor.rowcount
        return self

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self):
        return self._cursor.fetchall()

    def close(self):
        self._cursor.close()


class PostgresConnection:
    def __init__(self, conn):
        self._conn = conn

    def cursor(self):
        # DictCursor rows support both row['col'] and row[0], like sqlite3.Row
        return PostgresCursor(self._conn.cursor(cursor_factory=psycopg2.extras.DictCursor))

    def execute(self, query, params=None):
        return self.cursor().execute(query, params)

    def commit(self):
        try:
            self._conn.commit()
        except psycopg2.Error as e:
            raise StoreError(f"Postgres commit failed: {e}") from e

    def rollback(self):
        try:
            self._conn.rollback()
        except psycopg2.Error as e:
            raise StoreError(f"Postgres rollback failed: {e}") from e

    def close(self):
        self._conn.close()


def get_postgres_connection(dsn: str) -> PostgresConnection:
    try:
        return PostgresConnection(psycopg2.connect(dsn))
    except psycopg2.Error as e:
        raise StoreError(f"Failed to connect to Postgres: {e}") from e
