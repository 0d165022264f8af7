# File: lexistack_app/db_instance.py
# Shared SQLAlchemy handle for LexiStack's SQLite content store.
import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()

# Applied to every new SQLite connection
CONNECTION_PRAGMAS = (
    "PRAGMA foreign_keys=ON;",
    "PRAGMA synchronous=NORMAL;",
    "PRAGMA busy_timeout=30000;",
)


def _is_file_database(cursor) -> bool:
    """In-memory databases (the test config) report an empty file name."""
    cursor.execute("PRAGMA database_list;")
    return any(row[1] == 'main' and row[2] for row in cursor.fetchall())


@event.listens_for(Engine, "connect")
def configure_sqlite_connection(dbapi_connection, _connection_record):
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    try:
        for pragma in CONNECTION_PRAGMAS:
            cursor.execute(pragma)
        # concurrent readers while an admin import writes
        if _is_file_database(cursor):
            cursor.execute("PRAGMA journal_mode=WAL;")
    finally:
        cursor.close()
