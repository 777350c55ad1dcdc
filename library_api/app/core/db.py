"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a cursor context manager (``get_cursor``) and
``init_db``, which creates the library schema on application start.
It uses SQLite as a lightweight embedded database; to switch to
another DBMS you would provide another implementation of the store
port in ``library_api.app.store``.

Applied migration versions are stored in the ``migrations`` table and
new migrations are executed in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings


logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: catalogue, patrons and circulation tables
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS books (
            book_id INTEGER PRIMARY KEY AUTOINCREMENT,
            isbn TEXT NOT NULL,
            title TEXT NOT NULL,
            publication_year INTEGER NOT NULL CHECK (publication_year > 0)
        );
        CREATE UNIQUE INDEX IF NOT EXISTS ux_books_isbn ON books(isbn);

        CREATE TABLE IF NOT EXISTS authors (
            author_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS book_authors (
            book_id INTEGER NOT NULL,
            author_id INTEGER NOT NULL,
            PRIMARY KEY (book_id, author_id),
            FOREIGN KEY(book_id) REFERENCES books(book_id) ON DELETE CASCADE,
            FOREIGN KEY(author_id) REFERENCES authors(author_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS patrons (
            patron_id INTEGER PRIMARY KEY AUTOINCREMENT,
            enrollment_number TEXT NOT NULL,
            name TEXT NOT NULL,
            email TEXT,
            phone TEXT,
            national_id TEXT
        );
        CREATE UNIQUE INDEX IF NOT EXISTS ux_patrons_enrollment ON patrons(enrollment_number);

        CREATE TABLE IF NOT EXISTS copies (
            copy_id INTEGER PRIMARY KEY AUTOINCREMENT,
            book_id INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'available' CHECK (status IN ('available', 'loaned')),
            FOREIGN KEY(book_id) REFERENCES books(book_id)
        );

        CREATE TABLE IF NOT EXISTS loans (
            loan_id INTEGER PRIMARY KEY AUTOINCREMENT,
            patron_id INTEGER NOT NULL,
            copy_id INTEGER NOT NULL,
            loan_date DATE NOT NULL,
            due_date DATE NOT NULL,
            actual_return_date DATE,
            FOREIGN KEY(patron_id) REFERENCES patrons(patron_id),
            FOREIGN KEY(copy_id) REFERENCES copies(copy_id)
        );
        CREATE INDEX IF NOT EXISTS idx_loans_patron_id ON loans(patron_id);

        CREATE TABLE IF NOT EXISTS fines (
            fine_id INTEGER PRIMARY KEY AUTOINCREMENT,
            loan_id INTEGER NOT NULL UNIQUE,
            amount REAL NOT NULL CHECK (amount >= 0),
            payment_date DATE,
            FOREIGN KEY(loan_id) REFERENCES loans(loan_id)
        );
        """,
    ),
    # Migration 2: loan overview projection and return audit trail
    (
        2,
        """
        CREATE VIEW IF NOT EXISTS loan_overview AS
        SELECT
            l.loan_id,
            l.patron_id,
            p.name AS patron_name,
            c.book_id,
            b.title AS book_title,
            l.copy_id,
            l.loan_date,
            l.due_date,
            l.actual_return_date,
            CASE WHEN l.actual_return_date IS NULL THEN 'ACTIVE' ELSE 'RETURNED' END AS status
        FROM loans l
        JOIN patrons p ON p.patron_id = l.patron_id
        JOIN copies c ON c.copy_id = l.copy_id
        JOIN books b ON b.book_id = c.book_id;

        CREATE TABLE IF NOT EXISTS return_audit (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            loan_id INTEGER NOT NULL,
            return_date DATE NOT NULL,
            fine_amount REAL NOT NULL DEFAULT 0,
            recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(loan_id) REFERENCES loans(loan_id)
        );
        """,
    ),
]


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured URL is an absolute path it is used directly,
    otherwise it is resolved relative to the project root.
    """
    db_url = database_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects keyed by column name
    and foreign key enforcement is switched on, which SQLite leaves
    disabled by default.  A ``casefold`` SQL function is registered so
    that title searches are case-insensitive beyond ASCII.
    """
    conn = sqlite3.connect(db_path or get_database_path(), timeout=settings.db_timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_cursor(db_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, reads the
    current schema version and applies every migration with a higher
    version number from ``MIGRATIONS``.
    """
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied migration %s", version)
                current_version = version
