"""
SQLite implementation of the persistence port.

Each entity-store call opens its own connection through
``core.db.get_connection`` and closes it before returning, so no
connection is shared between requests.  A circulation session keeps one
connection open for its whole lifetime instead; the return procedure
and the fine lookup that follows it must run on the same connection.

SQLite has no stored procedures, so the return procedure is written in
Python and executed inside a ``BEGIN IMMEDIATE`` transaction, which
takes the database write lock up front and makes the check of the loan
status and the updates that follow one atomic unit.

``sqlite3`` errors never leave this module untranslated: integrity
errors become ``UniqueConstraintError`` / ``ForeignKeyConstraintError``
and operational errors (locked or unreadable database) become
``StoreUnavailableError``.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional, Type

from pydantic import BaseModel

from library_api.app.core.db import get_connection
from library_api.app.core.errors import StoreUnavailableError
from library_api.app.schemas.book import BookRead
from library_api.app.schemas.loan import FineRead, LoanDetail, LoanSummary
from library_api.app.schemas.patron import PatronRead

from .base import (
    BookStore,
    CirculationSession,
    CirculationStore,
    EntityStore,
    FinePolicy,
    ForeignKeyConstraintError,
    PatronStore,
    ProcedureError,
    StoreError,
    UniqueConstraintError,
)


logger = logging.getLogger(__name__)


def _translate_integrity_error(exc: sqlite3.IntegrityError) -> StoreError:
    message = str(exc)
    if "UNIQUE" in message:
        return UniqueConstraintError(message)
    if "FOREIGN KEY" in message:
        return ForeignKeyConstraintError(message)
    return StoreError(message)


@contextmanager
def translate_errors(conn: sqlite3.Connection) -> Iterator[None]:
    """Roll back and re-raise driver errors as store errors."""
    try:
        yield
    except sqlite3.IntegrityError as exc:
        conn.rollback()
        raise _translate_integrity_error(exc) from exc
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Database error: %s", exc)
        raise StoreUnavailableError(f"Database unavailable: {exc}") from exc


@contextmanager
def connect(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Open a connection and translate driver errors raised while it is in use."""
    try:
        conn = get_connection(db_path)
    except sqlite3.Error as exc:
        raise StoreUnavailableError(f"Database unavailable: {exc}") from exc
    try:
        with translate_errors(conn):
            yield conn
    finally:
        conn.close()


# Range of an SQLite INTEGER; sqlite3 raises OverflowError when binding anything wider.
SQLITE_MIN_INTEGER = -(2 ** 63)
SQLITE_MAX_INTEGER = 2 ** 63 - 1


def storable_id(value: int) -> bool:
    """Whether ``value`` fits an INTEGER column and can name a stored row."""
    return SQLITE_MIN_INTEGER <= value <= SQLITE_MAX_INTEGER


def daily_rate_policy(rate: float) -> FinePolicy:
    """Build a fine policy charging ``rate`` per day past the due date."""

    def policy(due_date: date, return_date: date) -> float:
        overdue_days = (return_date - due_date).days
        return round(max(overdue_days, 0) * rate, 2)

    return policy


class SQLiteEntityStore(EntityStore):
    """Generic table-backed store.

    Subclasses set ``table``, ``columns`` (the mutable columns, named
    like the schema fields), ``order_by`` and ``read_model``.
    """

    table: str
    columns: tuple
    order_by: str
    read_model: Type[BaseModel]

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path

    def _to_model(self, row: Optional[sqlite3.Row]):
        if row is None:
            return None
        return self.read_model.model_validate(dict(row))

    def _fetch_one(self, conn: sqlite3.Connection, column: str, value):
        row = conn.execute(
            f"SELECT * FROM {self.table} WHERE {column} = ?",
            (value,),
        ).fetchone()
        return self._to_model(row)

    def get(self, entity_id: int):
        if not storable_id(entity_id):
            return None
        with connect(self.db_path) as conn:
            return self._fetch_one(conn, self.id_field, entity_id)

    def find_by_natural_key(self, value: str):
        with connect(self.db_path) as conn:
            return self._fetch_one(conn, self.natural_key, value)

    def list(self) -> List:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT * FROM {self.table} ORDER BY {self.order_by}"
            ).fetchall()
            return [self._to_model(row) for row in rows]

    def insert(self, data: BaseModel):
        values = data.model_dump()
        placeholders = ", ".join("?" for _ in self.columns)
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"INSERT INTO {self.table} ({', '.join(self.columns)}) VALUES ({placeholders})",
                tuple(values[column] for column in self.columns),
            )
            conn.commit()
            return self._fetch_one(conn, self.id_field, cursor.lastrowid)

    def update(self, entity_id: int, data: BaseModel):
        if not storable_id(entity_id):
            return None
        values = data.model_dump()
        assignments = ", ".join(f"{column} = ?" for column in self.columns)
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE {self.table} SET {assignments} WHERE {self.id_field} = ?",
                tuple(values[column] for column in self.columns) + (entity_id,),
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
            return self._fetch_one(conn, self.id_field, entity_id)

    def delete(self, entity_id: int) -> bool:
        if not storable_id(entity_id):
            return False
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"DELETE FROM {self.table} WHERE {self.id_field} = ?",
                (entity_id,),
            )
            conn.commit()
            return cursor.rowcount > 0

    def _scalar(self, sql: str, params: tuple) -> int:
        with connect(self.db_path) as conn:
            row = conn.execute(sql, params).fetchone()
            return int(row[0] or 0)


class SQLiteBookStore(SQLiteEntityStore, BookStore):
    table = "books"
    columns = ("isbn", "title", "publication_year")
    order_by = "casefold(title), book_id"
    read_model = BookRead

    def search_by_title(self, fragment: str) -> List[BookRead]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM books WHERE instr(casefold(title), ?) > 0 "
                "ORDER BY casefold(title), book_id",
                (fragment.casefold(),),
            ).fetchall()
            return [self._to_model(row) for row in rows]

    def count_authors(self, book_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM book_authors WHERE book_id = ?",
            (book_id,),
        )


class SQLitePatronStore(SQLiteEntityStore, PatronStore):
    table = "patrons"
    columns = ("enrollment_number", "name", "email", "phone", "national_id")
    order_by = "casefold(name), patron_id"
    read_model = PatronRead

    def count_active_loans(self, patron_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM loans WHERE patron_id = ? AND actual_return_date IS NULL",
            (patron_id,),
        )


class SQLiteCirculationSession(CirculationSession):
    def __init__(self, conn: sqlite3.Connection, fine_policy: FinePolicy) -> None:
        self.conn = conn
        self.fine_policy = fine_policy

    def register_return(self, loan_id: int, return_date: date) -> None:
        conn = self.conn
        with translate_errors(conn):
            self._run_return_procedure(conn, loan_id, return_date)

    def _run_return_procedure(self, conn: sqlite3.Connection, loan_id: int, return_date: date) -> None:
        conn.execute("BEGIN IMMEDIATE")
        try:
            loan = None
            if storable_id(loan_id):
                loan = conn.execute(
                    "SELECT loan_id, copy_id, loan_date, due_date, actual_return_date "
                    "FROM loans WHERE loan_id = ?",
                    (loan_id,),
                ).fetchone()
            if loan is None:
                raise ProcedureError(f"Loan {loan_id} not found")
            if loan["actual_return_date"] is not None:
                raise ProcedureError(f"Loan {loan_id} has already been returned")
            if return_date < date.fromisoformat(loan["loan_date"]):
                raise ProcedureError(
                    f"Return date {return_date.isoformat()} is earlier than the loan date {loan['loan_date']}"
                )

            conn.execute(
                "UPDATE loans SET actual_return_date = ? WHERE loan_id = ?",
                (return_date.isoformat(), loan_id),
            )
            conn.execute(
                "UPDATE copies SET status = 'available' WHERE copy_id = ?",
                (loan["copy_id"],),
            )

            amount = 0.0
            due_date = date.fromisoformat(loan["due_date"])
            if return_date > due_date:
                amount = round(float(self.fine_policy(due_date, return_date)), 2)
                if amount > 0:
                    conn.execute(
                        "INSERT INTO fines (loan_id, amount) VALUES (?, ?)",
                        (loan_id, amount),
                    )
                else:
                    amount = 0.0

            conn.execute(
                "INSERT INTO return_audit (loan_id, return_date, fine_amount) VALUES (?, ?, ?)",
                (loan_id, return_date.isoformat(), amount),
            )
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def latest_fine(self, loan_id: int) -> Optional[FineRead]:
        if not storable_id(loan_id):
            return None
        row = self.conn.execute(
            "SELECT * FROM fines WHERE loan_id = ? ORDER BY fine_id DESC LIMIT 1",
            (loan_id,),
        ).fetchone()
        return FineRead.model_validate(dict(row)) if row else None

    def active_loans(self) -> List[LoanSummary]:
        rows = self.conn.execute(
            "SELECT loan_id, patron_name, book_title, loan_date, due_date, status "
            "FROM loan_overview WHERE status = 'ACTIVE' ORDER BY due_date, loan_id"
        ).fetchall()
        return [LoanSummary.model_validate(dict(row)) for row in rows]

    def loan_detail(self, loan_id: int) -> Optional[LoanDetail]:
        if not storable_id(loan_id):
            return None
        row = self.conn.execute(
            "SELECT * FROM loan_overview WHERE loan_id = ?",
            (loan_id,),
        ).fetchone()
        if row is None:
            return None
        return LoanDetail.model_validate({**dict(row), "fine": self.latest_fine(loan_id)})


class SQLiteCirculationStore(CirculationStore):
    def __init__(self, fine_policy: FinePolicy, db_path: Optional[str] = None) -> None:
        self.fine_policy = fine_policy
        self.db_path = db_path

    @contextmanager
    def session(self) -> Iterator[SQLiteCirculationSession]:
        with connect(self.db_path) as conn:
            yield SQLiteCirculationSession(conn, self.fine_policy)
