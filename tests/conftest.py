from datetime import date

import pytest
from fastapi.testclient import TestClient

from library_api.app.core.db import get_connection, init_db
from library_api.app.main import create_app
from library_api.app.services.catalog_service import CatalogService
from library_api.app.services.circulation_service import CirculationService
from library_api.app.services.patron_service import PatronService
from library_api.app.store.sqlite import (
    SQLiteBookStore,
    SQLiteCirculationStore,
    SQLitePatronStore,
    daily_rate_policy,
)


TODAY = date(2025, 6, 15)
DAILY_RATE = 2.5


@pytest.fixture
def db_path(tmp_path):
    # Each test gets its own database file (tmp_path is per-test)
    path = str(tmp_path / "test.db")
    init_db(path)
    return path


@pytest.fixture
def fine_policy():
    return daily_rate_policy(DAILY_RATE)


@pytest.fixture
def catalog(db_path):
    return CatalogService(SQLiteBookStore(db_path))


@pytest.fixture
def patrons(db_path):
    return PatronService(SQLitePatronStore(db_path))


@pytest.fixture
def circulation(db_path, fine_policy):
    return CirculationService(SQLiteCirculationStore(fine_policy, db_path), clock=lambda: TODAY)


@pytest.fixture
def client(db_path, fine_policy):
    app = create_app(database_url=db_path, fine_policy=fine_policy, clock=lambda: TODAY)
    with TestClient(app) as test_client:
        yield test_client


class Seeder:
    """Insert rows that no endpoint creates (authors, copies, loans)."""

    def __init__(self, db_path):
        self.db_path = db_path

    def _insert(self, sql, params):
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def book(self, isbn="978-0", title="Some Book", year=2020):
        return self._insert(
            "INSERT INTO books (isbn, title, publication_year) VALUES (?, ?, ?)",
            (isbn, title, year),
        )

    def patron(self, enrollment="E1", name="Reader"):
        return self._insert(
            "INSERT INTO patrons (enrollment_number, name) VALUES (?, ?)",
            (enrollment, name),
        )

    def author(self, name):
        return self._insert("INSERT INTO authors (name) VALUES (?)", (name,))

    def link_author(self, book_id, author_id):
        self._insert(
            "INSERT INTO book_authors (book_id, author_id) VALUES (?, ?)",
            (book_id, author_id),
        )

    def copy(self, book_id, status="loaned"):
        return self._insert(
            "INSERT INTO copies (book_id, status) VALUES (?, ?)",
            (book_id, status),
        )

    def loan(self, patron_id, copy_id, loan_date, due_date, loan_id=None, returned=None):
        return self._insert(
            "INSERT INTO loans (loan_id, patron_id, copy_id, loan_date, due_date, actual_return_date) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                loan_id,
                patron_id,
                copy_id,
                loan_date.isoformat(),
                due_date.isoformat(),
                returned.isoformat() if returned else None,
            ),
        )

    def loan_for(self, title, patron_name, loan_date, due_date, loan_id=None):
        """Create a book, a patron, a loaned copy and a loan in one go."""
        book_id = self.book(isbn=f"isbn-{title}", title=title)
        patron_id = self.patron(enrollment=f"E-{patron_name}", name=patron_name)
        copy_id = self.copy(book_id)
        return self.loan(patron_id, copy_id, loan_date, due_date, loan_id=loan_id)

    def fetch_one(self, sql, params=()):
        conn = get_connection(self.db_path)
        try:
            return conn.execute(sql, params).fetchone()
        finally:
            conn.close()


@pytest.fixture
def seed(db_path):
    return Seeder(db_path)
