"""
Business logic for the book catalogue.

``CatalogService`` adds the book-only queries (title search and the
author count) to the generic CRUD rules of ``EntityService``.
"""

from typing import List

from library_api.app.schemas.book import BookCreate, BookRead
from library_api.app.store.base import BookStore

from .entity_service import EntityService


class CatalogService(EntityService[BookCreate, BookRead]):
    """Service for managing books."""

    key_label = "ISBN"

    def __init__(self, store: BookStore) -> None:
        super().__init__(store)
        self.store: BookStore = store

    async def search(self, title: str) -> List[BookRead]:
        """Return books whose title contains ``title``, ignoring case.

        An empty result is a normal answer, not an error.
        """
        return self.store.search_by_title(title or "")

    async def count_authors(self, book_id: int) -> int:
        self._require(book_id)
        return self.store.count_authors(book_id)
