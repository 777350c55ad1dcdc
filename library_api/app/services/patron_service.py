"""
Business logic for library patrons.

Patrons follow the generic CRUD rules with the enrollment number as
natural key, plus a lookup of how many loans a patron currently holds.
"""

from library_api.app.schemas.patron import PatronCreate, PatronRead
from library_api.app.store.base import PatronStore

from .entity_service import EntityService


class PatronService(EntityService[PatronCreate, PatronRead]):
    """Service for managing patrons."""

    key_label = "enrollment number"

    def __init__(self, store: PatronStore) -> None:
        super().__init__(store)
        self.store: PatronStore = store

    async def count_active_loans(self, patron_id: int) -> int:
        self._require(patron_id)
        return self.store.count_active_loans(patron_id)
