"""
Generic CRUD service for entities with a unique natural key.

Books (ISBN) and patrons (enrollment number) follow the same rules, so
both services are built on ``EntityService``.  The store tells the
service which attribute is the surrogate id and which one is the
natural key.

Uniqueness is checked before each write so that clients get a clear
message, but two concurrent requests can both pass that check.  The
store's unique index is the real guard: when it rejects a write, the
service reports the same ``DuplicateKeyError`` as the pre-check would.
"""

import logging
from typing import Generic, List

from library_api.app.core.errors import DuplicateKeyError, NotFoundError, ReferenceInUseError
from library_api.app.store.base import (
    CreateT,
    EntityStore,
    ForeignKeyConstraintError,
    ReadT,
    UniqueConstraintError,
)


class EntityService(Generic[CreateT, ReadT]):
    """Create, read, update and delete records through an ``EntityStore``."""

    # Human readable label of the natural key, used in error messages.
    key_label: str = "key"

    def __init__(self, store: EntityStore[CreateT, ReadT]) -> None:
        self.store = store
        self.logger = logging.getLogger(self.__class__.__module__)

    @property
    def entity_name(self) -> str:
        return self.store.entity_name

    def _natural_key(self, entity) -> str:
        return getattr(entity, self.store.natural_key)

    def _identity(self, entity) -> int:
        return getattr(entity, self.store.id_field)

    def _duplicate(self, key: str) -> DuplicateKeyError:
        return DuplicateKeyError(f"{self.entity_name} {self.key_label} already registered: {key}")

    def _require(self, entity_id: int) -> ReadT:
        entity = self.store.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} not found with id {entity_id}")
        return entity

    async def create(self, data: CreateT) -> ReadT:
        """Insert a new record unless its natural key is already taken."""
        key = self._natural_key(data)
        if self.store.find_by_natural_key(key) is not None:
            self.logger.warning("Rejected %s with duplicate %s %s", self.entity_name, self.key_label, key)
            raise self._duplicate(key)
        try:
            created = self.store.insert(data)
        except UniqueConstraintError as exc:
            # A concurrent writer inserted the same key after the pre-check.
            self.logger.warning("Unique index rejected %s %s: %s", self.entity_name, key, exc)
            raise self._duplicate(key) from exc
        self.logger.info("Created %s %s", self.entity_name.lower(), self._identity(created))
        return created

    async def get(self, entity_id: int) -> ReadT:
        return self._require(entity_id)

    async def list(self) -> List[ReadT]:
        return self.store.list()

    async def update(self, entity_id: int, data: CreateT) -> ReadT:
        """Overwrite every mutable field of ``entity_id``.

        Keeping the record's own natural key is allowed; taking the key of
        another record is not.  The id never changes.
        """
        self._require(entity_id)
        key = self._natural_key(data)
        owner = self.store.find_by_natural_key(key)
        if owner is not None and self._identity(owner) != entity_id:
            self.logger.warning(
                "Rejected update of %s %s: %s %s belongs to %s",
                self.entity_name, entity_id, self.key_label, key, self._identity(owner),
            )
            raise DuplicateKeyError(f"{self.entity_name} {self.key_label} already in use by another record: {key}")
        try:
            updated = self.store.update(entity_id, data)
        except UniqueConstraintError as exc:
            raise DuplicateKeyError(
                f"{self.entity_name} {self.key_label} already in use by another record: {key}"
            ) from exc
        if updated is None:
            # Deleted between the existence check and the write.
            raise NotFoundError(f"{self.entity_name} not found with id {entity_id}")
        self.logger.info("Updated %s %s", self.entity_name.lower(), entity_id)
        return updated

    async def delete(self, entity_id: int) -> None:
        """Delete a record; records still referenced elsewhere are kept."""
        self._require(entity_id)
        try:
            deleted = self.store.delete(entity_id)
        except ForeignKeyConstraintError as exc:
            self.logger.warning("Refused to delete %s %s: %s", self.entity_name, entity_id, exc)
            raise ReferenceInUseError(
                f"{self.entity_name} {entity_id} cannot be deleted while copies or loans still reference it"
            ) from exc
        if not deleted:
            raise NotFoundError(f"{self.entity_name} not found with id {entity_id}")
        self.logger.info("Deleted %s %s", self.entity_name.lower(), entity_id)
