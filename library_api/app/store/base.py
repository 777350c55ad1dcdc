"""
Persistence port used by the services.

The services never talk to a database driver directly.  They depend on
the abstract stores declared here, which a concrete backend (see
``library_api.app.store.sqlite``) implements.  The port mirrors what the
relational store offers: row storage for books and patrons with a
unique natural key, two scalar aggregates, a loan overview projection
and an atomic return procedure.

Errors raised by a store are store-level: a violated unique index, a
violated foreign key or a rejected procedure call.  Translating them
into domain errors is the service's job.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from typing import Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from library_api.app.schemas.book import BookCreate, BookRead
from library_api.app.schemas.loan import FineRead, LoanDetail, LoanSummary
from library_api.app.schemas.patron import PatronCreate, PatronRead


CreateT = TypeVar("CreateT", bound=BaseModel)
ReadT = TypeVar("ReadT", bound=BaseModel)

# (due_date, return_date) -> amount of the fine; zero means no fine.
FinePolicy = Callable[[date, date], float]


class StoreError(Exception):
    """Base class of errors raised by a store implementation."""


class UniqueConstraintError(StoreError):
    """A unique index rejected the write."""


class ForeignKeyConstraintError(StoreError):
    """The write would leave dangling references."""


class ProcedureError(StoreError):
    """The return procedure refused the loan (unknown, already returned, bad date)."""


class EntityStore(ABC, Generic[CreateT, ReadT]):
    """Row storage for an entity with a surrogate id and a unique natural key.

    Subclasses declare ``entity_name`` (used in messages), ``id_field``
    and ``natural_key`` (attribute names on the schemas).
    """

    entity_name: str
    id_field: str
    natural_key: str

    @abstractmethod
    def get(self, entity_id: int) -> Optional[ReadT]:
        ...

    @abstractmethod
    def find_by_natural_key(self, value: str) -> Optional[ReadT]:
        ...

    @abstractmethod
    def list(self) -> List[ReadT]:
        """Return every record ordered by the entity's canonical sort key."""

    @abstractmethod
    def insert(self, data: CreateT) -> ReadT:
        """Insert a record and return it with the assigned id.

        Raises ``UniqueConstraintError`` when the natural key is taken.
        """

    @abstractmethod
    def update(self, entity_id: int, data: CreateT) -> Optional[ReadT]:
        """Overwrite every mutable field; ``None`` when the id is unknown."""

    @abstractmethod
    def delete(self, entity_id: int) -> bool:
        """Delete by id and report whether a row was removed.

        Raises ``ForeignKeyConstraintError`` while other rows still
        reference the record.
        """


class BookStore(EntityStore[BookCreate, BookRead]):
    entity_name = "Book"
    id_field = "book_id"
    natural_key = "isbn"

    @abstractmethod
    def search_by_title(self, fragment: str) -> List[BookRead]:
        """Case-insensitive substring match on the title, ordered by title."""

    @abstractmethod
    def count_authors(self, book_id: int) -> int:
        ...


class PatronStore(EntityStore[PatronCreate, PatronRead]):
    entity_name = "Patron"
    id_field = "patron_id"
    natural_key = "enrollment_number"

    @abstractmethod
    def count_active_loans(self, patron_id: int) -> int:
        ...


class CirculationSession(ABC):
    """Operations on loans bound to a single connection.

    Everything executed through one session sees the writes made
    earlier in the same session, which the return workflow relies on to
    read back the fine created by the return procedure.
    """

    @abstractmethod
    def register_return(self, loan_id: int, return_date: date) -> None:
        """Run the return procedure atomically.

        Marks the loan as returned, frees its copy and creates a fine
        when the return is late.  Raises ``ProcedureError`` if the loan
        does not exist or is no longer active.
        """

    @abstractmethod
    def latest_fine(self, loan_id: int) -> Optional[FineRead]:
        ...

    @abstractmethod
    def active_loans(self) -> List[LoanSummary]:
        ...

    @abstractmethod
    def loan_detail(self, loan_id: int) -> Optional[LoanDetail]:
        """The loan overview row plus its fine; ``None`` when unknown."""


class CirculationStore(ABC):
    @abstractmethod
    def session(self) -> AbstractContextManager[CirculationSession]:
        ...
