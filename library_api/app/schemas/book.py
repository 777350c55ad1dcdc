"""
Pydantic models for books.

``BookBase`` holds the mutable fields shared by requests and
responses; ``BookCreate`` is accepted for both creation and full
updates, and ``BookRead`` adds the store-assigned ``book_id``.  Any
id sent by a client in a request body is ignored.
"""

from pydantic import Field

from .base import CamelModel


class BookBase(CamelModel):
    isbn: str = Field(..., min_length=1, max_length=30, examples=["978-8535914849"])
    title: str = Field(..., min_length=1, max_length=255, examples=["Banco de Dados"])
    publication_year: int = Field(..., gt=0, examples=[2023])


class BookCreate(BookBase):
    """Schema for creating or replacing a book."""
    pass


class BookRead(BookBase):
    """Schema for reading a book."""

    book_id: int
