"""
Pydantic models for library patrons.

A patron is identified to the business by its enrollment number,
which must be unique.  Contact fields are optional; when given the
email must be a deliverable-looking address and the national id must
be exactly eleven characters long.
"""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class PatronBase(CamelModel):
    enrollment_number: str = Field(..., min_length=1, max_length=20, examples=["2023001"])
    name: str = Field(..., min_length=1, max_length=150, examples=["João Silva"])
    email: Optional[EmailStr] = Field(None, max_length=150, examples=["joao@example.com"])
    phone: Optional[str] = Field(None, max_length=20)
    national_id: Optional[str] = Field(None, min_length=11, max_length=11, examples=["12345678901"])

    @field_validator("email", "phone", "national_id", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PatronCreate(PatronBase):
    """Schema for creating or replacing a patron."""
    pass


class PatronRead(PatronBase):
    """Schema for reading a patron."""

    patron_id: int
