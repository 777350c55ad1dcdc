"""
Pydantic models for loans, fines and the return workflow.

Loans are created by the checkout process outside this API and are
only read or returned here.  ``LoanSummary`` is the denormalised row
of the loan overview (patron name, book title, dates, status) and
``LoanDetail`` extends it with the return date and the fine, if any.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel


LoanStatus = Literal["ACTIVE", "RETURNED"]


class FineRead(CamelModel):
    fine_id: int
    loan_id: int
    amount: float = Field(..., ge=0)
    payment_date: Optional[date] = None


class LoanSummary(CamelModel):
    loan_id: int
    patron_name: str
    book_title: str
    loan_date: date
    due_date: date
    status: LoanStatus


class LoanDetail(LoanSummary):
    """A single loan together with its fine.

    ``fine`` is ``None`` when the loan has not produced a fine, which
    is serialised as an explicit ``null``.
    """

    patron_id: int
    book_id: int
    copy_id: int
    actual_return_date: Optional[date] = None
    fine: Optional[FineRead] = None


class ReturnRequest(CamelModel):
    """Optional body of the return endpoint; today is used when omitted."""

    return_date: Optional[date] = Field(None, examples=["2025-11-29"])


class ReturnResult(CamelModel):
    loan_id: int
    return_date: date
    fine_generated: bool
    fine_amount: float = 0.0
    message: str
