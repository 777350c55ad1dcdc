"""
Business logic for loan circulation.

Loans are created by the checkout process, which lives outside this
API.  ``CirculationService`` handles what happens afterwards: returning
a loan, listing the loans still out and showing a single loan with its
fine.

The return itself is delegated to the store's return procedure, which
updates the loan, frees the copy and creates a fine for a late return
in one transaction.  How much a late return costs is decided by the
store's fine policy; this service only reports whether a fine exists
and its amount.  The fine is read back on the same session as the
procedure so that it is visible immediately.
"""

import logging
from contextlib import ExitStack
from datetime import date
from typing import Callable, List, Optional

from library_api.app.core.errors import NotFoundError, ReturnFailedError, StoreUnavailableError
from library_api.app.schemas.loan import LoanDetail, LoanSummary, ReturnResult
from library_api.app.store.base import CirculationStore, StoreError


class CirculationService:
    """Service for returning loans and reading loan state."""

    def __init__(self, store: CirculationStore, clock: Callable[[], date] = date.today) -> None:
        self.store = store
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    async def return_loan(self, loan_id: int, return_date: Optional[date] = None) -> ReturnResult:
        """Register the return of ``loan_id``.

        ``return_date`` defaults to today.  Raises ``ReturnFailedError``
        when the loan does not exist, was already returned or the store
        could not run the procedure.
        """
        if return_date is None:
            return_date = self.clock()

        with ExitStack() as stack:
            try:
                # An unreachable store fails the return as well.
                session = stack.enter_context(self.store.session())
                session.register_return(loan_id, return_date)
            except (StoreError, StoreUnavailableError) as exc:
                self.logger.warning("Return of loan %s failed: %s", loan_id, exc)
                raise ReturnFailedError(f"Could not register return: {exc}") from exc
            fine = session.latest_fine(loan_id)

        if fine is not None:
            message = f"Fine of {fine.amount:.2f} generated for late return."
            self.logger.info("Loan %s returned on %s with fine %.2f", loan_id, return_date, fine.amount)
        else:
            message = "Returned on time. No fine generated."
            self.logger.info("Loan %s returned on %s", loan_id, return_date)

        return ReturnResult(
            loan_id=loan_id,
            return_date=return_date,
            fine_generated=fine is not None,
            fine_amount=fine.amount if fine is not None else 0.0,
            message=message,
        )

    async def list_active_loans(self) -> List[LoanSummary]:
        with self.store.session() as session:
            return session.active_loans()

    async def get_loan_detail(self, loan_id: int) -> LoanDetail:
        with self.store.session() as session:
            loan = session.loan_detail(loan_id)
        if loan is None:
            raise NotFoundError(f"Loan not found with id {loan_id}")
        return loan
