"""
Loan endpoints.

Returning a loan, listing active loans and showing a single loan with
its fine, served under ``/emprestimos``.  Loans are created by the
checkout process, which has no endpoint here.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends

from library_api.app.api.deps import get_circulation_service
from library_api.app.api.handlers import success
from library_api.app.schemas.loan import ReturnRequest
from library_api.app.services.circulation_service import CirculationService

router = APIRouter()


@router.post("/{loan_id}/devolver")
async def return_loan(
    loan_id: int,
    body: Optional[ReturnRequest] = Body(None),
    service: CirculationService = Depends(get_circulation_service),
) -> dict:
    """Register the return of a loan.

    The body is optional; without ``returnDate`` the current date is
    used.  The response tells whether a fine was generated and its
    amount.
    """
    return_date = body.return_date if body is not None else None
    result = await service.return_loan(loan_id, return_date)
    payload = result.to_json()
    message = payload.pop("message")
    return success("Return registered successfully", fineMessage=message, **payload)


# Declared before ``/{loan_id}`` so that ``ativos`` is not taken for an id.
@router.get("/ativos")
async def list_active_loans(service: CirculationService = Depends(get_circulation_service)) -> dict:
    loans = await service.list_active_loans()
    return success(total=len(loans), loans=[loan.to_json() for loan in loans])


@router.get("/{loan_id}")
async def get_loan(loan_id: int, service: CirculationService = Depends(get_circulation_service)) -> dict:
    loan = await service.get_loan_detail(loan_id)
    return success(loan=loan.to_json())
