"""
Patron endpoints.

CRUD over library patrons and the number of loans a patron currently
holds, served under ``/usuarios``.
"""

from fastapi import APIRouter, Depends, status

from library_api.app.api.deps import get_patron_service
from library_api.app.api.handlers import success
from library_api.app.schemas.patron import PatronCreate
from library_api.app.services.patron_service import PatronService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_patron(
    patron_in: PatronCreate,
    service: PatronService = Depends(get_patron_service),
) -> dict:
    """Register a patron.  Fails with 400 when the enrollment number is taken."""
    patron = await service.create(patron_in)
    return success("Patron created successfully", patron=patron.to_json())


@router.get("")
async def list_patrons(service: PatronService = Depends(get_patron_service)) -> dict:
    patrons = await service.list()
    return success(total=len(patrons), patrons=[patron.to_json() for patron in patrons])


@router.get("/{patron_id}")
async def get_patron(patron_id: int, service: PatronService = Depends(get_patron_service)) -> dict:
    patron = await service.get(patron_id)
    return success(patron=patron.to_json())


@router.put("/{patron_id}")
async def update_patron(
    patron_id: int,
    patron_in: PatronCreate,
    service: PatronService = Depends(get_patron_service),
) -> dict:
    patron = await service.update(patron_id, patron_in)
    return success("Patron updated successfully", patron=patron.to_json())


@router.delete("/{patron_id}")
async def delete_patron(patron_id: int, service: PatronService = Depends(get_patron_service)) -> dict:
    await service.delete(patron_id)
    return success("Patron deleted successfully")


@router.get("/{patron_id}/emprestimos-ativos")
async def count_patron_active_loans(
    patron_id: int,
    service: PatronService = Depends(get_patron_service),
) -> dict:
    total = await service.count_active_loans(patron_id)
    return success(patronId=patron_id, activeLoans=total)
