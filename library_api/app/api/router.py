"""
Top-level router.

Aggregates the domain routers.  The application mounts this router
under ``settings.api_prefix``.
"""

from fastapi import APIRouter

from .endpoints import books, info, loans, patrons

router = APIRouter()

router.include_router(books.router, prefix="/livros", tags=["books"])
router.include_router(patrons.router, prefix="/usuarios", tags=["patrons"])
router.include_router(loans.router, prefix="/emprestimos", tags=["loans"])
router.include_router(info.router, prefix="/health", tags=["info"])
