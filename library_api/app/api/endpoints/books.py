"""
Book endpoints.

CRUD over the catalogue plus title search and the number of authors
of a book.  Paths keep the Portuguese names (``/livros``) used by the
existing clients.
"""

from fastapi import APIRouter, Depends, Query, status

from library_api.app.api.deps import get_catalog_service
from library_api.app.api.handlers import success
from library_api.app.schemas.book import BookCreate
from library_api.app.services.catalog_service import CatalogService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    book_in: BookCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Create a book.  Fails with 400 when the ISBN is already registered."""
    book = await service.create(book_in)
    return success("Book created successfully", book=book.to_json())


@router.get("")
async def list_books(service: CatalogService = Depends(get_catalog_service)) -> dict:
    """Return every book ordered by title."""
    books = await service.list()
    return success(total=len(books), books=[book.to_json() for book in books])


# Declared before ``/{book_id}`` so that ``buscar`` is not taken for an id.
@router.get("/buscar")
async def search_books(
    titulo: str = Query(..., description="Part of the title, case-insensitive"),
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    books = await service.search(titulo)
    return success(total=len(books), books=[book.to_json() for book in books])


@router.get("/{book_id}")
async def get_book(book_id: int, service: CatalogService = Depends(get_catalog_service)) -> dict:
    book = await service.get(book_id)
    return success(book=book.to_json())


@router.put("/{book_id}")
async def update_book(
    book_id: int,
    book_in: BookCreate,
    service: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Replace the fields of a book.  Any id in the body is ignored."""
    book = await service.update(book_id, book_in)
    return success("Book updated successfully", book=book.to_json())


@router.delete("/{book_id}")
async def delete_book(book_id: int, service: CatalogService = Depends(get_catalog_service)) -> dict:
    await service.delete(book_id)
    return success("Book deleted successfully")


@router.get("/{book_id}/autores")
async def count_book_authors(book_id: int, service: CatalogService = Depends(get_catalog_service)) -> dict:
    total = await service.count_authors(book_id)
    return success(bookId=book_id, totalAuthors=total)
