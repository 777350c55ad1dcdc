"""
FastAPI dependencies giving endpoints access to the services.

``create_app`` stores the service instances on ``app.state``; these
helpers fetch them for the current request.
"""

from fastapi import Request

from library_api.app.services.catalog_service import CatalogService
from library_api.app.services.circulation_service import CirculationService
from library_api.app.services.patron_service import PatronService


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_patron_service(request: Request) -> PatronService:
    return request.app.state.patron_service


def get_circulation_service(request: Request) -> CirculationService:
    return request.app.state.circulation_service
