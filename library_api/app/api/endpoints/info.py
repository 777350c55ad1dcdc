"""
Service information endpoint.

Used by load balancers and deployment scripts to check that the API
is up and which version is running.
"""

from fastapi import APIRouter, Request

from library_api.app.api.handlers import success

router = APIRouter()


@router.get("")
async def health(request: Request) -> dict:
    return success(status="ok", service=request.app.title, version=request.app.version)
