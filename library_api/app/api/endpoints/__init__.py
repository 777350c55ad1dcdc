"""
Endpoint subpackage.

Each module defines an APIRouter for a specific domain (books,
patrons, loans).  The routers are aggregated in ``router.py``.
"""
