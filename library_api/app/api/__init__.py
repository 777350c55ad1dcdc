"""
HTTP layer.

Endpoint modules in ``endpoints`` each define an ``APIRouter`` for one
domain.  They deserialize requests, call the services and wrap results
in the ``{"success": ..., ...}`` envelope.  ``router.py`` aggregates
them and ``handlers.py`` turns failures into error envelopes.
"""
