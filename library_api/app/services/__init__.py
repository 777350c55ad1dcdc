"""
Service layer.

Each service encapsulates the business rules of one domain and talks
to storage only through the store port in ``library_api.app.store``.
Services are created once by ``create_app`` and shared by all
requests; they keep no state between calls.
"""
