"""
Persistence layer.

``base`` declares the port the services depend on; ``sqlite`` is the
implementation used by the application.
"""
