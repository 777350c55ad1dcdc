"""
Application package initializer.

The code is organised in layers: ``core`` (settings, logging, database
access, errors), ``store`` (the persistence port and its SQLite
implementation), ``schemas`` (pydantic models), ``services`` (business
rules) and ``api`` (FastAPI routers).
"""

from .main import app  # noqa: F401
