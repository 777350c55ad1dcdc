"""
Pydantic schema definitions for API payloads.

Books, patrons and loans each define their own models.  Schemas are
separated from the persistence layer so that the SQL layout can change
without affecting the JSON representation.
"""
