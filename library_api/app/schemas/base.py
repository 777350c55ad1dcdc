"""
Shared base model for API schemas.

Python code uses snake_case attribute names while the JSON exchanged
with clients uses camelCase (``publicationYear``, ``enrollmentNumber``).
Input payloads are accepted in either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

    def to_json(self) -> dict:
        """Serialize using camelCase keys and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")
