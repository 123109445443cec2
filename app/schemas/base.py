# app/schemas/base.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (dashboard + camera station)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    def to_wire(self) -> dict:
        """JSON-ready dict with wire (camelCase) keys, as sent over the WebSocket."""
        return self.model_dump(mode="json", by_alias=True)
