"""
Shared pydantic base classes for API schemas.

Request and response bodies use camelCase keys on the wire and snake_case
attributes in Python.
"""
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    class Config:
        """Pydantic configuration."""

        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SuccessResponse(CamelModel):
    """Envelope carried by every successful response."""

    success: bool = Field(True, description="Always true for successful responses")


class MessageResponse(SuccessResponse):
    """Envelope with a human-readable confirmation message."""

    message: str = Field(..., description="Confirmation message")
