from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python. Both accepted on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope shared by every endpoint."""

    success: bool = True
    message: str
    data: T


class MessageResponse(CamelModel):
    """Success envelope for operations that return no entity (deletes)."""

    success: bool = True
    message: str


class HealthResponse(CamelModel):
    success: bool = True
    message: str
    timestamp: datetime
