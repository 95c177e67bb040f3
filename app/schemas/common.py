"""
Common schemas for API responses.

Every response body is an envelope: {success, data, message?} and, for
lists, an extra pagination block. Field names go out in camelCase.
"""
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema with camelCase aliases; snake_case is accepted on input too."""

    class Config:
        """Pydantic config."""

        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Message(CamelModel):
    """Generic message response."""

    success: bool = True
    message: str


class ErrorResponse(CamelModel):
    """Error response schema."""

    success: bool = False
    message: str
    errors: Optional[List[Any]] = None


class Pagination(CamelModel):
    """Pagination block for list responses."""

    page: int
    limit: int
    total: int
    pages: int


class DataResponse(CamelModel, Generic[T]):
    """Success response with data."""

    success: bool = True
    message: Optional[str] = None
    data: T


class PaginatedResponse(CamelModel, Generic[T]):
    """Success response with a page of items."""

    success: bool = True
    data: List[T]
    pagination: Pagination
