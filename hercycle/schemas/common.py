"""Common/shared schemas for pagination and the response envelope."""
import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=page_count(total, limit))


class Envelope(BaseModel, Generic[T]):
    """Success shape shared by every endpoint."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    count: Optional[int] = None
    pagination: Optional[Pagination] = None


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[FieldError]] = None


def page_count(total: int, limit: int) -> int:
    if limit <= 0:
        raise ValueError("limit must be positive")
    return math.ceil(total / limit)
