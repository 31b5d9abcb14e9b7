"""
Shared response shapes: the success envelope, paginated lists, and public
user fields. Everything on the wire is camelCase.
"""

import math
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase in JSON, readable from ORM objects"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope returned by every endpoint"""
    status_code: int
    data: Optional[T] = None
    message: str
    success: bool = True


class Page(CamelModel, Generic[T]):
    """One page of a list endpoint"""
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, limit: int) -> "Page[T]":
        return cls(items=items, total=total, page=page, limit=limit, total_pages=total_pages(total, limit))


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); zero when there is nothing to page."""
    if total <= 0 or limit <= 0:
        return 0
    return math.ceil(total / limit)


class UserPublic(CamelModel):
    """Fields of a user that other parties may see"""
    id: int
    firstname: str
    lastname: str


class UserContact(UserPublic):
    email: str
