from typing import Generic, List, TypeVar
from math import ceil

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a sorted result set (page index is 0-based)."""

    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, content: List[T], page: int, size: int, total: int) -> "Page[T]":
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total,
            total_pages=ceil(total / size) if size else 0,
        )


class MessageResponse(BaseModel):
    message: str
