"""
Common Pydantic schemas shared by services.

This module provides:
- Pagination parameters
- A generic page container returned by list operations
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class PaginationParams(BaseModel):
    """
    Offset/limit pagination.

    Attributes:
        limit: Maximum number of items to return (1-100)
        offset: Number of items to skip
    """

    limit: int = Field(default=20, ge=1, le=100, description="Items per page")
    offset: int = Field(default=0, ge=0, description="Items to skip")


class Page(BaseModel, Generic[DataT]):
    """
    Internal page container returned by services.

    ``items`` are usually ORM instances, which the GraphQL layer reads
    attribute by attribute.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: list[DataT]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
