"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """One page of results from a list endpoint."""

    items: list[T]
    total: int = Field(..., description="Total rows matching the filters.")
    page: int
    per_page: int
    pages: int


class Message(BaseModel):
    """Plain acknowledgement body."""

    detail: str


def page_response(page: Any, schema: type[BaseModel]) -> dict[str, Any]:
    """Serialize a service ``Page`` of ORM rows with ``schema``."""
    return {
        "items": [schema.model_validate(item) for item in page.items],
        "total": page.total,
        "page": page.page,
        "per_page": page.per_page,
        "pages": page.pages,
    }
