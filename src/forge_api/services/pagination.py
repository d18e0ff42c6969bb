# src/forge_api/services/pagination.py
"""Offset pagination and search patterns for SQLAlchemy queries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

LIKE_ESCAPE = "\\"


def contains(term: str) -> str:
    """LIKE pattern matching ``term`` anywhere; its wildcards match literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class Page(Generic[T]):
    """One page of a list query."""

    items: list[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        if not self.per_page:
            return 1
        return max(1, math.ceil(self.total / self.per_page))


def paginate(query: Any, page: int, per_page: int) -> Page[Any]:
    """Apply limit/offset to a query and count the unpaginated total."""
    page = max(page, 1)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return Page(items=items, total=total, page=page, per_page=per_page)
