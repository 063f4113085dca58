"""
Pagination Utility Module

Helpers for offset-based pagination of Weaviate listings and for wrapping a page of
items in a ``PaginatedResponse``.

Author: Weaviate Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PaginatedResponse:
    """
    One page of results.

    ``count`` is always the number of items on the page, and ``next_cursor`` is only
    kept when ``has_more`` is true.
    """

    items: List[Any] = field(default_factory=list)
    total: Optional[int] = None
    has_more: bool = False
    next_cursor: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "items", list(self.items))
        if not self.has_more:
            object.__setattr__(self, "next_cursor", None)

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "items": self.items,
            "count": self.count,
            "has_more": self.has_more,
        }
        if self.total is not None:
            out["total"] = self.total
        if self.next_cursor is not None:
            out["next_cursor"] = self.next_cursor
        return out


def create_paginated_response(
    items: Sequence[Any],
    total: Optional[int] = None,
    has_more: bool = False,
    next_cursor: Optional[str] = None,
) -> PaginatedResponse:
    return PaginatedResponse(items=list(items or []), total=total, has_more=has_more, next_cursor=next_cursor)


def empty_paginated_response() -> PaginatedResponse:
    return PaginatedResponse()


def normalize_pagination_params(
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    cursor: Optional[str] = None,
    max_limit: int = MAX_PAGE_SIZE,
) -> Dict[str, Any]:
    """
    Apply the default page size and clamp it to ``max_limit``.

    Args:
        limit (Optional[int]): Requested page size; falls back to the default when unset or 0
        offset (Optional[int]): Requested offset, passed through
        cursor (Optional[str]): Continuation token, passed through
        max_limit (int): Largest page size allowed

    Returns:
        Dict[str, Any]: ``limit``, ``offset`` and ``cursor``
    """
    return {
        "limit": min(limit or DEFAULT_PAGE_SIZE, max_limit),
        "offset": offset,
        "cursor": cursor,
    }


def has_more_items(offset: int, limit: int, total: int) -> bool:
    """Whether a page starting at ``offset`` leaves items beyond it."""
    return offset + limit < total


def get_next_offset(current_offset: int, limit: int, total: int) -> Optional[int]:
    """Offset of the following page, or None when the current page is the last."""
    nxt = current_offset + limit
    return nxt if nxt < total else None
