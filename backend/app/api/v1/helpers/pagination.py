"""
Pagination Helper Functions

Shared utilities for building paginated responses.
"""

from typing import Any, Dict, Tuple

from app.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


def page_to_skip(page: int, limit: int) -> Tuple[int, int]:
    """
    Clamp page/limit query values and convert them to a skip offset.

    Returns:
        Tuple of (skip, limit)
    """
    limit = max(1, min(limit or DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT))
    page = max(1, page or 1)
    return (page - 1) * limit, limit


def build_pagination_info(total: int, skip: int, limit: int) -> Dict[str, Any]:
    """
    Build the ``pagination`` block of a list response.

    Args:
        total: Total number of items across all pages
        skip: Number of items skipped
        limit: Maximum items per page

    Returns:
        Dictionary with page, pages, total, limit, hasNext and hasPrev
    """
    page = (skip // limit) + 1 if limit > 0 else 1
    pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "page": page,
        "pages": pages,
        "total": total,
        "limit": limit,
        "hasNext": page < pages,
        "hasPrev": page > 1,
    }
