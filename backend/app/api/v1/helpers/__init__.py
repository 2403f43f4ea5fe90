"""
API v1 Helper Functions

Shared helper functions extracted from endpoint modules for better
code organization and reusability.
"""

from app.api.v1.helpers.pagination import build_pagination_info, page_to_skip
from app.api.v1.helpers.projects import (
    build_member_response,
    build_project_detail,
    build_project_summary,
    build_user_project_query,
)
from app.api.v1.helpers.responses import error_response, success_response
from app.api.v1.helpers.sorting import SORT_FIELDS, parse_sort

__all__ = [
    # Pagination helpers
    "build_pagination_info",
    "page_to_skip",
    # Project helpers
    "build_member_response",
    "build_project_detail",
    "build_project_summary",
    "build_user_project_query",
    # Response helpers
    "error_response",
    "success_response",
    # Sorting helpers
    "SORT_FIELDS",
    "parse_sort",
]
