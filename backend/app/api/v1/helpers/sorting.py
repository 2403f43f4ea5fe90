"""
Sorting Helper Functions

Shared utilities for sorting list endpoints.
"""

from typing import Dict, Tuple

from app.core.exceptions import ValidationError

# Public sort keys mapped to stored field names
SORT_FIELDS: Dict[str, Dict[str, str]] = {
    "projects": {
        "name": "name",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    },
}

DEFAULT_PROJECT_SORT = "-updatedAt"


def parse_sort(sort: str, entity_type: str = "projects") -> Tuple[str, int]:
    """
    Parse a sort expression like ``-updatedAt`` into a MongoDB field and direction.

    A leading ``-`` sorts descending.

    Raises:
        ValidationError: if the field is not sortable
    """
    sort = (sort or DEFAULT_PROJECT_SORT).strip()
    direction = -1 if sort.startswith("-") else 1
    key = sort.lstrip("-")

    fields = SORT_FIELDS.get(entity_type, {})
    if key not in fields:
        raise ValidationError(
            "sort", f"Sort must be one of: {', '.join(sorted(fields))} (prefix with - for descending)"
        )
    return fields[key], direction
