"""
Shared Constants

Centralized constants used across the application to ensure consistency.
"""

import string
from typing import List

# Member lifecycle
MEMBER_STATUS_INVITED = "invited"
MEMBER_STATUS_ACTIVE = "active"
MEMBER_STATUS_REMOVED = "removed"

# Project lifecycle
PROJECT_STATUS_ACTIVE = "active"
PROJECT_STATUS_ARCHIVED = "archived"
PROJECT_STATUS_DELETED = "deleted"

# Statuses a client may set through a project update (deletion has its own endpoint)
PROJECT_UPDATABLE_STATUSES: List[str] = [
    PROJECT_STATUS_ACTIVE,
    PROJECT_STATUS_ARCHIVED,
]

# Field limits
PROJECT_NAME_MIN_LENGTH = 3
PROJECT_NAME_MAX_LENGTH = 100
PROJECT_DESCRIPTION_MAX_LENGTH = 500
PROJECT_MAX_MEMBERS_MIN = 1
PROJECT_MAX_MEMBERS_MAX = 1000

# Invitation codes
INVITATION_CODE_ALPHABET = string.ascii_uppercase + string.digits

# Listing
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
