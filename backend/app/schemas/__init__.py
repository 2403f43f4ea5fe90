"""
Schema Exports

Centralized export of the request and response models used by the API.
"""

from app.schemas.project import (
    MemberResponse,
    PaginationInfo,
    ProjectCreate,
    ProjectDetail,
    ProjectMemberInvite,
    ProjectMemberRoleUpdate,
    ProjectSettingsUpdate,
    ProjectSummary,
    ProjectUpdate,
)

__all__ = [
    "MemberResponse",
    "PaginationInfo",
    "ProjectCreate",
    "ProjectDetail",
    "ProjectMemberInvite",
    "ProjectMemberRoleUpdate",
    "ProjectSettingsUpdate",
    "ProjectSummary",
    "ProjectUpdate",
]
