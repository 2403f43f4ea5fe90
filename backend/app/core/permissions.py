"""
Project Role Hierarchy and Permission Evaluation

Roles form a total order: admin > member > viewer. Every role comparison in
the application goes through ``role_at_least`` so the permission evaluator and
the membership transition guards can never disagree.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from app.core.constants import MEMBER_STATUS_ACTIVE

if TYPE_CHECKING:
    from app.models.project import Project


class ProjectRole(str, Enum):
    """Project access levels, declared lowest to highest."""

    VIEWER = "viewer"
    MEMBER = "member"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)


_ROLE_ORDER = list(ProjectRole)

RoleLike = Union[ProjectRole, str]


def parse_role(role: RoleLike) -> ProjectRole:
    """Convert a stored or user-supplied role into a ProjectRole.

    Raises:
        ValueError: if the role is not one of admin, member, viewer.
    """
    if isinstance(role, ProjectRole):
        return role
    return ProjectRole(role)


def role_at_least(role: RoleLike, required: RoleLike) -> bool:
    """Return True if ``role`` is equal to or above ``required``."""
    return parse_role(role).rank >= parse_role(required).rank


def get_member_role(project: "Project", user_id: str) -> Optional[ProjectRole]:
    """
    Get the role of the active member bound to ``user_id``.

    Args:
        project: The project to inspect
        user_id: The user ID to look up

    Returns:
        The member's role, or None if the user is not an active member.
    """
    member = project.roster().find(user_id=user_id)
    if member is None or member.status != MEMBER_STATUS_ACTIVE:
        return None
    return parse_role(member.role)


def has_permission(project: "Project", user_id: str, required_role: RoleLike) -> bool:
    """
    Check if a user holds at least ``required_role`` on a project.

    The project creator always passes. Everyone else needs an active member
    record whose role is at or above the required one. Pure: no I/O.
    """
    if user_id == project.created_by:
        return True

    role = get_member_role(project, user_id)
    if role is None:
        return False
    return role_at_least(role, required_role)
