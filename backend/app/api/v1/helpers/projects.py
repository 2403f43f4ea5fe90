"""
Project Helper Functions

Shared helper functions for project-related endpoints: list queries and the
read models handed back to clients.
"""

import re
from typing import Any, Dict, Optional

from app.core.constants import (
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
    PROJECT_STATUS_DELETED,
)
from app.core.exceptions import ValidationError
from app.core.permissions import ProjectRole, get_member_role, parse_role
from app.models.project import Project, ProjectMember
from app.schemas.project import (
    MemberResponse,
    ProjectDetail,
    ProjectSettingsResponse,
    ProjectSummary,
)
from app.services.progress import calculate_progress
from app.services.projects import sort_members


def build_user_project_query(
    user_id: str,
    status: Optional[str] = None,
    search: Optional[str] = None,
    role: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a MongoDB query for the projects a user is an active member of.

    Args:
        user_id: The current user
        status: "active", "archived" or "all"; deleted projects never match
        search: Case-insensitive substring matched against name and description
        role: Only projects where the user holds exactly this role

    Returns:
        MongoDB query dict

    Raises:
        ValidationError: if ``role`` is not a known role
    """
    member_match: Dict[str, Any] = {
        "identity.user_id": user_id,
        "status": MEMBER_STATUS_ACTIVE,
    }
    if role:
        try:
            member_match["role"] = parse_role(role).value
        except ValueError:
            raise ValidationError("role", "Role must be one of: admin, member, viewer")

    query: Dict[str, Any] = {"members": {"$elemMatch": member_match}}

    if status and status != "all":
        query["status"] = status
    else:
        query["status"] = {"$ne": PROJECT_STATUS_DELETED}

    if search:
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]

    return query


def build_member_response(member: ProjectMember) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        user_id=member.user_id,
        email=member.email,
        role=member.role,
        status=member.status,
        joined_at=member.joined_at,
        invitation_sent_at=member.invitation_sent_at,
        invited_by=member.invited_by,
    )


def build_project_summary(project: Project, user_id: str) -> ProjectSummary:
    """Compact list item, including the caller's own role."""
    roster = project.roster()
    active = roster.with_status(MEMBER_STATUS_ACTIVE)
    role = get_member_role(project, user_id)
    if role is None and user_id == project.created_by:
        role = ProjectRole.ADMIN

    return ProjectSummary(
        id=project.id,
        name=project.name,
        description=project.description,
        created_by=project.created_by,
        admins=[m.user_id for m in roster.active_admins() if m.user_id],
        role=role.value if role else None,
        member_count=roster.seats_taken(),
        active_members=len(active),
        pending_invites=len(roster.with_status(MEMBER_STATUS_INVITED)),
        task_count=project.metadata.total_tasks,
        progress=calculate_progress(project.metadata),
        status=project.status,
        invitation_code=project.invitation_code,
        qr_code_url=project.qr_code_url,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def build_project_detail(project: Project) -> ProjectDetail:
    return ProjectDetail(
        id=project.id,
        name=project.name,
        description=project.description,
        created_by=project.created_by,
        invitation_code=project.invitation_code,
        qr_code_url=project.qr_code_url,
        status=project.status,
        settings=ProjectSettingsResponse(**project.settings.model_dump()),
        total_tasks=project.metadata.total_tasks,
        completed_tasks=project.metadata.completed_tasks,
        progress=calculate_progress(project.metadata),
        members=[build_member_response(m) for m in sort_members(project.members)],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )
