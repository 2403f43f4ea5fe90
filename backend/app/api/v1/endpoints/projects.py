from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api import deps
from app.api.v1.helpers import (
    build_member_response,
    build_pagination_info,
    build_project_detail,
    build_project_summary,
    build_user_project_query,
    page_to_skip,
    parse_sort,
    success_response,
)
from app.api.v1.helpers.responses import (
    RESP_401,
    RESP_AUTH_400,
    RESP_AUTH_400_404,
    RESP_AUTH_400_404_409,
    RESP_AUTH_404,
)
from app.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.models.principal import Principal
from app.schemas.project import (
    ProjectCreate,
    ProjectListStatus,
    ProjectMemberInvite,
    ProjectMemberRoleUpdate,
    ProjectUpdate,
)
from app.services.projects import ProjectService

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    responses={**RESP_401, **RESP_AUTH_400},
)
async def create_project(
    project_in: ProjectCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Create a new project. The caller becomes its first admin and a unique
    invitation code (plus a QR image of the join link) is issued.
    """
    project = await service.create(project_in.model_dump(), principal)
    return success_response(build_project_detail(project), "Project created successfully")


@router.get("", summary="List my projects", responses={**RESP_AUTH_400})
async def read_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    sort: str = Query("-updatedAt", description="name, createdAt or updatedAt; prefix - for descending"),
    search: Optional[str] = Query(None, max_length=100),
    status_filter: Optional[ProjectListStatus] = Query(None, alias="status"),
    role: Optional[str] = Query(None, description="Only projects where I hold this role"),
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Projects where the caller is an active member. Deleted projects are never listed.
    """
    sort_by, sort_order = parse_sort(sort)
    query = build_user_project_query(principal.user_id, status_filter, search, role)
    skip, limit = page_to_skip(page, limit)

    projects, total = await service.list_projects(query, skip, limit, sort_by, sort_order)

    return success_response(
        [build_project_summary(p, principal.user_id) for p in projects],
        "Projects retrieved successfully",
        pagination=build_pagination_info(total, skip, limit),
    )


@router.post(
    "/join/{invitation_code}",
    summary="Join a project by invitation code",
    responses={**RESP_AUTH_400_404_409},
)
async def join_project(
    invitation_code: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    project, member = await service.join(invitation_code, principal)
    return success_response(
        {"projectId": project.id, "member": build_member_response(member).model_dump(by_alias=True)},
        "Successfully joined the project",
    )


@router.get("/{project_id}", summary="Get project details", responses={**RESP_AUTH_404})
async def read_project(
    project_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    project = await service.get(project_id, principal.user_id)
    return success_response(build_project_detail(project), "Project retrieved successfully")


@router.put("/{project_id}", summary="Update a project", responses={**RESP_AUTH_400_404})
async def update_project(
    project_id: str,
    project_in: ProjectUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Update name, description, status (active/archived) or settings. Admin only.
    """
    patch = project_in.model_dump(exclude_unset=True)
    project = await service.update(project_id, patch, principal.user_id)
    return success_response(build_project_detail(project), "Project updated successfully")


@router.post("/{project_id}/archive", summary="Archive a project", responses={**RESP_AUTH_404})
async def archive_project(
    project_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    project = await service.archive(project_id, principal.user_id)
    return success_response(build_project_detail(project), "Project archived successfully")


@router.delete("/{project_id}", summary="Delete a project", responses={**RESP_AUTH_404})
async def delete_project(
    project_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Soft delete: the project is flagged as deleted and disappears from every
    endpoint, but the record is kept. Creator only.
    """
    await service.soft_delete(project_id, principal.user_id)
    return success_response(None, "Project deleted successfully")


@router.post(
    "/{project_id}/invite",
    status_code=status.HTTP_201_CREATED,
    summary="Invite a member",
    responses={**RESP_AUTH_400_404_409},
)
async def invite_member(
    project_id: str,
    invite_in: ProjectMemberInvite,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Invite someone by email or user ID. Inviting a pending identity again
    refreshes its invitation date.
    """
    member = await service.invite(
        project_id,
        principal.user_id,
        email=invite_in.email,
        user_id=invite_in.user_id,
        role=invite_in.role,
    )
    return success_response(build_member_response(member), "Invitation sent successfully")


@router.get("/{project_id}/members", summary="List project members", responses={**RESP_AUTH_404})
async def read_members(
    project_id: str,
    status_filter: Optional[Literal["invited", "active", "removed"]] = Query(None, alias="status"),
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    members = await service.get_members(project_id, principal.user_id, status_filter)
    return success_response(
        [build_member_response(m) for m in members], "Members retrieved successfully"
    )


@router.put(
    "/{project_id}/members/{member_id}/role",
    summary="Change a member's role",
    responses={**RESP_AUTH_400_404_409},
)
async def update_member_role(
    project_id: str,
    member_id: str,
    role_in: ProjectMemberRoleUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    member = await service.update_role(project_id, member_id, role_in.role, principal.user_id)
    return success_response(build_member_response(member), "Member role updated successfully")


@router.delete(
    "/{project_id}/members/{member_id}",
    summary="Remove a member",
    responses={**RESP_AUTH_400_404_409},
)
async def remove_member(
    project_id: str,
    member_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    member = await service.remove_member(project_id, member_id, principal.user_id)
    return success_response(build_member_response(member), "Member removed successfully")


@router.post("/{project_id}/leave", summary="Leave a project", responses={**RESP_AUTH_400_404})
async def leave_project(
    project_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: ProjectService = Depends(deps.get_project_service),
):
    await service.leave(project_id, principal.user_id)
    return success_response(None, "Successfully left the project")
