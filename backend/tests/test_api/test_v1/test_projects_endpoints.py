"""Tests for project API endpoints.

Endpoints are called directly with a mocked ProjectService; the service
itself is covered in test_services.
"""

import asyncio

import pytest

from app.core.exceptions import LastAdminError, ValidationError
from app.schemas.project import (
    ProjectCreate,
    ProjectMemberInvite,
    ProjectMemberRoleUpdate,
    ProjectUpdate,
)
from tests.mocks.projects import make_member, make_project


class TestCreateProject:
    def test_returns_envelope_with_detail(self, principal, service):
        from app.api.v1.endpoints.projects import create_project

        service.create.return_value = make_project()

        result = asyncio.run(
            create_project(
                project_in=ProjectCreate(name="Test Project", isPublic=True),
                principal=principal,
                service=service,
            )
        )

        assert result["success"] is True
        assert result["data"]["invitationCode"] == "ABCD1234"
        assert result["data"]["members"][0]["role"] == "admin"
        data, creator = service.create.call_args[0]
        assert data["name"] == "Test Project"
        assert data["is_public"] is True
        assert creator is principal


class TestReadProjects:
    def test_lists_with_pagination(self, principal, service):
        from app.api.v1.endpoints.projects import read_projects

        service.list_projects.return_value = ([make_project()], 11)

        result = asyncio.run(
            read_projects(
                page=2,
                limit=5,
                sort="name",
                search=None,
                status_filter=None,
                role=None,
                principal=principal,
                service=service,
            )
        )

        query, skip, limit, sort_by, sort_order = service.list_projects.call_args[0]
        assert query["members"]["$elemMatch"]["identity.user_id"] == "user-1"
        assert (skip, limit, sort_by, sort_order) == (5, 5, "name", 1)
        assert result["pagination"] == {
            "page": 2,
            "pages": 3,
            "total": 11,
            "limit": 5,
            "hasNext": True,
            "hasPrev": True,
        }
        assert result["data"][0]["role"] == "admin"

    def test_bad_sort_is_validation_error(self, principal, service):
        from app.api.v1.endpoints.projects import read_projects

        with pytest.raises(ValidationError):
            asyncio.run(
                read_projects(
                    page=1,
                    limit=10,
                    sort="-owner",
                    search=None,
                    status_filter=None,
                    role=None,
                    principal=principal,
                    service=service,
                )
            )
        service.list_projects.assert_not_awaited()


class TestProjectDetailAndUpdate:
    def test_read_project(self, principal, service):
        from app.api.v1.endpoints.projects import read_project

        service.get.return_value = make_project(total_tasks=10, completed_tasks=7)

        result = asyncio.run(read_project(project_id="project-1", principal=principal, service=service))

        assert result["data"]["progress"] == 70
        service.get.assert_awaited_once_with("project-1", "user-1")

    def test_update_passes_only_set_fields(self, principal, service):
        from app.api.v1.endpoints.projects import update_project

        service.update.return_value = make_project()

        asyncio.run(
            update_project(
                project_id="project-1",
                project_in=ProjectUpdate(name="Renamed", settings={"maxMembers": 10}),
                principal=principal,
                service=service,
            )
        )

        service.update.assert_awaited_once_with(
            "project-1", {"name": "Renamed", "settings": {"max_members": 10}}, "user-1"
        )

    def test_update_forwards_explicit_null(self, principal, service):
        from app.api.v1.endpoints.projects import update_project

        service.update.return_value = make_project()

        asyncio.run(
            update_project(
                project_id="project-1",
                project_in=ProjectUpdate.model_validate({"settings": {"maxMembers": None}}),
                principal=principal,
                service=service,
            )
        )

        service.update.assert_awaited_once_with(
            "project-1", {"settings": {"max_members": None}}, "user-1"
        )

    def test_archive(self, principal, service):
        from app.api.v1.endpoints.projects import archive_project

        service.archive.return_value = make_project(status="archived")

        result = asyncio.run(archive_project(project_id="project-1", principal=principal, service=service))

        assert result["data"]["status"] == "archived"

    def test_delete(self, principal, service):
        from app.api.v1.endpoints.projects import delete_project

        result = asyncio.run(delete_project(project_id="project-1", principal=principal, service=service))

        assert result == {"success": True, "message": "Project deleted successfully", "data": None}
        service.soft_delete.assert_awaited_once_with("project-1", "user-1")


class TestMembershipEndpoints:
    def test_invite_by_email(self, principal, service):
        from app.api.v1.endpoints.projects import invite_member

        service.invite.return_value = make_member(email="member2@test.com", status="invited")

        result = asyncio.run(
            invite_member(
                project_id="project-1",
                invite_in=ProjectMemberInvite(email="member2@test.com"),
                principal=principal,
                service=service,
            )
        )

        assert result["data"]["status"] == "invited"
        assert result["data"]["email"] == "member2@test.com"
        service.invite.assert_awaited_once_with(
            "project-1", "user-1", email="member2@test.com", user_id=None, role="member"
        )

    def test_invite_requires_single_identity(self):
        from pydantic import ValidationError as PydanticValidationError

        with pytest.raises(PydanticValidationError):
            ProjectMemberInvite(email="a@test.com", userId="user-2")
        with pytest.raises(PydanticValidationError):
            ProjectMemberInvite()

    def test_join(self, principal, service):
        from app.api.v1.endpoints.projects import join_project

        member = make_member(user_id="user-1")
        service.join.return_value = (make_project(), member)

        result = asyncio.run(join_project(invitation_code="abcd1234", principal=principal, service=service))

        assert result["data"]["projectId"] == "project-1"
        assert result["data"]["member"]["userId"] == "user-1"
        service.join.assert_awaited_once_with("abcd1234", principal)

    def test_members_list(self, principal, service):
        from app.api.v1.endpoints.projects import read_members

        service.get_members.return_value = [make_member(user_id="user-2")]

        result = asyncio.run(
            read_members(project_id="project-1", status_filter="active", principal=principal, service=service)
        )

        assert len(result["data"]) == 1
        service.get_members.assert_awaited_once_with("project-1", "user-1", "active")

    def test_update_role(self, principal, service):
        from app.api.v1.endpoints.projects import update_member_role

        service.update_role.return_value = make_member(user_id="user-2", role="viewer")

        result = asyncio.run(
            update_member_role(
                project_id="project-1",
                member_id="member-2",
                role_in=ProjectMemberRoleUpdate(role="viewer"),
                principal=principal,
                service=service,
            )
        )

        assert result["data"]["role"] == "viewer"
        service.update_role.assert_awaited_once_with("project-1", "member-2", "viewer", "user-1")

    def test_remove_propagates_domain_error(self, principal, service):
        from app.api.v1.endpoints.projects import remove_member

        service.remove_member.side_effect = LastAdminError("member-creator")

        with pytest.raises(LastAdminError):
            asyncio.run(
                remove_member(
                    project_id="project-1", member_id="member-creator", principal=principal, service=service
                )
            )

    def test_leave(self, principal, service):
        from app.api.v1.endpoints.projects import leave_project

        result = asyncio.run(leave_project(project_id="project-1", principal=principal, service=service))

        assert result["success"] is True
        service.leave.assert_awaited_once_with("project-1", "user-1")
