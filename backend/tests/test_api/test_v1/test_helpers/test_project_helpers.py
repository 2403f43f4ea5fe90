"""Tests for project list queries and read models."""

import pytest

from app.api.v1.helpers.projects import (
    build_project_detail,
    build_project_summary,
    build_user_project_query,
)
from app.core.exceptions import ValidationError
from tests.mocks.projects import make_member, make_project


class TestBuildUserProjectQuery:
    def test_requires_active_membership(self):
        query = build_user_project_query("user-1")
        assert query["members"] == {
            "$elemMatch": {"identity.user_id": "user-1", "status": "active"}
        }

    def test_default_excludes_deleted(self):
        query = build_user_project_query("user-1")
        assert query["status"] == {"$ne": "deleted"}

    def test_all_still_excludes_deleted(self):
        query = build_user_project_query("user-1", status="all")
        assert query["status"] == {"$ne": "deleted"}

    def test_specific_status(self):
        query = build_user_project_query("user-1", status="archived")
        assert query["status"] == "archived"

    def test_role_filter_inside_member_match(self):
        query = build_user_project_query("user-1", role="ADMIN")
        assert query["members"]["$elemMatch"]["role"] == "admin"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_user_project_query("user-1", role="owner")
        assert exc_info.value.field == "role"

    def test_search_is_escaped(self):
        query = build_user_project_query("user-1", search="a.b")
        assert query["$or"][0] == {"name": {"$regex": r"a\.b", "$options": "i"}}


class TestBuildProjectSummary:
    def test_counts_and_caller_role(self):
        project = make_project(
            members=[
                make_member(user_id="user-2", role="viewer"),
                make_member(email="pending@test.com", status="invited"),
                make_member(user_id="user-3", status="removed"),
            ],
            total_tasks=10,
            completed_tasks=7,
        )

        summary = build_project_summary(project, "user-2")

        assert summary.role == "viewer"
        assert summary.member_count == 3
        assert summary.active_members == 2
        assert summary.pending_invites == 1
        assert summary.admins == ["user-1"]
        assert summary.task_count == 10
        assert summary.progress == 70

    def test_serializes_camel_case(self):
        data = build_project_summary(make_project(), "user-1").model_dump(by_alias=True)
        assert "invitationCode" in data
        assert "pendingInvites" in data
        assert data["role"] == "admin"


class TestBuildProjectDetail:
    def test_members_sorted_admins_first(self):
        project = make_project(
            members=[
                make_member(user_id="user-2", role="member", minutes=1),
                make_member(user_id="user-3", role="admin", minutes=5),
            ]
        )

        detail = build_project_detail(project)

        assert [m.user_id for m in detail.members] == ["user-1", "user-3", "user-2"]
        assert detail.progress == 0
