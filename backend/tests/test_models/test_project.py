"""Tests for the Project aggregate model and its roster."""

import pytest
from pydantic import ValidationError

from app.models.project import (
    BoundByUser,
    PendingByEmail,
    Project,
    ProjectMember,
    ProjectMetadata,
    ProjectSettings,
    normalize_email,
)
from tests.mocks.projects import make_member, make_project


class TestProjectModel:
    def test_defaults(self):
        project = Project(name="Test Project", created_by="user-1", invitation_code="ABCD1234")
        assert project.status == "active"
        assert project.members == []
        assert project.version == 0
        assert project.settings.is_public is False
        assert project.settings.allow_member_invite is True

    def test_id_alias_roundtrip(self):
        project = make_project()
        data = project.model_dump(by_alias=True)
        assert data["_id"] == "project-1"
        assert Project(**data).id == "project-1"

    def test_member_identity_discriminated_on_load(self):
        data = make_project(members=[make_member(email="a@test.com", status="invited")]).model_dump(
            by_alias=True
        )
        loaded = Project(**data)
        assert isinstance(loaded.members[0].identity, BoundByUser)
        assert isinstance(loaded.members[1].identity, PendingByEmail)

    def test_role_stored_as_string(self):
        member = ProjectMember(identity=BoundByUser(user_id="u"), role="viewer")
        assert member.model_dump()["role"] == "viewer"

    def test_max_members_bounds(self):
        with pytest.raises(ValidationError):
            ProjectSettings(max_members=0)
        with pytest.raises(ValidationError):
            ProjectSettings(max_members=1001)

    def test_completed_cannot_exceed_total(self):
        with pytest.raises(ValidationError):
            ProjectMetadata(total_tasks=1, completed_tasks=2)


class TestRoster:
    def test_email_lookup_is_case_insensitive(self):
        project = make_project(members=[make_member(email="Member2@Test.com ", status="invited")])
        assert project.roster().find(email="member2@test.com") is not None

    def test_bound_record_reachable_by_email(self):
        project = make_project(members=[make_member(user_id="user-2", email="m@test.com")])
        assert project.roster().find(email="M@test.com").user_id == "user-2"

    def test_removed_records_not_live(self):
        project = make_project(members=[make_member(user_id="user-2", status="removed")])
        roster = project.roster()
        assert roster.find(user_id="user-2") is None
        assert roster.seats_taken() == 1

    def test_find_all_distinct(self):
        project = make_project(
            members=[
                make_member(user_id="user-2", status="invited"),
                make_member(email="m@test.com", status="invited"),
            ]
        )
        found = project.roster().find_all(user_id="user-2", email="m@test.com")
        assert len(found) == 2

    def test_resolve_by_member_id_and_user_id(self):
        project = make_project(members=[make_member(user_id="user-2", id="member-2")])
        roster = project.roster()
        assert roster.resolve("member-2").user_id == "user-2"
        assert roster.resolve("user-2").id == "member-2"
        assert roster.resolve("nobody") is None

    def test_resolve_prefers_live_record(self):
        project = make_project(
            members=[
                make_member(user_id="user-2", status="removed", id="old"),
                make_member(user_id="user-2", status="active", id="new"),
            ]
        )
        assert project.roster().resolve("user-2").id == "new"

    def test_active_admins(self):
        project = make_project(
            members=[
                make_member(user_id="user-2", role="admin"),
                make_member(user_id="user-3", role="admin", status="invited"),
            ]
        )
        assert [m.user_id for m in project.roster().active_admins()] == ["user-1", "user-2"]


def test_normalize_email():
    assert normalize_email("  Foo@Example.COM ") == "foo@example.com"
