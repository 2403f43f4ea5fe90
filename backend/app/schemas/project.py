from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request and response bodies use camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectCreate(CamelModel):
    name: str = Field(..., description="The name of the project", examples=["Website Relaunch"])
    description: Optional[str] = Field(None, description="Free text description, at most 500 characters")
    is_public: bool = Field(False, description="Anyone holding the invitation code may join")
    allow_member_invite: bool = Field(True, description="Members (not only admins) may invite")
    max_members: Optional[int] = Field(None, description="Seat limit between 1 and 1000")


class ProjectSettingsUpdate(CamelModel):
    is_public: Optional[bool] = None
    allow_member_invite: Optional[bool] = None
    max_members: Optional[int] = None


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, description="New name for the project")
    description: Optional[str] = Field(None, description="New description")
    status: Optional[str] = Field(None, description="active or archived")
    settings: Optional[ProjectSettingsUpdate] = None


class ProjectMemberInvite(CamelModel):
    email: Optional[str] = Field(None, description="Email address to invite", examples=["member2@test.com"])
    user_id: Optional[str] = Field(None, description="ID of an existing user to invite")
    role: str = Field("member", description="Role to assign (admin, member, viewer)")

    @model_validator(mode="after")
    def check_single_identity(self):
        if bool(self.email) == bool(self.user_id):
            raise ValueError("Provide exactly one of email or userId")
        return self


class ProjectMemberRoleUpdate(CamelModel):
    role: str = Field(..., description="New role to assign (admin, member, viewer)")


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class MemberResponse(CamelModel):
    id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: str
    status: str
    joined_at: Optional[datetime] = None
    invitation_sent_at: Optional[datetime] = None
    invited_by: Optional[str] = None


class ProjectSettingsResponse(CamelModel):
    is_public: bool
    allow_member_invite: bool
    max_members: Optional[int] = None


class ProjectSummary(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    admins: List[str]
    role: Optional[str] = None
    member_count: int
    active_members: int
    pending_invites: int
    task_count: int
    progress: int
    status: str
    invitation_code: str
    qr_code_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectDetail(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    invitation_code: str
    qr_code_url: Optional[str] = None
    status: str
    settings: ProjectSettingsResponse
    total_tasks: int
    completed_tasks: int
    progress: int
    members: List[MemberResponse]
    created_at: datetime
    updated_at: datetime


class PaginationInfo(CamelModel):
    page: int
    pages: int
    total: int
    limit: int
    has_next: bool
    has_prev: bool


ProjectListStatus = Literal["active", "archived", "all"]
