import uuid
from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import (
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
    MEMBER_STATUS_REMOVED,
    PROJECT_STATUS_ACTIVE,
)
from app.core.permissions import ProjectRole


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively with surrounding whitespace ignored."""
    return email.strip().lower()


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def email_key(email: str) -> str:
    return f"email:{normalize_email(email)}"


class PendingByEmail(BaseModel):
    """Identity of someone invited by email who has not joined yet."""

    kind: Literal["email"] = "email"
    email: str

    def lookup_keys(self) -> List[str]:
        return [email_key(self.email)]


class BoundByUser(BaseModel):
    """Identity bound to a user account (joined, or invited by user ID)."""

    kind: Literal["user"] = "user"
    user_id: str
    email: Optional[str] = None

    def lookup_keys(self) -> List[str]:
        keys = [user_key(self.user_id)]
        if self.email:
            keys.append(email_key(self.email))
        return keys


MemberIdentity = Annotated[Union[PendingByEmail, BoundByUser], Field(discriminator="kind")]


class ProjectMember(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    identity: MemberIdentity
    role: ProjectRole = ProjectRole.MEMBER
    status: Literal["invited", "active", "removed"] = MEMBER_STATUS_INVITED
    joined_at: Optional[datetime] = None
    invitation_sent_at: Optional[datetime] = None
    invited_by: Optional[str] = None  # None only for the creator's own membership

    @property
    def user_id(self) -> Optional[str]:
        if isinstance(self.identity, BoundByUser):
            return self.identity.user_id
        return None

    @property
    def email(self) -> Optional[str]:
        return self.identity.email

    @property
    def is_live(self) -> bool:
        return self.status != MEMBER_STATUS_REMOVED

    def lookup_keys(self) -> List[str]:
        return self.identity.lookup_keys()


class ProjectSettings(BaseModel):
    is_public: bool = False
    allow_member_invite: bool = True
    max_members: Optional[int] = Field(None, ge=1, le=1000)


class ProjectMetadata(BaseModel):
    """Task counters owned by the task service; only read here."""

    total_tasks: int = Field(0, ge=0)
    completed_tasks: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_completed_within_total(self):
        if self.completed_tasks > self.total_tasks:
            raise ValueError("completed_tasks cannot exceed total_tasks")
        return self


class Roster:
    """
    Keyed view over a project's live member records.

    Live (non-removed) records are indexed under every identity key they can
    be reached by: ``user:<id>`` for bound records plus ``email:<normalized>``
    whenever an email is known. Removed records stay reachable by member ID
    only, as history.
    """

    def __init__(self, members: List[ProjectMember]):
        self.members = members
        self._by_key: Dict[str, ProjectMember] = {}
        self._by_id: Dict[str, ProjectMember] = {m.id: m for m in members}
        for member in members:
            if not member.is_live:
                continue
            for key in member.lookup_keys():
                self._by_key.setdefault(key, member)

    def find(
        self, user_id: Optional[str] = None, email: Optional[str] = None
    ) -> Optional[ProjectMember]:
        """Find the live record for a user ID or an email (user ID wins)."""
        if user_id:
            member = self._by_key.get(user_key(user_id))
            if member is not None:
                return member
        if email:
            return self._by_key.get(email_key(email))
        return None

    def find_all(
        self, user_id: Optional[str] = None, email: Optional[str] = None
    ) -> List[ProjectMember]:
        """All distinct live records matching either the user ID or the email."""
        keys = []
        if user_id:
            keys.append(user_key(user_id))
        if email:
            keys.append(email_key(email))

        found: List[ProjectMember] = []
        for key in keys:
            member = self._by_key.get(key)
            if member is not None and member not in found:
                found.append(member)
        return found

    def resolve(self, member_ref: str) -> Optional[ProjectMember]:
        """
        Resolve a path reference to a member record.

        Accepts a member record ID or a bound user ID. A user ID resolves to
        the live record first, falling back to the most recent removed one.
        """
        member = self._by_id.get(member_ref)
        if member is not None:
            return member
        member = self._by_key.get(user_key(member_ref))
        if member is not None:
            return member
        for candidate in reversed(self.members):
            if candidate.user_id == member_ref:
                return candidate
        return None

    def active_admins(self) -> List[ProjectMember]:
        return [
            m
            for m in self.members
            if m.status == MEMBER_STATUS_ACTIVE and m.role == ProjectRole.ADMIN
        ]

    def seats_taken(self) -> int:
        """Live records (active + invited) count against ``max_members``."""
        return sum(1 for m in self.members if m.is_live)

    def with_status(self, status: str) -> List[ProjectMember]:
        return [m for m in self.members if m.status == status]


class Project(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    description: Optional[str] = None
    created_by: str
    invitation_code: str
    qr_code_url: Optional[str] = None
    status: Literal["active", "archived", "deleted"] = PROJECT_STATUS_ACTIVE
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)
    members: List[ProjectMember] = []

    # Optimistic concurrency token, bumped by every conditional write
    version: int = 0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def roster(self) -> Roster:
        return Roster(self.members)
