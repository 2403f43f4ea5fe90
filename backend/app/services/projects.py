"""
ProjectService - lifecycle of the Project aggregate.

This service handles:
- Creating projects together with the creator's admin membership
- Updating, archiving and soft deleting projects
- Applying membership transitions with optimistic concurrency
- Read models (members, progress, member-scoped listings)

Every write after creation goes through ``_apply``: load, run a pure
transition against a copy, then replace the stored document only if its
version is unchanged. Losing the race reloads and re-runs the transition,
so invariants are always checked against the state actually written over.
"""

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.constants import (
    MEMBER_STATUS_ACTIVE,
    PROJECT_DESCRIPTION_MAX_LENGTH,
    PROJECT_MAX_MEMBERS_MAX,
    PROJECT_MAX_MEMBERS_MIN,
    PROJECT_NAME_MAX_LENGTH,
    PROJECT_NAME_MIN_LENGTH,
    PROJECT_STATUS_ARCHIVED,
    PROJECT_STATUS_DELETED,
    PROJECT_UPDATABLE_STATUSES,
)
from app.core.exceptions import (
    ConcurrentModificationError,
    GenerationExhausted,
    InvalidCode,
    NotFoundError,
    PermissionDeniedError,
    ProjectServiceError,
    ValidationError,
)
from app.core.metrics import (
    membership_operations_total,
    project_lifecycle_total,
    project_version_conflicts_total,
    projects_created_total,
)
from app.core.permissions import ProjectRole, RoleLike, has_permission
from app.models.principal import Principal
from app.models.project import (
    BoundByUser,
    Project,
    ProjectMember,
    ProjectMetadata,
    ProjectSettings,
    normalize_email,
    utc_now,
)
from app.repositories.projects import ProjectRepository
from app.services import membership
from app.services.invitation_codes import InvitationCodeGenerator, normalize_code
from app.services.progress import calculate_progress
from app.services.qr import generate_project_qr

logger = logging.getLogger(__name__)

T = TypeVar("T")

Transition = Callable[[Project], T]

# Fields a patch may explicitly clear with null
NULLABLE_FIELDS = {"description"}
NULLABLE_SETTINGS = {"max_members"}


# =============================================================================
# Field validation
# =============================================================================


def validate_name(name: Any) -> str:
    if not isinstance(name, str):
        raise ValidationError("name", "Project name is required")
    name = name.strip()
    if not PROJECT_NAME_MIN_LENGTH <= len(name) <= PROJECT_NAME_MAX_LENGTH:
        raise ValidationError(
            "name",
            f"Project name must be between {PROJECT_NAME_MIN_LENGTH} and "
            f"{PROJECT_NAME_MAX_LENGTH} characters",
        )
    return name


def validate_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    description = description.strip()
    if len(description) > PROJECT_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            "description",
            f"Description cannot exceed {PROJECT_DESCRIPTION_MAX_LENGTH} characters",
        )
    return description


def validate_max_members(max_members: Optional[int]) -> Optional[int]:
    if max_members is None:
        return None
    if isinstance(max_members, bool) or not isinstance(max_members, int):
        raise ValidationError("maxMembers", "Max members must be an integer")
    if not PROJECT_MAX_MEMBERS_MIN <= max_members <= PROJECT_MAX_MEMBERS_MAX:
        raise ValidationError(
            "maxMembers",
            f"Max members must be between {PROJECT_MAX_MEMBERS_MIN} and {PROJECT_MAX_MEMBERS_MAX}",
        )
    return max_members


class ProjectService:
    """
    Usage:
        service = ProjectService(db)
        project = await service.create({"name": "Website"}, principal)
        await service.invite(project.id, principal.user_id, email="a@b.c")
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        max_retries: Optional[int] = None,
    ):
        self.db = db
        self.repo = ProjectRepository(db)
        self.codes = InvitationCodeGenerator(db)
        self.max_retries = (
            max_retries if max_retries is not None else settings.MEMBERSHIP_WRITE_MAX_RETRIES
        )

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def _load(self, project_id: str) -> Project:
        project = await self.repo.get_live_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found", {"project_id": project_id})
        return project

    async def _load_by_code(self, code: str) -> Project:
        project = await self.repo.get_by_invitation_code(code)
        if project is None or project.status == PROJECT_STATUS_DELETED:
            raise InvalidCode(code)
        return project

    async def _load_for(self, project_id: str, user_id: str, required_role: RoleLike) -> Project:
        project = await self._load(project_id)
        if not has_permission(project, user_id, required_role):
            raise PermissionDeniedError(required_role=ProjectRole(required_role).value)
        return project

    # -------------------------------------------------------------------------
    # Conditional writes
    # -------------------------------------------------------------------------

    async def _apply(
        self,
        operation: str,
        loader: Callable[[], Awaitable[Project]],
        transition: Transition,
    ) -> Tuple[Project, T]:
        """
        Run ``transition`` against the latest stored project and persist it.

        Domain errors raised by the transition propagate untouched. A lost
        version race is retried up to ``max_retries`` times.

        Raises:
            ConcurrentModificationError: every attempt lost the race.
        """
        project_id = None
        for attempt in range(1, self.max_retries + 1):
            current = await loader()
            project_id = current.id
            working = current.model_copy(deep=True)

            try:
                result = transition(working)
            except ProjectServiceError as e:
                membership_operations_total.labels(operation=operation, outcome=e.kind).inc()
                raise

            if await self.repo.replace_if_version(working, current.version):
                membership_operations_total.labels(operation=operation, outcome="success").inc()
                return working, result

            project_version_conflicts_total.labels(operation=operation).inc()
            logger.warning(
                f"Version conflict on project {project_id} during {operation} "
                f"(attempt {attempt}/{self.max_retries}, base version {current.version})"
            )

        membership_operations_total.labels(
            operation=operation, outcome=ConcurrentModificationError.kind
        ).inc()
        raise ConcurrentModificationError(project_id, self.max_retries)

    # -------------------------------------------------------------------------
    # Project lifecycle
    # -------------------------------------------------------------------------

    async def create(self, data: Dict[str, Any], creator: Principal) -> Project:
        """
        Create a project with the creator as its only (active admin) member.

        Everything is validated before any write. The invitation code is
        claimed first; the project, including the creator's membership, is
        then stored with a single insert.

        Raises:
            ValidationError: name, description or maxMembers out of bounds
            GenerationExhausted: no unique invitation code could be claimed
        """
        name = validate_name(data.get("name"))
        description = validate_description(data.get("description"))
        project_settings = ProjectSettings(
            is_public=bool(data.get("is_public", False)),
            allow_member_invite=bool(data.get("allow_member_invite", True)),
            max_members=validate_max_members(data.get("max_members")),
        )

        project_id = str(uuid.uuid4())
        code = await self.codes.generate(project_id)
        now = utc_now()

        creator_member = ProjectMember(
            identity=BoundByUser(
                user_id=creator.user_id,
                email=normalize_email(creator.email) if creator.email else None,
            ),
            role=ProjectRole.ADMIN,
            status=MEMBER_STATUS_ACTIVE,
            joined_at=now,
        )
        project = Project(
            id=project_id,
            name=name,
            description=description,
            created_by=creator.user_id,
            invitation_code=code,
            qr_code_url=generate_project_qr(code),
            settings=project_settings,
            metadata=ProjectMetadata(),
            members=[creator_member],
            created_at=now,
            updated_at=now,
        )

        try:
            await self.repo.create(project)
        except DuplicateKeyError:
            logger.error(f"Invitation code {code} already used by another project")
            await self.codes.release(code)
            raise GenerationExhausted(1)
        except Exception:
            await self.codes.release(code)
            raise

        projects_created_total.inc()
        logger.info(f"Project {project.id} created by {creator.user_id} with code {code}")
        return project

    async def get(self, project_id: str, user_id: str) -> Project:
        """Full project for an active member (any role) or the creator."""
        return await self._load_for(project_id, user_id, ProjectRole.VIEWER)

    async def update(self, project_id: str, patch: Dict[str, Any], acting_user_id: str) -> Project:
        """
        Update name, description, status (active/archived) or settings. Admin only.

        Raises:
            ValidationError: empty patch or invalid field
            PermissionDeniedError, NotFoundError
        """
        # Absent and null differ only for the nullable fields
        changes = {
            k: v for k, v in patch.items() if v is not None or k in NULLABLE_FIELDS
        }
        if not changes:
            raise ValidationError("body", "No fields to update")

        values: Dict[str, Any] = {}
        if "name" in changes:
            values["name"] = validate_name(changes["name"])
        if "description" in changes:
            values["description"] = validate_description(changes["description"])
        if "status" in changes:
            if changes["status"] not in PROJECT_UPDATABLE_STATUSES:
                raise ValidationError(
                    "status", f"Status must be one of: {', '.join(PROJECT_UPDATABLE_STATUSES)}"
                )
            values["status"] = changes["status"]

        settings_patch = {
            k: v
            for k, v in (changes.get("settings") or {}).items()
            if v is not None or k in NULLABLE_SETTINGS
        }
        if "max_members" in settings_patch:
            validate_max_members(settings_patch["max_members"])

        unknown = set(changes) - {"name", "description", "status", "settings"}
        if unknown:
            raise ValidationError(sorted(unknown)[0], "Field cannot be updated")

        def transition(project: Project) -> None:
            if not has_permission(project, acting_user_id, ProjectRole.ADMIN):
                raise PermissionDeniedError(required_role=ProjectRole.ADMIN.value)
            for field, value in values.items():
                setattr(project, field, value)
            if settings_patch:
                project.settings = project.settings.model_copy(update=settings_patch)

        project, _ = await self._apply("update", lambda: self._load(project_id), transition)
        project_lifecycle_total.labels(operation="update").inc()
        logger.info(f"Project {project_id} updated by {acting_user_id}: {sorted(changes)}")
        return project

    async def archive(self, project_id: str, acting_user_id: str) -> Project:
        """Archive a project. Admin only; archiving twice is a no-op write."""

        def transition(project: Project) -> None:
            if not has_permission(project, acting_user_id, ProjectRole.ADMIN):
                raise PermissionDeniedError(required_role=ProjectRole.ADMIN.value)
            project.status = PROJECT_STATUS_ARCHIVED

        project, _ = await self._apply("archive", lambda: self._load(project_id), transition)
        project_lifecycle_total.labels(operation="archive").inc()
        logger.info(f"Project {project_id} archived by {acting_user_id}")
        return project

    async def soft_delete(self, project_id: str, acting_user_id: str) -> Project:
        """Flag a project as deleted. Creator only; the record is kept."""

        def transition(project: Project) -> None:
            if acting_user_id != project.created_by:
                raise PermissionDeniedError("Only the project creator can delete the project")
            project.status = PROJECT_STATUS_DELETED

        project, _ = await self._apply("delete", lambda: self._load(project_id), transition)
        project_lifecycle_total.labels(operation="delete").inc()
        logger.info(f"Project {project_id} deleted by {acting_user_id}")
        return project

    # -------------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------------

    async def get_members(
        self, project_id: str, user_id: str, status: Optional[str] = None
    ) -> List[ProjectMember]:
        """
        Members of a project, admins first, then by join (or invite) time.
        """
        project = await self.get(project_id, user_id)
        members = project.members
        if status:
            members = [m for m in members if m.status == status]
        return sort_members(members)

    async def calculate_progress(self, project_id: str, user_id: str) -> int:
        project = await self.get(project_id, user_id)
        return calculate_progress(project.metadata)

    async def list_projects(
        self,
        query: Dict[str, Any],
        skip: int,
        limit: int,
        sort_by: str,
        sort_order: int,
    ) -> Tuple[List[Project], int]:
        """Page through projects matching a membership query built by the API layer."""
        total = await self.repo.count(query)
        projects = await self.repo.find_for_member(
            query, skip=skip, limit=limit, sort_by=sort_by, sort_order=sort_order
        )
        return projects, total

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    async def invite(
        self,
        project_id: str,
        acting_user_id: str,
        email: Optional[str] = None,
        user_id: Optional[str] = None,
        role: RoleLike = ProjectRole.MEMBER,
    ) -> ProjectMember:
        project, member = await self._apply(
            "invite",
            lambda: self._load(project_id),
            lambda p: membership.invite(p, acting_user_id, email=email, user_id=user_id, role=role),
        )
        logger.info(
            f"Member {member.id} invited to project {project.id} by {acting_user_id} as {member.role}"
        )
        return member

    async def join(self, code: str, principal: Principal) -> Tuple[Project, ProjectMember]:
        code = normalize_code(code)
        project_id: Optional[str] = None

        async def loader() -> Project:
            # Retries reload by ID so a concurrent write to the same project is seen
            nonlocal project_id
            if project_id is None:
                project = await self._load_by_code(code)
                project_id = project.id
                return project
            project = await self.repo.get_by_id(project_id)
            if project is None:
                raise InvalidCode(code)
            return project

        project, member = await self._apply(
            "join", loader, lambda p: membership.join(p, principal)
        )
        logger.info(f"User {principal.user_id} joined project {project.id} as member {member.id}")
        return project, member

    async def update_role(
        self, project_id: str, member_ref: str, role: RoleLike, acting_user_id: str
    ) -> ProjectMember:
        project, member = await self._apply(
            "update_role",
            lambda: self._load(project_id),
            lambda p: membership.update_role(p, member_ref, role, acting_user_id),
        )
        logger.info(
            f"Member {member.id} of project {project.id} now has role {member.role} "
            f"(changed by {acting_user_id})"
        )
        return member

    async def remove_member(
        self, project_id: str, member_ref: str, acting_user_id: str
    ) -> ProjectMember:
        project, member = await self._apply(
            "remove",
            lambda: self._load(project_id),
            lambda p: membership.remove(p, member_ref, acting_user_id),
        )
        logger.info(f"Member {member.id} removed from project {project.id} by {acting_user_id}")
        return member

    async def leave(self, project_id: str, user_id: str) -> ProjectMember:
        project, member = await self._apply(
            "leave",
            lambda: self._load(project_id),
            lambda p: membership.leave(p, user_id),
        )
        logger.info(f"User {user_id} left project {project.id}")
        return member


def sort_members(members: List[ProjectMember]) -> List[ProjectMember]:
    """Admins first, then by ``joined_at`` falling back to ``invitation_sent_at``."""

    def key(member: ProjectMember):
        timestamp = member.joined_at or member.invitation_sent_at
        return (
            member.role != ProjectRole.ADMIN,
            timestamp is None,
            timestamp.timestamp() if timestamp else 0.0,
        )

    return sorted(members, key=key)
