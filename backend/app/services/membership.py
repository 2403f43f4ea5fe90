"""
Membership Manager

Pure state transitions over a project's member roster. Every function takes
a project the caller is free to mutate (the project service hands in a fresh
copy per attempt), checks its preconditions, applies the change in place and
returns the affected member record. Nothing here touches the database; the
caller persists the result with a single conditional write.
"""

from typing import Optional

from app.core.constants import (
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
    MEMBER_STATUS_REMOVED,
    PROJECT_STATUS_ARCHIVED,
    PROJECT_STATUS_DELETED,
)
from app.core.exceptions import (
    AlreadyMember,
    CreatorCannotLeave,
    InvalidCode,
    LastAdminError,
    MemberLimitExceeded,
    NotFoundError,
    PermissionDeniedError,
    ProjectArchived,
    StateError,
    ValidationError,
)
from app.core.permissions import (
    ProjectRole,
    RoleLike,
    get_member_role,
    has_permission,
    parse_role,
    role_at_least,
)
from app.models.principal import Principal
from app.models.project import (
    BoundByUser,
    PendingByEmail,
    Project,
    ProjectMember,
    Roster,
    normalize_email,
    utc_now,
)


def _ensure_not_archived(project: Project) -> None:
    if project.status == PROJECT_STATUS_ARCHIVED:
        raise ProjectArchived(project.id)


def _ensure_seat_available(project: Project, roster: Roster) -> None:
    max_members = project.settings.max_members
    if max_members is not None and roster.seats_taken() >= max_members:
        raise MemberLimitExceeded(max_members)


def _parse_role_field(role: RoleLike) -> ProjectRole:
    try:
        return parse_role(role)
    except ValueError:
        raise ValidationError("role", "Role must be one of: admin, member, viewer")


def _acting_role(project: Project, user_id: str) -> Optional[ProjectRole]:
    if user_id == project.created_by:
        return ProjectRole.ADMIN
    return get_member_role(project, user_id)


def _resolve_target(roster: Roster, member_ref: str) -> ProjectMember:
    member = roster.resolve(member_ref)
    if member is None:
        raise NotFoundError("Member not found", {"member_id": member_ref})
    return member


def _ensure_not_last_admin(roster: Roster, target: ProjectMember) -> None:
    if target.status != MEMBER_STATUS_ACTIVE or target.role != ProjectRole.ADMIN:
        return
    if len(roster.active_admins()) <= 1:
        raise LastAdminError(target.id)


def invite(
    project: Project,
    acting_user_id: str,
    email: Optional[str] = None,
    user_id: Optional[str] = None,
    role: RoleLike = ProjectRole.MEMBER,
) -> ProjectMember:
    """
    Invite an identity (exactly one of ``email`` or ``user_id``).

    Re-inviting someone still pending only refreshes ``invitation_sent_at``.

    Raises:
        ValidationError: neither or both identities given, or unknown role
        PermissionDeniedError: acting user may not invite, or may not grant ``role``
        AlreadyMember: the identity is already an active member
        MemberLimitExceeded: no seat left under ``settings.max_members``
        ProjectArchived: the project is archived
    """
    _ensure_not_archived(project)

    acting_role = _acting_role(project, acting_user_id)
    if acting_role is None or not role_at_least(acting_role, ProjectRole.MEMBER):
        raise PermissionDeniedError(required_role=ProjectRole.MEMBER.value)

    is_admin = role_at_least(acting_role, ProjectRole.ADMIN)
    if not is_admin and not project.settings.allow_member_invite:
        raise PermissionDeniedError(
            "Only admins can invite members to this project",
            required_role=ProjectRole.ADMIN.value,
        )

    new_role = _parse_role_field(role)
    if not is_admin and not role_at_least(acting_role, new_role):
        raise PermissionDeniedError(
            "Cannot grant a role above your own", required_role=new_role.value
        )

    if bool(email) == bool(user_id):
        raise ValidationError("email", "Provide exactly one of email or userId")
    if email:
        email = normalize_email(email)
        if not email:
            raise ValidationError("email", "Email must not be empty")

    roster = project.roster()
    existing = roster.find(user_id=user_id, email=email)
    now = utc_now()

    if existing is not None:
        if existing.status == MEMBER_STATUS_ACTIVE:
            raise AlreadyMember(
                "User is already a member of this project", {"member_id": existing.id}
            )
        existing.invitation_sent_at = now
        return existing

    _ensure_seat_available(project, roster)

    identity = PendingByEmail(email=email) if email else BoundByUser(user_id=user_id)
    member = ProjectMember(
        identity=identity,
        role=new_role,
        status=MEMBER_STATUS_INVITED,
        invitation_sent_at=now,
        invited_by=acting_user_id,
    )
    project.members.append(member)
    return member


def join(project: Project, principal: Principal) -> ProjectMember:
    """
    Join ``project`` through its invitation code.

    A pending record for the principal (bound to its user ID, or addressed to
    its email) is activated and bound to the user. When both exist, the bound
    record wins and the email record is retired as superseded. Without a
    pending invitation a fresh member record is created if the project is
    open for joining.

    If the principal is already active, pending invitations matching its
    email are retired into the active record instead of raising.

    Raises:
        InvalidCode: the project was deleted
        ProjectArchived: the project is archived
        AlreadyMember: the principal is already active and nothing is pending
        PermissionDeniedError: no invitation and the project is closed
        MemberLimitExceeded: no seat left for a new record
    """
    if project.status == PROJECT_STATUS_DELETED:
        raise InvalidCode(project.invitation_code)
    _ensure_not_archived(project)

    roster = project.roster()
    matches = [
        m
        for m in roster.find_all(user_id=principal.user_id, email=principal.email)
        if m.user_id in (None, principal.user_id)
    ]

    active = next((m for m in matches if m.status == MEMBER_STATUS_ACTIVE), None)
    if active is not None:
        pending = [m for m in matches if m is not active]
        if not pending:
            raise AlreadyMember(
                "You are already a member of this project", {"member_id": active.id}
            )
        # Invitations addressed to the email of an active member fold into its record
        if principal.email and active.email is None:
            active.identity = BoundByUser(
                user_id=principal.user_id, email=normalize_email(principal.email)
            )
        for duplicate in pending:
            duplicate.status = MEMBER_STATUS_REMOVED
        return active

    now = utc_now()

    if matches:
        # Bound records sort first
        matches.sort(key=lambda m: m.user_id is None)
        member, superseded = matches[0], matches[1:]
        member.identity = BoundByUser(
            user_id=principal.user_id,
            email=normalize_email(principal.email) if principal.email else member.email,
        )
        member.status = MEMBER_STATUS_ACTIVE
        member.joined_at = now
        for duplicate in superseded:
            duplicate.status = MEMBER_STATUS_REMOVED
        return member

    if not (project.settings.is_public or project.settings.allow_member_invite):
        raise PermissionDeniedError("This project requires an invitation to join")

    _ensure_seat_available(project, roster)

    member = ProjectMember(
        identity=BoundByUser(
            user_id=principal.user_id,
            email=normalize_email(principal.email) if principal.email else None,
        ),
        role=ProjectRole.MEMBER,
        status=MEMBER_STATUS_ACTIVE,
        joined_at=now,
        # Joined through the code, so the user stands as their own inviter
        invited_by=principal.user_id,
    )
    project.members.append(member)
    return member


def update_role(
    project: Project, member_ref: str, role: RoleLike, acting_user_id: str
) -> ProjectMember:
    """
    Change a member's role. Admin only.

    Raises:
        PermissionDeniedError, ValidationError, NotFoundError,
        StateError (removed target or creator), LastAdminError, ProjectArchived
    """
    _ensure_not_archived(project)

    if not has_permission(project, acting_user_id, ProjectRole.ADMIN):
        raise PermissionDeniedError(required_role=ProjectRole.ADMIN.value)

    new_role = _parse_role_field(role)
    roster = project.roster()
    target = _resolve_target(roster, member_ref)

    if target.status == MEMBER_STATUS_REMOVED:
        raise StateError("Cannot change the role of a removed member", {"member_id": target.id})

    if new_role == target.role:
        return target

    if new_role != ProjectRole.ADMIN:
        _ensure_not_last_admin(roster, target)

    if target.user_id == project.created_by:
        raise StateError("The project creator's role cannot be changed", {"member_id": target.id})

    target.role = new_role.value
    return target


def remove(project: Project, member_ref: str, acting_user_id: str) -> ProjectMember:
    """
    Remove a member. Admins may remove anyone; everybody may remove themselves.

    Allowed on archived projects so people can still be taken off them.

    Raises:
        NotFoundError, PermissionDeniedError, StateError (already removed),
        LastAdminError, CreatorCannotLeave
    """
    roster = project.roster()
    target = _resolve_target(roster, member_ref)

    is_self = target.user_id is not None and target.user_id == acting_user_id
    if not is_self and not has_permission(project, acting_user_id, ProjectRole.ADMIN):
        raise PermissionDeniedError(required_role=ProjectRole.ADMIN.value)

    if target.status == MEMBER_STATUS_REMOVED:
        raise StateError("Member has already been removed", {"member_id": target.id})

    _ensure_not_last_admin(roster, target)

    if target.user_id is not None and target.user_id == project.created_by:
        raise CreatorCannotLeave()

    target.status = MEMBER_STATUS_REMOVED
    return target


def leave(project: Project, user_id: str) -> ProjectMember:
    """
    Remove the caller's own membership.

    Raises:
        CreatorCannotLeave: the caller created the project
        NotFoundError: the caller has no live membership
        LastAdminError: the caller is the sole active admin
    """
    if user_id == project.created_by:
        raise CreatorCannotLeave()

    roster = project.roster()
    member = roster.find(user_id=user_id)
    if member is None:
        raise NotFoundError("You are not a member of this project")

    _ensure_not_last_admin(roster, member)

    member.status = MEMBER_STATUS_REMOVED
    return member
