"""
Domain Exceptions

Every failure the project service can report maps to exactly one of these
classes. Each carries a stable ``kind`` (returned to clients as ``error``),
the HTTP status used by the API layer, and a ``details`` dict with enough
context for the caller to act (offending field, required role, limits).
"""

from typing import Any, Dict, Optional


class ProjectServiceError(Exception):
    """Base class for all domain errors."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


class ValidationError(ProjectServiceError):
    kind = "ValidationError"
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


# -----------------------------------------------------------------------------
# Lookup
# -----------------------------------------------------------------------------


class NotFoundError(ProjectServiceError):
    kind = "NotFoundError"
    status_code = 404


class InvalidCode(NotFoundError):
    kind = "InvalidCode"

    def __init__(self, code: str):
        super().__init__("Invalid or expired invitation code", {"invitation_code": code})


# -----------------------------------------------------------------------------
# Access
# -----------------------------------------------------------------------------


class PermissionDeniedError(ProjectServiceError):
    kind = "PermissionError"
    status_code = 403

    def __init__(self, message: str = "Not enough permissions", required_role: Optional[str] = None):
        details = {"required_role": required_role} if required_role else {}
        super().__init__(message, details)
        self.required_role = required_role


# -----------------------------------------------------------------------------
# Conflicts
# -----------------------------------------------------------------------------


class ConflictError(ProjectServiceError):
    kind = "ConflictError"
    status_code = 409


class AlreadyMember(ConflictError):
    kind = "AlreadyMember"


class MemberLimitExceeded(ConflictError):
    kind = "MemberLimitExceeded"

    def __init__(self, max_members: int):
        super().__init__(
            "Project has reached its maximum member limit",
            {"max_members": max_members},
        )


class GenerationExhausted(ConflictError):
    kind = "GenerationExhausted"

    def __init__(self, attempts: int):
        super().__init__(
            "Could not generate a unique invitation code",
            {"attempts": attempts},
        )


class ConcurrentModificationError(ConflictError):
    kind = "ConcurrentModification"

    def __init__(self, project_id: str, attempts: int):
        super().__init__(
            "Project was modified concurrently, please retry",
            {"project_id": project_id, "attempts": attempts},
        )


# -----------------------------------------------------------------------------
# State transitions
# -----------------------------------------------------------------------------


class StateError(ProjectServiceError):
    kind = "StateError"
    status_code = 400


class ProjectArchived(StateError):
    kind = "ProjectArchived"

    def __init__(self, project_id: str):
        super().__init__("Project is archived", {"project_id": project_id})


class LastAdminError(StateError):
    kind = "LastAdminError"

    def __init__(self, member_id: str):
        super().__init__(
            "A project must keep at least one active admin",
            {"member_id": member_id},
        )


class CreatorCannotLeave(StateError):
    kind = "CreatorCannotLeave"

    def __init__(self):
        super().__init__("Project creator cannot leave the project")
