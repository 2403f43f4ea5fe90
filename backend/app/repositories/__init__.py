"""
Repository Pattern for Database Access

Provides a clean abstraction layer over MongoDB collections,
centralizing database operations and reducing code duplication.
"""

from app.repositories.base import BaseRepository
from app.repositories.invitation_codes import InvitationCodeRepository
from app.repositories.projects import ProjectRepository

__all__ = [
    "BaseRepository",
    "InvitationCodeRepository",
    "ProjectRepository",
]
