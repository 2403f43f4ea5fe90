"""
Project Repository

Centralizes all database operations for projects.

Every write after creation is a full-document replace conditioned on the
version the caller loaded (``{"_id": ..., "version": expected}``). A miss
means another request committed first; the caller decides how to retry.
"""

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.constants import PROJECT_STATUS_DELETED
from app.models.project import Project, utc_now
from app.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for project database operations."""

    collection_name = "projects"
    model_class = Project

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db)

    async def get_live_by_id(self, project_id: str) -> Optional[Project]:
        """Get a project by ID unless it has been soft deleted."""
        data = await self.collection.find_one(
            {"_id": project_id, "status": {"$ne": PROJECT_STATUS_DELETED}}
        )
        return self._to_model(data)

    async def get_by_invitation_code(self, invitation_code: str) -> Optional[Project]:
        """Get project by invitation code (any status)."""
        data = await self.collection.find_one({"invitation_code": invitation_code})
        return self._to_model(data)

    async def replace_if_version(self, project: Project, expected_version: int) -> bool:
        """
        Atomically replace a project if it is still at ``expected_version``.

        The stored document gets ``version = expected_version + 1`` and a fresh
        ``updated_at``; the passed model is updated to match on success.

        Returns:
            True if the write was applied, False if the version moved on.
        """
        now = utc_now()
        data = project.model_dump(by_alias=True)
        data["version"] = expected_version + 1
        data["updated_at"] = now

        result = await self.collection.replace_one(
            {"_id": project.id, "version": expected_version}, data
        )
        if result.matched_count != 1:
            return False

        project.version = expected_version + 1
        project.updated_at = now
        return True

    async def find_for_member(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 10,
        sort_by: str = "updated_at",
        sort_order: int = -1,
    ) -> List[Project]:
        """Find projects matching a membership query, paginated."""
        return await self.find_many(
            query, skip=skip, limit=limit, sort_by=sort_by, sort_order=sort_order
        )
