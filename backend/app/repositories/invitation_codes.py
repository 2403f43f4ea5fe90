from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.project import utc_now


class InvitationCodeRepository:
    """
    Registry of issued invitation codes.

    The code is the document ``_id``, so claiming a code is a single insert
    that either succeeds or fails with a duplicate key error.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.invitation_codes

    async def claim(self, code: str, project_id: str) -> None:
        """
        Claim a code for a project.

        Raises:
            pymongo.errors.DuplicateKeyError: if the code was already issued.
        """
        await self.collection.insert_one(
            {"_id": code, "project_id": project_id, "claimed_at": utc_now()}
        )

    async def release(self, code: str) -> None:
        """Drop a claim whose project insert never happened."""
        await self.collection.delete_one({"_id": code})
