import logging

import pymongo

from app.db.mongodb import get_database

logger = logging.getLogger(__name__)


async def create_indexes(db):
    """Creates indexes for all collections to ensure performance and uniqueness."""
    logger.info("Creating database indexes...")

    # Projects
    # Second line of defence behind the invitation_codes registry
    await db["projects"].create_index("invitation_code", unique=True)
    await db["projects"].create_index("created_by")
    await db["projects"].create_index("members.identity.user_id")
    await db["projects"].create_index(
        [("status", pymongo.ASCENDING), ("updated_at", pymongo.DESCENDING)]
    )
    await db["projects"].create_index(
        [("name", pymongo.TEXT), ("description", pymongo.TEXT)]
    )

    # Invitation codes are keyed by _id (the code itself), which is unique already
    await db["invitation_codes"].create_index("project_id")

    logger.info("Database indexes created successfully.")


async def init_db():
    db = await get_database()
    await create_indexes(db)
