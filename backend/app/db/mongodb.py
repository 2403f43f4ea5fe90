import logging

from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import settings

logger = logging.getLogger(__name__)


class Database:
    client: AsyncIOMotorClient = None


db = Database()


async def get_database():
    return db.client[settings.DATABASE_NAME]


async def connect_to_mongo():
    # tz_aware keeps stored timestamps comparable with datetime.now(timezone.utc)
    db.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    logger.info(f"Connected to MongoDB database {settings.DATABASE_NAME}")


async def close_mongo_connection():
    if db.client is not None:
        db.client.close()
        db.client = None
        logger.info("Closed MongoDB connection")


async def ping() -> bool:
    """Round-trip to the server; used by the readiness probe."""
    if db.client is None:
        return False
    await db.client.admin.command("ping")
    return True
