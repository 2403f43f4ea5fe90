from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.db.mongodb import get_database
from app.models.principal import Principal
from app.services.projects import ProjectService


async def get_current_principal(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_email: Optional[str] = Header(None, alias="X-User-Email"),
) -> Principal:
    """
    The caller as verified by the upstream identity gateway.

    Credentials are never checked here; the gateway strips and re-sets these
    headers, so their presence is all we rely on.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    email = x_user_email.strip() if x_user_email and x_user_email.strip() else None
    return Principal(user_id=x_user_id.strip(), email=email)


async def get_project_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> ProjectService:
    return ProjectService(db)
