import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.db.mongodb import ping

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/live", summary="Liveness Probe")
async def liveness():
    """
    Liveness probe to check if the application process is running.
    """
    return {"status": "alive"}


@router.get("/ready", summary="Readiness Probe")
async def readiness():
    """
    Readiness probe. The service is ready when MongoDB answers a ping.
    """
    components = {"database": "unknown"}
    is_ready = True

    try:
        if await ping():
            components["database"] = "connected"
        else:
            components["database"] = "client_not_initialized"
            is_ready = False
    except PyMongoError as e:
        logger.warning(f"Readiness check failed: {e}")
        components["database"] = f"error: {str(e)}"
        is_ready = False

    if is_ready:
        return {"status": "ready", "components": components}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "components": components},
    )
