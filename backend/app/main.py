import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health
from app.api.v1.endpoints import projects
from app.api.v1.helpers.responses import error_response
from app.core.config import settings
from app.core.exceptions import ProjectServiceError, ValidationError
from app.core.init_db import init_db
from app.core.metrics import PrometheusMiddleware, metrics_endpoint
from app.db.mongodb import close_mongo_connection, connect_to_mongo

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Project Collaboration API for managing projects, their members and invitations.

    ## Features
    * **Projects**: Create, update, archive and soft delete collaborative projects.
    * **Membership**: Invite by email or user ID, join by invitation code, manage roles.
    * **Access Control**: Ordered roles (admin > member > viewer) checked on every operation.
    * **Progress**: Task completion percentage derived from task counters.

    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(PrometheusMiddleware)


@app.exception_handler(ProjectServiceError)
async def project_service_exception_handler(request: Request, exc: ProjectServiceError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.kind, exc.details),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", []) if part not in ("body", "query", "path")]
        errors.append(
            {
                "field": ".".join(loc) or "body",
                "msg": str(error.get("msg", "Validation error")),
            }
        )
    return JSONResponse(
        status_code=400,
        content=error_response("Validation error", ValidationError.kind, {"errors": errors}),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message, "HTTPError"),
        headers=getattr(exc, "headers", None),
    )


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    await close_mongo_connection()


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(projects.router, prefix=f"{settings.API_V1_STR}/projects", tags=["projects"])
app.add_route("/metrics", metrics_endpoint, include_in_schema=False)


@app.get("/")
async def root():
    return {"message": "Welcome to the Project Collaboration API"}
