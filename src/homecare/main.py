import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.homecare.api.v1.routes_assessments import router as assessments_router_v1
from src.homecare.api.v1.routes_audit_logs import router as audit_logs_router_v1
from src.homecare.api.v1.routes_credentials import router as credentials_router_v1
from src.homecare.api.v1.routes_staff import router as staff_router_v1
from src.homecare.api.v1.routes_system import router as system_router_v1
from src.homecare.api.v1.routes_uploads import router as uploads_router_v1
from src.homecare.config import settings
from src.homecare.domain.errors import HomecareError, ValidationFailedError
from src.homecare.infra.db.bootstrap import init_sql_repositories
from src.homecare.security import validate_api_keys

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Home Care Credentials & QA API")


@app.on_event("startup")
async def on_startup() -> None:
    """Application startup hook.

    A malformed API_KEYS entry aborts startup. When USE_SQL_REPOS is
    enabled and a DATABASE_URL is configured, this switches the repositories
    to SQL-backed implementations. Otherwise the in-memory repositories
    remain active.
    """

    if settings.enable_api_auth:
        validate_api_keys()
    init_sql_repositories()


@app.exception_handler(HomecareError)
async def homecare_error_handler(request: Request, exc: HomecareError) -> JSONResponse:
    """Turn service-layer errors into a readable JSON error body."""

    log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(log_level, "%s %s failed: %s", request.method, request.url.path, exc.message)

    content = {"detail": exc.message}
    if isinstance(exc, ValidationFailedError):
        content["problems"] = exc.problems
    return JSONResponse(status_code=exc.status_code, content=content)


# CORS configuration – permissive by default for development. Tighten via
# CORS_ALLOW_ORIGINS in production deployments.
allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Basic liveness probe for the API root."""
    return {"status": "ok"}


# Versioned API routers
app.include_router(system_router_v1, prefix="/api/v1")
app.include_router(credentials_router_v1, prefix="/api/v1")
app.include_router(assessments_router_v1, prefix="/api/v1")
app.include_router(staff_router_v1, prefix="/api/v1")
app.include_router(uploads_router_v1, prefix="/api/v1")
app.include_router(audit_logs_router_v1, prefix="/api/v1")
