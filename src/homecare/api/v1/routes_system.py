from fastapi import APIRouter

from src.homecare.infra.db import inmemory as repos

router = APIRouter(prefix="", tags=["system"])


@router.get("/health")
async def health_check_v1() -> dict:
    """API v1 health endpoint."""
    return {"status": "ok", "version": "v1"}


@router.get("/system/storage")
async def storage_backend_v1() -> dict:
    """Report which repository implementation is active (memory or sql)."""

    backend = "sql" if type(repos.credential_repository).__name__.startswith("Sql") else "memory"
    return {"repositories": backend}
