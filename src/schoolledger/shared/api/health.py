from time import perf_counter

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from schoolledger.dependencies import Container, get_container

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(container: Container = Depends(get_container)):
    settings = container.settings
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "environment": settings.ENVIRONMENT,
        "store_backend": settings.STORE_BACKEND,
        "cache_entries": container.cache.size(),
    }


@router.get("/_health/db", status_code=status.HTTP_200_OK)
async def health_db(container: Container = Depends(get_container)):
    if container.db is None:
        return {"ok": True, "checks": {"db": "not configured"}}
    t0 = perf_counter()
    try:
        async with container.db.session_factory() as s:
            await s.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "checks": {"db": "SELECT 1 failed"}, "error": type(e).__name__},
        )
    dt_ms = int((perf_counter() - t0) * 1000)
    return {"ok": True, "checks": {"db_select_1_ms": dt_ms}}
