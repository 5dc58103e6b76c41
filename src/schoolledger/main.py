from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolledger.attendance.api.routes import router as attendance_router
from schoolledger.config import get_settings
from schoolledger.dependencies import Container, build_container
from schoolledger.payments.api.routes.expense_routes import router as expenses_router
from schoolledger.payments.api.routes.payment_routes import router as payments_router
from schoolledger.reporting.api.routes import router as reports_router
from schoolledger.shared.api.health import router as health_router
from schoolledger.shared.api.middleware import CorrelationIdMiddleware
from schoolledger.shared.exceptions import register_exception_handlers  # central mapping
from schoolledger.shared.logging import configure_logging, get_logger
from schoolledger.students.api.routes import router as students_router

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the app. Tests pass a pre-built container (usually in-memory
    stores); otherwise one is built from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        current = app.state.container
        configure_logging(current.settings)
        if current.db is not None:
            await current.db.create_all()
        current.cache.start()
        logger.info("startup", environment=current.settings.ENVIRONMENT, store_backend=current.settings.STORE_BACKEND)
        try:
            yield
        finally:
            await current.dispose()
            logger.info("shutdown")

    container = container or build_container(get_settings())
    settings = container.settings

    app = FastAPI(
        title="School Ledger API",
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.state.container = container

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    # Routers
    for router in (students_router, attendance_router, payments_router, expenses_router, reports_router):
        app.include_router(router, prefix=settings.API_PREFIX)
    app.include_router(health_router)

    # Centralized error handling -> {code, message, details?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        return {"message": "School Ledger API", "docs": "/docs", "health": "/health"}

    return app


app = create_app()
