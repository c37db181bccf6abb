from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.cache.redis_cache import CacheService
from src.infrastructure.config.settings import get_settings
from src.infrastructure.persistence.database import engine, get_db
from src.presentation.api.dependencies import (get_cache_service,
                                               set_cache_service)
from src.presentation.api.errors import register_exception_handlers
from src.presentation.api.v1.routes import (permissions, role_templates,
                                            roles, user_roles, users)
from src.presentation.middleware.correlation import CorrelationIDMiddleware
from src.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for application initialization and cleanup"""
    setup_logging()

    # Database schema is created by migrations; the catalog by scripts/seed_rbac.py

    # Initialize Redis cache
    if settings.redis_enabled:
        cache_service = CacheService()
        await cache_service.connect()
        set_cache_service(cache_service)
        if cache_service.is_available():
            logger.info("Redis cache initialized successfully")
    else:
        logger.info("Redis cache disabled in configuration")

    yield

    # Shutdown cache
    if settings.redis_enabled:
        cache = await get_cache_service()
        await cache.disconnect()
        logger.info("Redis cache disconnected")

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware (applied in reverse order)
app.add_middleware(CorrelationIDMiddleware)

# Security: Using allow_credentials=True requires specific origins (not wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(roles.router, prefix=settings.api_prefix, tags=["roles"])
app.include_router(role_templates.router, prefix=settings.api_prefix, tags=["role-templates"])
app.include_router(permissions.router, prefix=settings.api_prefix, tags=["permissions"])
app.include_router(user_roles.router, prefix=settings.api_prefix, tags=["user-roles"])
app.include_router(users.router, prefix=settings.api_prefix, tags=["users"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the database answers (cache is reported but optional)
    - 503 Service Unavailable otherwise
    """
    checks: dict[str, Any] = {
        "api": True,
        "database": False,
        "cache": None,  # None = not configured, True = healthy, False = unhealthy
    }

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except SQLAlchemyError as e:
        logger.warning("Health check database probe failed: %s", e)
        checks["error"] = "database unavailable"

    if settings.redis_enabled:
        cache = await get_cache_service()
        checks["cache"] = cache.is_available()

    if checks["api"] and checks["database"]:
        return {"status": "healthy", "checks": checks}
    return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})
