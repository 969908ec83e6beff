import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scoped_rbac.infrastructure.config.settings import get_settings
from scoped_rbac.infrastructure.persistence.database import engine, get_db
from scoped_rbac.presentation.api.v1.routes import menus, roles, user_roles
from scoped_rbac.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Tables are created by scripts/seed_rbac.py --create-tables or by migrations
    logger.info(
        "%s %s starting; admin role is '%s'",
        settings.app_name,
        settings.app_version,
        settings.rbac_admin_role_name,
    )

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Credentials are allowed, so origins must be listed explicitly
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(roles.router, prefix="/roles", tags=["roles"])
app.include_router(user_roles.router, tags=["user-roles"])
app.include_router(menus.router, tags=["menus"])


@app.get("/")
async def root():
    return {"name": settings.app_name, "version": settings.app_version, "status": "running"}


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness for load balancers: 200 when the database answers, 503 otherwise"""
    checks: dict[str, Any] = {"api": True, "database": False}

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        checks["error"] = str(e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})

    checks["database"] = True
    return {"status": "healthy", "checks": checks}
