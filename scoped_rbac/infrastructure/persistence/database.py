from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.orm import DeclarativeBase

from scoped_rbac.infrastructure.config.settings import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool sizing for server databases; SQLite keeps its default pool"""
    if database_url.startswith("sqlite"):
        return {}

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 30,
        "pool_recycle": 3600,
    }
    if "postgresql" in database_url:
        options["connect_args"] = {"server_settings": {"jit": "off"}, "command_timeout": 60}
    return options


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by every RBAC table"""


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    One unit of work outside a request (scripts, maintenance jobs).
    Commits when the block exits cleanly, rolls back otherwise.
    """
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Request-scoped session for reads.

    Nothing is committed; role and assignment writes go through
    get_db_transactional().
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """
    Request-scoped session for writes.

    Repositories only flush. The transaction opened here commits after the
    route returns and rolls back if it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            async with session.begin():
                yield session
        except Exception:
            await session.rollback()
            raise
