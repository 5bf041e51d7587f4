"""Async engine and session handling for the tenancy store."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from crm_tenancy.common.config import TenancySettings, get_settings
from crm_tenancy.common.models import Base

# Register every table on Base.metadata before create_all().
import crm_tenancy.tenants.models  # noqa: F401
import crm_tenancy.subscriptions.models  # noqa: F401
import crm_tenancy.features.models  # noqa: F401
import crm_tenancy.roles.models  # noqa: F401

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict[str, Any]:
    """Engine keyword arguments for a database URL.

    SQLite (file or in-memory) keeps SQLAlchemy's pool defaults; server
    databases get connection liveness checks.
    """
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True}


class DatabaseManager:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, settings: TenancySettings | None = None):
        self._settings = settings or get_settings()
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def dialect(self) -> str | None:
        return self.engine.dialect.name if self.engine else None

    async def init(self) -> None:
        url = self._settings.db_url
        self.engine = create_async_engine(url, echo=False, **engine_options(url))
        self._session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized — call init() first")
        return self.engine

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """One unit of work: commit on success, roll back on any error."""
        self._require_engine()
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """True when the database answers a trivial query."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self._session_factory = None
