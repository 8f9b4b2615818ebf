from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from shiftlock.core.config import settings
from shiftlock.db.models import Base

# SQLite file: one short-lived connection per session, nothing pooled
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    poolclass=NullPool if settings.DATABASE_URL.startswith("sqlite") else None,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def init_db() -> None:
    """Create missing tables. The schema is small and local; no migrations."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session
