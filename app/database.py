"""
Async SQLAlchemy engine + session factory.

Production runs on MySQL through the aiomysql driver; tests point
DATABASE_URL at a SQLite file (aiosqlite). The engine is created once at
import and reused across all requests.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)

_engine_kwargs = {"pool_pre_ping": True, "echo": False}
if settings.db_url.startswith("sqlite"):
    # SQLite connections are per-file and cheap; open one per session
    _engine_kwargs["poolclass"] = NullPool
else:
    _engine_kwargs.update(pool_size=20, max_overflow=10)

engine = create_async_engine(settings.db_url, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create all tables if they don't exist (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
