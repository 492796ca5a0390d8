"""Async database engine and session factory."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from vpdash.core.config import get_settings

settings = get_settings()


def build_engine(url: str, **overrides) -> AsyncEngine:
    """Engine for ``url``. SQLite URLs skip the queue-pool sizing."""
    options = {"echo": settings.db_echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    options.update(overrides)
    return create_async_engine(url, **options)


engine = build_engine(settings.database_url)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables. Use Alembic migrations in production."""
    # Registers every table on SQLModel.metadata
    import vpdash.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
