import json
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncEngine, AsyncSession

from hospital_finder.config.settings import get_settings
from hospital_finder.db.base import Base

settings = get_settings()

engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    # Keep non-ASCII specialty names searchable in the stored JSON text
    json_serializer=lambda value: json.dumps(value, ensure_ascii=False),
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create missing tables. Alembic owns real schema changes."""
    # Registers every model on Base.metadata
    import hospital_finder.db.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            # Commits made before the exception persist; only the open transaction is undone
            await session.rollback()
            raise
