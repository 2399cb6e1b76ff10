from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from rental_engine.config import Settings
from rental_engine.infrastructure.db.tables import metadata

# Fallback a un archivo SQLite local si no se configura DATABASE_URL
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./rentals.db"


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url or DEFAULT_DATABASE_URL,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
