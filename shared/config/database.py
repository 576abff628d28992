from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .settings import Settings, get_settings

Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """Creates the async engine. Server databases get a bounded connection pool."""
    kwargs = {}
    if not settings.database_url.startswith("sqlite"):
        # Callers queue for up to pool_timeout seconds once every connection is checked out
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(settings.database_url, **kwargs)


@lru_cache
def get_engine() -> AsyncEngine:
    return build_engine(get_settings())


@lru_cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    async with get_sessionmaker()() as session:
        yield session
