from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncAttrs
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from school_results.core.logger import logger


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Database:
    """Engine and session factory for one application instance."""

    def __init__(self, url: str, echo: bool = False):
        engine_options: dict = {"echo": echo}
        if url.startswith("sqlite"):
            engine_options["poolclass"] = NullPool
        else:
            engine_options.update(pool_size=5, max_overflow=10)

        self.url = url
        self.engine = create_async_engine(url, **engine_options)
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        # Registers every table on Base.metadata before create_all.
        import school_results.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import school_results.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession | Any, Any]:
    database: Database = request.app.state.database
    async with database.sessionmaker() as session:
        logger.debug("Database session opened")
        try:
            yield session
        finally:
            logger.debug("Database session closed")
