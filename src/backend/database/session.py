"""
Async SQLAlchemy engine and session factory.

Search requests only read, but the dependency still commits/rolls back so
that other handlers sharing it behave consistently.
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from config import settings


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.LOG_LEVEL.upper() == "DEBUG",
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
)

AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Example:
        @app.get("/api/problems")
        async def list_problems(db: AsyncSession = Depends(get_db)):
            return await ProblemRepository(db).get_all()
    """
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
