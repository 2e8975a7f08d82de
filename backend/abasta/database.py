"""Database engine, session factory, and declarative base.

All tables live in one schema; company scoping is done with a
`company_id` foreign key rather than per-tenant schemas.

Session dependency for FastAPI:
  - get_db()  → one session per request, committed when the handler
                returns and rolled back on any exception
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from abasta.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": settings.debug}
    # SQLite doesn't support pool sizing
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = 20
        kwargs["max_overflow"] = 10
    return kwargs


engine = create_async_engine(
    settings.database_url, **_engine_kwargs(settings.database_url)
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Declarative base for every Abasta model."""
    pass


async def get_db() -> AsyncSession:
    """Yield a request-scoped session wrapped in a single transaction."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
