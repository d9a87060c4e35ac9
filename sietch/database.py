"""Async engine and the per-request session dependency.

Connection failures surface as ``OperationalError``/``InterfaceError`` and are
rendered as 503 by the handlers in ``sietch.main``.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import sietch.models  # noqa: F401 - registers every table on Base.metadata
from sietch.config import settings

engine = create_async_engine(settings.database_url, echo=False, pool_pre_ping=True)
# Services keep using rows after commit, so nothing is expired on commit
SessionFactory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionFactory() as session:
        yield session
