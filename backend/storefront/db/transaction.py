"""
Transaction management utilities.

Provides context managers for explicit transaction boundaries
to prevent partial commits on multi-step operations.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

logger = structlog.get_logger()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Execute operations atomically - all or nothing.

    Usage:
        async with atomic(db) as session:
            session.add(obj1)
            session.add(obj2)
            # Auto-commits on success, auto-rollbacks on exception

    Raises:
        Exception: Re-raises any exception after rollback
    """
    try:
        yield db
        await db.commit()
    except BaseException as e:
        # BaseException so a cancelled sweep also rolls back
        await db.rollback()
        logger.error("Transaction rolled back", error=str(e) or type(e).__name__)
        raise


@asynccontextmanager
async def read_only(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """
    Short-lived session for pure reads.

    The transaction is always rolled back, so nothing a caller does here
    can reach the source tables.
    """
    async with session_maker() as db:
        try:
            yield db
        finally:
            await db.rollback()
