"""
Base class for the database-backed services.

Every operation runs in its own short transaction; SQLite lock contention
is retried with exponential backoff.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseService:
    """Base class for services persisting to the bot database."""

    def __init__(self, session_factory, max_retries: int = 3, retry_delay: float = 0.1):
        """
        Args:
            session_factory: async_sessionmaker from Database
            max_retries: Attempts per operation when the database is busy
            retry_delay: First backoff delay in seconds, doubled per attempt
        """
        self.session_factory = session_factory
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Session committed on success and rolled back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def run_in_transaction(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Run operation(session) in a fresh transaction.

        SQLite reports a busy database as OperationalError ("database is
        locked"); only those are retried, anything else propagates.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                async with self.get_session() as session:
                    return await operation(session)
            except OperationalError as e:
                if attempt == self.max_retries:
                    logger.error(f"{operation.__name__} failed after {attempt} attempts: {e}")
                    raise
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(f"Database busy in {operation.__name__} (attempt {attempt}), retrying in {delay:.1f}s")
                await asyncio.sleep(delay)
