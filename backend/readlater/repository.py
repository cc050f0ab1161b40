"""
Readlater Backend — Authorized Transaction Wrapper
====================================================

What:  Runs a unit of work inside one database transaction scoped to a user.
How:   TransactionManager.run() opens a session, publishes the caller's id as
       a transaction-local claim (PostgreSQL row-level security reads it),
       awaits the unit of work, commits on success and rolls back on any
       exception. Driver and ORM failures come back as DatabaseError; anything
       else is re-raised unchanged.
Who:   Every service function goes through run(); nothing else commits.

    async def unit_of_work(session: AsyncSession) -> Rule:
        ...
    rule = await trx.run(unit_of_work, user_id=user_id)

All mutations inside one run() are atomic as a group. There is no
cross-request locking: the transaction is the only multi-statement guarantee.
"""

import logging
import uuid
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from readlater.exceptions import DatabaseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[AsyncSession], Awaitable[T]]

# Transaction-local setting read by the row-level security policies
CLAIMS_SETTING = "readlater.uid"


class TransactionManager:
    """
    Factory for authorized, transaction-scoped sessions.

    expire_on_commit=False keeps returned ORM objects readable after commit,
    so services can hand entities (and pre-delete snapshots) back to callers.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._sets_claims = engine.dialect.name == "postgresql"

    async def run(
        self,
        unit_of_work: UnitOfWork[T],
        user_id: Optional[uuid.UUID] = None,
    ) -> T:
        """
        Execute `unit_of_work` in a fresh transaction.

        Args:
            unit_of_work: Coroutine function receiving the session.
            user_id: Authenticated owner; None for system work (ingestion).

        Returns:
            Whatever the unit of work returns, after commit.

        Raises:
            DatabaseError: The driver or ORM failed (constraint violation,
                lost connection); the original is chained as __cause__.
            Anything else the unit of work raises, unchanged.
        """
        async with self.session_factory() as session:
            try:
                if user_id is not None and self._sets_claims:
                    await session.execute(
                        text("SELECT set_config(:name, :uid, true)"),
                        {"name": CLAIMS_SETTING, "uid": str(user_id)},
                    )
                result = await unit_of_work(session)
                await session.commit()
                return result
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Transaction failed (user=%s): %s", user_id, str(e))
                raise DatabaseError(
                    context={"original_error": type(e).__name__},
                ) from e
            except Exception:
                await session.rollback()
                logger.debug("Transaction rolled back (user=%s)", user_id)
                raise
