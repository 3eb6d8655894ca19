"""
Roadie User Service — SQLAlchemy User Store
============================================

What:  UserStore over one async SQLAlchemy session.
How:   Lookups use the identity map (`session.get`). Each write is its own
       unit of work: stage the change, commit, and on failure roll back and
       raise DatabaseError (DuplicateKeyError for an insert that hits the
       primary key).
Who:   Built per invocation by the Lambda handler and the FastAPI dependency,
       from the session opened by `session_scope()`.

Concurrency:
    Nothing here locks. A find followed by a replace on the same key from two
    concurrent invocations is last-writer-wins; isolation is whatever the
    database's default transaction level provides.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from roadie_user.exceptions import DatabaseError, DuplicateKeyError
from roadie_user.models.user import User
from roadie_user.schemas.user import UserRecord
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)


def _to_record(row: User) -> UserRecord:
    return UserRecord.from_profile(row.sub, row.profile)


class SqlAlchemyUserStore(UserStore):
    """
    Persists users in the `users` table.

    Args:
        session: Open AsyncSession owned by the caller. The store commits and
                 rolls back on it but never closes it.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    @asynccontextmanager
    async def _unit_of_work(self, operation: str, key: str, commit: bool = True) -> AsyncIterator[None]:
        try:
            yield
            if commit:
                await self._session.commit()
        except IntegrityError as e:
            await self._rollback()
            logger.warning("Integrity error during %s of user %s: %s", operation, key, e.orig)
            if operation == "insert":
                raise DuplicateKeyError(key=key, context={"error": str(e.orig)}) from e
            raise DatabaseError(
                message=f"Could not {operation} the user.",
                context={"key": key, "error": str(e.orig)},
            ) from e
        except (SQLAlchemyError, OSError) as e:
            await self._rollback()
            logger.error("Database error during %s of user %s: %s", operation, key, str(e))
            raise DatabaseError(
                message=f"Could not {operation} the user.",
                context={"key": key, "error": str(e)},
            ) from e

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except (SQLAlchemyError, OSError):
            logger.error("Rollback failed", exc_info=True)

    async def find_by_key(self, key: str) -> Optional[UserRecord]:
        async with self._unit_of_work("fetch", key, commit=False):
            row = await self._session.get(User, key)
        if row is None:
            return None
        return _to_record(row)

    async def insert(self, user: UserRecord) -> UserRecord:
        row = User(sub=user.sub, profile=user.profile)
        async with self._unit_of_work("insert", user.sub):
            self._session.add(row)
        logger.info("User %s inserted", user.sub)
        return _to_record(row)

    async def replace(self, user: UserRecord) -> UserRecord:
        # merge() copies the new state onto the instance already loaded by
        # find_by_key, so this is an UPDATE, never a second INSERT.
        async with self._unit_of_work("replace", user.sub):
            row = await self._session.merge(User(sub=user.sub, profile=user.profile))
        logger.info("User %s replaced", user.sub)
        return _to_record(row)

    async def remove(self, user: UserRecord) -> None:
        async with self._unit_of_work("remove", user.sub):
            row = await self._session.get(User, user.sub)
            if row is not None:
                await self._session.delete(row)
        logger.info("User %s removed", user.sub)

    async def health_check(self) -> bool:
        """`SELECT 1` on this store's session; a failure is rolled back and reported as False."""
        try:
            await self._session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            await self._rollback()
            return False
        return True
