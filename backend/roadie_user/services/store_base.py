"""
Roadie User Service — Abstract User Store Interface
====================================================

What:  Abstract base class defining the persistence contract the dispatcher
       relies on.
How:   Concrete stores inherit from UserStore and implement the four
       operations. Any engine that can look records up by key works.

Implementations:
    - SqlAlchemyUserStore: PostgreSQL (asyncpg) or SQLite (aiosqlite)
    - InMemoryUserStore: process-local dict
"""

from abc import ABC, abstractmethod
from typing import Optional

from roadie_user.schemas.user import UserRecord


class UserStore(ABC):
    """
    Key-addressed persistence for user records.

    Contract:
        - Every operation may suspend on I/O
        - Failures raise DatabaseError (DuplicateKeyError for key collisions
          on insert); a store never answers a failure with a default value
        - Returned records are fresh objects; mutating them does not touch
          stored state
    """

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[UserRecord]:
        """Return the record stored under `key`, or None."""
        ...

    @abstractmethod
    async def insert(self, user: UserRecord) -> UserRecord:
        """
        Store a new record.

        Returns:
            The record as stored, including any fields the store assigned.

        Raises:
            DuplicateKeyError: `user.sub` is already taken.
            DatabaseError: Any other failure.
        """
        ...

    @abstractmethod
    async def replace(self, user: UserRecord) -> UserRecord:
        """Overwrite every field of the record stored under `user.sub`."""
        ...

    @abstractmethod
    async def remove(self, user: UserRecord) -> None:
        """Delete the record stored under `user.sub`."""
        ...

    async def health_check(self) -> bool:
        """True when the backing storage is reachable."""
        return True
