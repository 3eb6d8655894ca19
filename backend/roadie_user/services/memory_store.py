"""
Roadie User Service — In-Memory User Store
===========================================

What:  Dict-backed UserStore for tests and STORE_BACKEND=memory local runs.
How:   Records are copied on the way in and on the way out, so callers can
       never alias stored state. Inserting an existing key raises
       DuplicateKeyError, the same way a primary-key constraint would.
"""

import logging
from typing import Dict, Optional

from roadie_user.exceptions import DuplicateKeyError
from roadie_user.schemas.user import UserRecord
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)


class InMemoryUserStore(UserStore):

    def __init__(self):
        self._records: Dict[str, UserRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def find_by_key(self, key: str) -> Optional[UserRecord]:
        record = self._records.get(key)
        return record.model_copy(deep=True) if record is not None else None

    async def insert(self, user: UserRecord) -> UserRecord:
        if user.sub in self._records:
            raise DuplicateKeyError(key=user.sub)
        self._records[user.sub] = user.model_copy(deep=True)
        logger.debug("User %s inserted", user.sub)
        return user.model_copy(deep=True)

    async def replace(self, user: UserRecord) -> UserRecord:
        self._records[user.sub] = user.model_copy(deep=True)
        logger.debug("User %s replaced", user.sub)
        return user.model_copy(deep=True)

    async def remove(self, user: UserRecord) -> None:
        self._records.pop(user.sub, None)
        logger.debug("User %s removed", user.sub)
