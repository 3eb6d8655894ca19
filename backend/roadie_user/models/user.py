"""
Roadie User Service — User SQLAlchemy Model
============================================

What:  ORM model for the `users` table.
How:   `sub` is the primary key. Every other field of a user record lives in
       the `profile` JSON document; the service never looks inside it.
Who:   Used by SqlAlchemyUserStore only. The rest of the code base speaks
       `UserRecord` (schemas/user.py).

Table Design:
    - sub: external identity, client-supplied on create, immutable afterwards
    - profile: flat JSON object, JSONB on PostgreSQL, JSON elsewhere (SQLite)
"""

from typing import Any, Dict

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from roadie_user.database import Base
from roadie_user.schemas.user import SUB_MAX_LENGTH


class User(Base):
    """
    Represents one user row.

    Lifecycle:
        1. Inserted by Create with the client-supplied `sub`
        2. Profile replaced wholesale by Replace (`sub` never changes)
        3. Deleted by Delete

    Query Patterns:
        - Everything is a primary-key lookup: WHERE sub = :key
    """

    __tablename__ = "users"

    sub: Mapped[str] = mapped_column(
        String(SUB_MAX_LENGTH),
        primary_key=True,
        comment="Stable external identity of the user",
    )

    profile: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
        comment="Every user field other than Sub, stored verbatim",
    )

    def __repr__(self) -> str:
        return f"<User(sub='{self.sub}', fields={len(self.profile or {})})>"
