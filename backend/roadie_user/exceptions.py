"""
Roadie User Service — Custom Exception Hierarchy
=================================================

What:  Errors raised by the stores and by the dispatcher operations.
How:   Every error has a client-safe `message` and a `context` dict for the
       server log. `UserDispatcher.dispatch` owns the mapping to responses.

Exception Hierarchy:
    RoadieUserError (base)
    ├── ValidationError          → 400 Invalid request body
    ├── NotFoundError            → 404 User not found
    ├── ConflictError            → 409 User already exists
    └── DatabaseError            → 500 Internal server error
        └── DuplicateKeyError    → 500 (uniqueness constraint hit on insert)
"""

from typing import Any, Dict, Optional


class RoadieUserError(Exception):
    """
    Root of the hierarchy; the FastAPI host's last-resort handler catches it.

    Attributes:
        message:  Safe to show to API consumers
        context:  Debug details for the log only
    """

    def __init__(self, message: str = "Unexpected error", context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context) if context else {}


class ValidationError(RoadieUserError):
    """
    A request body that does not decode to a user record.

    When:  Body missing, not JSON, not an object, `Sub` missing or not a
           non-empty string.
    HTTP:  400 Bad Request under the `reject` malformed-body policy.
    """

    def __init__(
        self,
        message: str = "Invalid user body",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.field = field
        if field is not None:
            self.context.setdefault("field", field)


class NotFoundError(RoadieUserError):
    """No user is stored under `key`. Stores return None; operations raise this."""

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"No user stored under key '{key}'", context)
        self.key = key
        self.context["key"] = key


class ConflictError(RoadieUserError):
    """Create found `key` taken under the `reject` duplicate-key policy (409)."""

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Key '{key}' is already taken", context)
        self.key = key
        self.context["key"] = key


class DatabaseError(RoadieUserError):
    """
    A store operation failed.

    When:  Connection refused or lost mid-query, constraint violation, deadlock.
    HTTP:  500 Internal Server Error under the `respond` store-failure policy.

    Security Note:
        Driver errors (SQL text, constraint names) belong in `context`;
        the client only ever sees "Internal server error".
    """

    def __init__(self, message: str = "User store unavailable", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class DuplicateKeyError(DatabaseError):
    """
    An insert collided with an existing key.

    Reported like any other store failure; the `reject` duplicate-key policy
    is what turns a taken key into 409.
    """

    def __init__(self, key: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__("Insert collided with an existing key", context)
        self.key = key
        if key is not None:
            self.context["key"] = key
