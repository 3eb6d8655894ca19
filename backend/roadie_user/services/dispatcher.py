"""
Roadie User Service — User Dispatcher
======================================

What:  Maps one request (method, path key, body) to exactly one store
       operation and one response.
How:   `dispatch()` walks the routing table below, calls the matching public
       operation, and translates the operation's exceptions into statuses in
       a single except-chain. Operations can also be called directly.
Who:   Called by the Lambda handler and the FastAPI users route, each of
       which builds a fresh dispatcher around a fresh store per request.

Routing Table:
    GET     + key  → read(key)           200 | 404
    GET     - key  → 400 Invalid request (no Content-Type)
    POST           → create(body)        201 | 400 | 409
    PUT     + key  → replace(key, body)  200 | 404 | 400
    PUT     - key  → 400 Invalid request
    DELETE  + key  → delete(key)         204 | 404
    DELETE  - key  → 400 Invalid request
    anything else  → 405 Method not allowed (no Content-Type)

    Every outcome of the four operations, errors included, is sent with
    Content-Type: application/json. Store failures answer 500 under the
    `respond` policy.

Identity on Replace:
    The path key always wins. Whatever `Sub` the body carries is overwritten
    before the record reaches the store.
"""

import logging
from typing import Optional, Union

from roadie_user.config import Settings, settings
from roadie_user.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from roadie_user.middleware.request_id import request_id_var
from roadie_user.schemas.http import JSON_CONTENT_TYPE, ApiRequest, ApiResponse
from roadie_user.schemas.user import UserRecord, decode_user_body
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
USER_EXISTS = "User already exists"
INVALID_REQUEST = "Invalid request"
INVALID_BODY = "Invalid request body"
METHOD_NOT_ALLOWED = "Method not allowed"
INTERNAL_ERROR = "Internal server error"


def _json_response(status_code: int, body: Optional[str] = None) -> ApiResponse:
    return ApiResponse(
        status_code=status_code,
        body=body,
        headers={"Content-Type": JSON_CONTENT_TYPE},
    )


def _plain_response(status_code: int, body: str) -> ApiResponse:
    return ApiResponse(status_code=status_code, body=body)


class UserDispatcher:
    """
    Routes user requests onto a UserStore.

    Args:
        store:                     Store for this request only.
        reject_duplicates:         Look a Create's key up first and answer 409
                                   when it exists (`reject` duplicate policy).
        reject_malformed_body:     Answer 400 for undecodable bodies instead of
                                   letting ValidationError escape.
        respond_to_store_failures: Answer 500 for DatabaseError instead of
                                   letting it escape.
    """

    def __init__(
        self,
        store: UserStore,
        *,
        reject_duplicates: bool = False,
        reject_malformed_body: bool = True,
        respond_to_store_failures: bool = True,
    ):
        self._store = store
        self.reject_duplicates = reject_duplicates
        self.reject_malformed_body = reject_malformed_body
        self.respond_to_store_failures = respond_to_store_failures

    @classmethod
    def from_settings(cls, store: UserStore, config: Settings = settings) -> "UserDispatcher":
        return cls(
            store,
            reject_duplicates=config.duplicate_key_policy == "reject",
            reject_malformed_body=config.malformed_body_policy == "reject",
            respond_to_store_failures=config.store_failure_policy == "respond",
        )

    # ── Routing ───────────────────────────────────────────────────────────

    async def dispatch(self, request: ApiRequest) -> ApiResponse:
        method = request.method
        key = request.path_key

        if method not in ("GET", "POST", "PUT", "DELETE"):
            return _plain_response(405, METHOD_NOT_ALLOWED)

        if key is None and method == "GET":
            return _plain_response(400, INVALID_REQUEST)

        if key is None and method in ("PUT", "DELETE"):
            return _json_response(400, INVALID_REQUEST)

        try:
            if method == "GET":
                user = await self.read(key)
                return _json_response(200, user.to_json())
            if method == "POST":
                user = await self.create(request.body, base64_encoded=request.base64_encoded)
                return _json_response(201, user.to_json())
            if method == "PUT":
                user = await self.replace(key, request.body, base64_encoded=request.base64_encoded)
                return _json_response(200, user.to_json())
            await self.delete(key)
            return _json_response(204)

        except NotFoundError:
            return _json_response(404, USER_NOT_FOUND)
        except ConflictError as exc:
            logger.info("[%s] %s", request_id_var.get(""), exc.message)
            return _json_response(409, USER_EXISTS)
        except ValidationError as exc:
            if not self.reject_malformed_body:
                raise
            logger.warning(
                "[%s] Rejected %s body: %s", request_id_var.get(""), method, exc.message
            )
            return _json_response(400, INVALID_BODY)
        except DatabaseError as exc:
            if not self.respond_to_store_failures:
                raise
            logger.error(
                "[%s] Store failure on %s: %s | Context: %s",
                request_id_var.get(""),
                method,
                exc.message,
                exc.context,
                exc_info=True,
            )
            return _json_response(500, INTERNAL_ERROR)

    # ── Operations ────────────────────────────────────────────────────────

    async def read(self, key: str) -> UserRecord:
        """
        Fetch the user stored under `key`.

        Raises:
            NotFoundError: No such user.
            DatabaseError: The store failed.
        """
        user = await self._store.find_by_key(key)
        if user is None:
            raise NotFoundError(key)
        return user

    async def create(self, body: Union[str, bytes, None], base64_encoded: bool = False) -> UserRecord:
        """
        Insert the user described by `body`, `Sub` taken verbatim from it.

        Under the default policy there is no existence check: a taken key
        is the store's to refuse (DuplicateKeyError, a DatabaseError).

        Raises:
            ValidationError: Body is not a user (or not decodable at all).
            ConflictError: Key taken and duplicates are rejected.
            DatabaseError: The store failed.
        """
        user = decode_user_body(body, base64_encoded=base64_encoded)
        if self.reject_duplicates and await self._store.find_by_key(user.sub) is not None:
            raise ConflictError(user.sub)
        created = await self._store.insert(user)
        logger.info("Created user %s", created.sub)
        return created

    async def replace(
        self, key: str, body: Union[str, bytes, None], base64_encoded: bool = False
    ) -> UserRecord:
        """
        Replace every field of user `key` with `body`; `Sub` becomes `key`.

        The existence check runs before the body is decoded, so a missing
        user is reported as such even when the body is unusable.
        """
        await self.read(key)
        user = decode_user_body(body, key=key, base64_encoded=base64_encoded)
        replaced = await self._store.replace(user)
        logger.info("Replaced user %s", replaced.sub)
        return replaced

    async def delete(self, key: str) -> None:
        user = await self.read(key)
        await self._store.remove(user)
        logger.info("Deleted user %s", key)
