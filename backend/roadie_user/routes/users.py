"""
Roadie User Service — Users Route Handlers
===========================================

What:  Local HTTP surface mirroring the API Gateway routes `/users` and
       `/users/{id}`.
How:   Both routes accept every verb so that the dispatcher, not FastAPI,
       decides between 400 and 405. The dispatcher's status, headers and body
       are returned verbatim; no JSON re-encoding happens here. Bodies are
       forwarded as raw bytes and decoded (strictly) by the dispatcher.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from roadie_user.database import session_scope
from roadie_user.schemas.http import ApiRequest, ApiResponse
from roadie_user.services.dispatcher import UserDispatcher
from roadie_user.services.sql_store import SqlAlchemyUserStore
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


async def get_user_store(request: Request) -> AsyncGenerator[UserStore, None]:
    """
    FastAPI dependency providing this request's store.

    The app-owned in-memory store when one is configured, otherwise a
    SqlAlchemyUserStore over a fresh session.
    """
    memory_store = getattr(request.app.state, "memory_store", None)
    if memory_store is not None:
        yield memory_store
    else:
        async with session_scope() as session:
            yield SqlAlchemyUserStore(session)


async def get_dispatcher(store: UserStore = Depends(get_user_store)) -> UserDispatcher:
    return UserDispatcher.from_settings(store)


def to_starlette(result: ApiResponse) -> Response:
    return Response(
        content=result.body.encode("utf-8") if result.body is not None else b"",
        status_code=result.status_code,
        headers=result.headers,
    )


async def _forward(request: Request, dispatcher: UserDispatcher, path_key: Optional[str]) -> Response:
    raw = await request.body()
    api_request = ApiRequest(method=request.method, path_key=path_key, body=raw or None)
    result = await dispatcher.dispatch(api_request)
    return to_starlette(result)


@router.api_route("/users", methods=ALL_METHODS, summary="User collection (create)")
async def users_collection(
    request: Request,
    dispatcher: UserDispatcher = Depends(get_dispatcher),
) -> Response:
    """POST creates a user; any other verb without a key is rejected."""
    return await _forward(request, dispatcher, path_key=None)


@router.api_route("/users/{user_id}", methods=ALL_METHODS, summary="Single user (read, replace, delete)")
async def users_item(
    user_id: str,
    request: Request,
    dispatcher: UserDispatcher = Depends(get_dispatcher),
) -> Response:
    return await _forward(request, dispatcher, path_key=user_id)
