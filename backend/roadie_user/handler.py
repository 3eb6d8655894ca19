"""
Roadie User Service — AWS Lambda Entry Point
=============================================

What:  `lambda_handler(event, context)`, invoked by an API Gateway HTTP API
       (payload format 2.0) for every request on `/users` and `/users/{id}`.
How:   Decode the proxy event into an ApiRequest, open one database session,
       wrap it in a SqlAlchemyUserStore, let a fresh UserDispatcher answer,
       and encode the ApiResponse back into a proxy response dict.

Process Model:
    Module import happens once per container (cold start): logging is set
    up and the engine's connection pool is created. Every invocation then
    runs on the same event loop, so pooled connections stay usable across
    warm invocations.

Failure Propagation:
    Exceptions the dispatcher lets escape (the `raise` policies) escape this
    function too; Lambda reports the invocation as failed and API Gateway
    answers 500.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping

from roadie_user.config import Settings, settings
from roadie_user.database import session_scope
from roadie_user.logging_setup import setup_logging
from roadie_user.middleware.logging import level_for_status
from roadie_user.middleware.request_id import new_request_id, request_id_var
from roadie_user.schemas.http import ApiRequest
from roadie_user.services.dispatcher import UserDispatcher
from roadie_user.services.sql_store import SqlAlchemyUserStore
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)

setup_logging()

_loop = asyncio.new_event_loop()


async def handle_event(
    event: Mapping[str, Any],
    store: UserStore,
    config: Settings = settings,
) -> Dict[str, Any]:
    """
    Answer one proxy event against `store`.

    Returns:
        API Gateway proxy response: {"statusCode", "headers"?, "body"?}
    """
    request_context = event.get("requestContext") or {}
    rid = request_context.get("requestId") or new_request_id()
    request_id_var.set(rid)

    request = ApiRequest.from_gateway_event(event, key_param=config.path_key_param)
    response = await UserDispatcher.from_settings(store, config).dispatch(request)

    logger.log(
        level_for_status(response.status_code),
        "%s %s %d [%s]",
        request.method,
        event.get("rawPath") or event.get("path") or "",
        response.status_code,
        rid,
    )
    return response.to_gateway()


async def _invoke(event: Mapping[str, Any]) -> Dict[str, Any]:
    async with session_scope() as session:
        return await handle_event(event, SqlAlchemyUserStore(session))


def lambda_handler(event: Mapping[str, Any], context: Any) -> Dict[str, Any]:
    return _loop.run_until_complete(_invoke(event))
