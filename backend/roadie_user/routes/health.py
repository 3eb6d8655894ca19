"""
Roadie User Service — Health Check Route
=========================================

What:  GET /health for local monitoring and container probes.
How:   Asks this request's store (`get_user_store`, the same dependency the
       users routes use) whether its storage answers: `SELECT 1` for the
       database backend, always reachable for the memory backend.
       healthy (200) when the store answers, unhealthy (503) otherwise.
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from roadie_user import __version__
from roadie_user.routes.users import get_user_store
from roadie_user.schemas.user import HealthResponse
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
)
async def health_check(request: Request, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    reachable = await store.health_check()
    if getattr(request.app.state, "memory_store", None) is not None:
        store_status = "memory:" + ("available" if reachable else "unavailable")
    else:
        store_status = "database:" + ("connected" if reachable else "disconnected")

    health = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if reachable else 503, content=health.model_dump())
