"""
Health Router.

Unauthenticated health endpoint for load balancers and monitoring.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Returns service health with per-resource schema revision. 503 when unhealthy.",
)
async def health_check(request: Request):
    health_service = request.app.state.health_service
    health = await run_in_threadpool(health_service.check_health)

    status_code = 503 if health["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=health)
