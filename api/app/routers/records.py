"""
Records Router.

CRUD endpoints for the records of one resource type. Writes are
validated against the live schema; reads are projected through it.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from app.auth.dependencies import AuthContext, require_auth
from app.core import get_logger
from app.services.container import ResourceContext
from app.services.resources import ResourceDefinition
from app.utils.negotiation import read_payload, render

logger = get_logger(__name__)


def build_record_router(resource: ResourceDefinition) -> APIRouter:
    """Build the record API router for one resource."""
    router = APIRouter()

    def get_context(request: Request) -> ResourceContext:
        return request.app.state.container.resource(resource.name)

    @router.get("", summary=f"List {resource.plural}")
    async def list_records(
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        envelope = await run_in_threadpool(lambda: context.service.list_records())
        return render(request, envelope)

    @router.get("/{record_id}", summary=f"Get one {resource.resource_type} record")
    async def get_record(
        record_id: str,
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        envelope = await run_in_threadpool(lambda: context.service.get_record(record_id))
        return render(request, envelope)

    @router.post("", status_code=status.HTTP_201_CREATED, summary=f"Create a {resource.resource_type} record")
    async def create_record(
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        payload = await read_payload(request)
        envelope = await run_in_threadpool(lambda: context.service.create_record(payload))
        return render(request, envelope, status_code=201)

    @router.put("/{record_id}", summary=f"Replace a {resource.resource_type} record")
    async def update_record(
        record_id: str,
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        payload = await read_payload(request)
        envelope = await run_in_threadpool(
            lambda: context.service.update_record(record_id, payload)
        )
        return render(request, envelope)

    @router.delete(
        "/{record_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete a {resource.resource_type} record"
    )
    async def delete_record(
        record_id: str,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        await run_in_threadpool(lambda: context.service.delete_record(record_id))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
