"""
Schema Registry Router.

Endpoints for reading and editing the field catalog of one record type.
One router is built per resource and mounted at its schema path
(e.g. /spi/v1/finance/schema).

Mutations accept an optional If-Match header carrying the revision
returned in the ETag of GET /fields; a stale revision is rejected
with 409.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from app.auth.dependencies import AuthContext, require_auth
from app.core import get_logger
from app.exceptions import BadInputError
from app.services.container import ResourceContext
from app.services.projection import field_envelope, schema_envelope
from app.services.resources import ResourceDefinition
from app.utils.negotiation import read_payload, render

logger = get_logger(__name__)


def parse_if_match(value: Optional[str]) -> Optional[int]:
    """
    If-Match 헤더 -> expected revision

    '*' 또는 헤더 없음은 None (무조건 적용)
    """
    if value is None:
        return None

    token = value.strip()
    if token in ("", "*"):
        return None
    if token.startswith("W/"):
        token = token[2:]
    token = token.strip('"')

    if not token.isdigit():
        raise BadInputError(f"Invalid If-Match header: {value}")
    return int(token)


def etag_for(revision: int) -> str:
    return f'"{revision}"'


def build_schema_router(resource: ResourceDefinition) -> APIRouter:
    """Build the schema API router for one resource."""
    router = APIRouter()

    def get_context(request: Request) -> ResourceContext:
        return request.app.state.container.resource(resource.name)

    @router.get(
        "/fields",
        summary=f"Get the {resource.name} schema",
        description="Returns every field definition in schema order. ETag carries the schema revision."
    )
    async def get_schema(
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        snapshot = await run_in_threadpool(lambda: context.registry.snapshot())
        return render(
            request,
            schema_envelope(snapshot.document, resource),
            headers={"ETag": etag_for(snapshot.revision)}
        )

    @router.get(
        "/fields/{name}",
        summary=f"Get one {resource.name} field definition"
    )
    async def get_field(
        name: str,
        request: Request,
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        document = await run_in_threadpool(lambda: context.registry.get_field(name))
        return render(request, field_envelope(name, document, resource))

    @router.post(
        "/fields/{name}",
        status_code=status.HTTP_201_CREATED,
        summary=f"Add a field to the {resource.name} schema"
    )
    async def add_field(
        name: str,
        request: Request,
        if_match: Optional[str] = Header(None),
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        expected = parse_if_match(if_match)
        payload = await read_payload(request)

        document = await run_in_threadpool(
            lambda: context.registry.add_field(name, payload, expected_revision=expected)
        )
        logger.info("Field added", resource=resource.name, field=name)
        return render(request, field_envelope(name, document, resource), status_code=201)

    @router.put(
        "/fields/{name}",
        summary=f"Replace a {resource.name} field definition"
    )
    async def update_field(
        name: str,
        request: Request,
        if_match: Optional[str] = Header(None),
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        expected = parse_if_match(if_match)
        payload = await read_payload(request)

        document = await run_in_threadpool(
            lambda: context.registry.update_field(name, payload, expected_revision=expected)
        )
        logger.info("Field updated", resource=resource.name, field=name)
        return render(request, field_envelope(name, document, resource))

    @router.delete(
        "/fields/{name}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete a field from the {resource.name} schema"
    )
    async def delete_field(
        name: str,
        if_match: Optional[str] = Header(None),
        auth: AuthContext = Depends(require_auth),
        context: ResourceContext = Depends(get_context)
    ):
        expected = parse_if_match(if_match)

        await run_in_threadpool(
            lambda: context.registry.delete_field(name, expected_revision=expected)
        )
        logger.info("Field deleted", resource=resource.name, field=name)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
