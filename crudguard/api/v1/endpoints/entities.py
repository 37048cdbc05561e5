"""Generic entity API: one router for every resource declared in the access policy.

Routes only translate HTTP to EntityService calls; authorization, row scoping,
field projection and auditing all happen in the use case.
"""

from typing import Annotated, Any, Literal

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from crudguard.api.v1.dependencies import get_entity_service, get_identity
from crudguard.application.dtos.entity import ListQuery
from crudguard.application.dtos.identity import RequestIdentity
from crudguard.application.use_cases.entities import EntityService
from crudguard.core.config import get_settings
from crudguard.core.limiter import limit_writes

router = APIRouter()

# Query parameters consumed by the list endpoint itself; the rest are equality filters.
_RESERVED_PARAMS = frozenset({"skip", "limit", "sort", "order", "search"})


@router.get("/{resource}", response_model=list[dict[str, Any]])
async def list_entities(
    request: Request,
    resource: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    service: Annotated[EntityService, Depends(get_entity_service)],
    skip: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1),
    sort: str | None = Query(None, description="Field to sort by"),
    order: Literal["asc", "desc"] = Query("asc"),
    search: str | None = Query(None, max_length=200, description="Case-insensitive text search"),
) -> list[dict[str, Any]]:
    """List rows visible to the caller. Other query parameters filter by equality."""
    filters = {
        key: value
        for key, value in request.query_params.items()
        if key not in _RESERVED_PARAMS
    }
    query = ListQuery(
        skip=skip,
        limit=limit if limit is not None else get_settings().default_page_size,
        filters=filters,
        sort=sort,
        descending=order == "desc",
        search=search,
    )
    page = await service.list(identity, resource, query)
    return page.items


@router.get("/{resource}/{entity_id}", response_model=dict[str, Any])
async def get_entity(
    resource: str,
    entity_id: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    service: Annotated[EntityService, Depends(get_entity_service)],
) -> dict[str, Any]:
    """Get one row; out-of-scope rows are reported as not found."""
    return await service.get(identity, resource, entity_id)


@router.post("/{resource}", response_model=dict[str, Any], status_code=201)
@limit_writes
async def create_entity(
    request: Request,
    resource: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    service: Annotated[EntityService, Depends(get_entity_service)],
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Create a row from the caller's writable fields."""
    return await service.create(identity, resource, body)


@router.patch("/{resource}/{entity_id}", response_model=dict[str, Any])
@limit_writes
async def update_entity(
    request: Request,
    resource: str,
    entity_id: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    service: Annotated[EntityService, Depends(get_entity_service)],
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Partially update a row."""
    return await service.update(identity, resource, entity_id, body)


@router.delete("/{resource}/{entity_id}", status_code=204)
@limit_writes
async def delete_entity(
    request: Request,
    resource: str,
    entity_id: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    service: Annotated[EntityService, Depends(get_entity_service)],
) -> Response:
    await service.delete(identity, resource, entity_id)
    return Response(status_code=204)
