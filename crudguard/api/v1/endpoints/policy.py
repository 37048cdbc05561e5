"""Policy API: what the caller may do, and hot reload of the policy document."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from crudguard.api.v1.dependencies import (
    get_identity,
    get_policy_holder,
    get_policy_snapshot,
    get_request_authorizer,
)
from crudguard.application.dtos.identity import RequestIdentity
from crudguard.application.services.request_authorizer import RequestAuthorizer
from crudguard.core.config import get_settings
from crudguard.core.limiter import limit_reload
from crudguard.core.policy_holder import PolicyHolder
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.enums import Operation
from crudguard.domain.exceptions import ResourceNotFoundException
from crudguard.schemas.policy import (
    AccessSummaryResponse,
    PolicyReloadResponse,
    ResourceAccessResponse,
    ResourceOperations,
)

router = APIRouter()

# Resource whose update rule gates POST /policy/reload.
POLICY_RESOURCE = "policy"


def _sorted(names: frozenset[str] | None) -> list[str] | None:
    return sorted(names) if names is not None else None


@router.get("/access", response_model=AccessSummaryResponse)
async def get_access_summary(
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    snapshot: Annotated[PolicySnapshot, Depends(get_policy_snapshot)],
    authorizer: Annotated[RequestAuthorizer, Depends(get_request_authorizer)],
) -> AccessSummaryResponse:
    """Operations the caller's role may perform, per resource (only resources with any)."""
    resources = []
    for name in snapshot.resource_names():
        operations = authorizer.evaluator.allowed_operations(identity.role, name)
        if operations:
            policy = snapshot.resources[name]
            resources.append(
                ResourceOperations(
                    resource=name,
                    description=policy.description,
                    operations=[op.value for op in operations],
                )
            )
    return AccessSummaryResponse(role=identity.role, resources=resources)


@router.get("/access/{resource}", response_model=ResourceAccessResponse)
async def get_resource_access(
    resource: str,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    snapshot: Annotated[PolicySnapshot, Depends(get_policy_snapshot)],
    authorizer: Annotated[RequestAuthorizer, Depends(get_request_authorizer)],
) -> ResourceAccessResponse:
    """Field-level access for the caller on one resource (requires read access)."""
    policy = snapshot.resource(resource)
    if policy is None:
        raise ResourceNotFoundException("resource", resource)
    decision = authorizer.authorize(identity, resource, Operation.READ)
    operations = authorizer.evaluator.allowed_operations(identity.role, resource)
    return ResourceAccessResponse(
        resource=resource,
        role=identity.role,
        operations=[op.value for op in operations],
        row_policy=policy.row_policy_for(identity.role),
        readable_fields=_sorted(decision.readable_fields),
        writable_fields=_sorted(decision.writable_fields),
        immutable_fields=sorted(policy.immutable_fields),
        required_fields=sorted(policy.required_fields),
        sortable_fields=sorted(policy.sortable_fields),
        searchable_fields=sorted(
            policy.searchable_fields
            if decision.readable_fields is None
            else policy.searchable_fields & decision.readable_fields
        ),
    )


@router.post("/reload", response_model=PolicyReloadResponse)
@limit_reload
async def reload_policy(
    request: Request,
    identity: Annotated[RequestIdentity, Depends(get_identity)],
    holder: Annotated[PolicyHolder, Depends(get_policy_holder)],
    authorizer: Annotated[RequestAuthorizer, Depends(get_request_authorizer)],
) -> PolicyReloadResponse:
    """Re-read the policy document and swap it in. The old policy stays live on failure."""
    if not get_settings().policy_reload_enabled:
        raise HTTPException(status_code=404, detail="Not Found")
    authorizer.authorize(identity, POLICY_RESOURCE, Operation.UPDATE)
    snapshot = await holder.reload()
    return PolicyReloadResponse(
        source=snapshot.source,
        roles=len(snapshot.roles),
        resources=len(snapshot.resources),
    )
