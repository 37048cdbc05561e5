"""Health check endpoints. Liveness has no dependencies; readiness needs a loaded policy."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from crudguard.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "No policy loaded", "model": ReadinessErrorResponse}},
)
def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 once the access policy is loaded; 503 otherwise."""
    holder = getattr(request.app.state, "policy_holder", None)
    if holder is None:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Access policy is not loaded").model_dump(),
        )
    snapshot = holder.current()
    return ReadinessResponse(roles=len(snapshot.roles), resources=len(snapshot.resources))
