"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when a policy is loaded."""

    status: str = Field(default="ok", description="Readiness status")
    roles: int = Field(..., description="Number of roles in the live policy")
    resources: int = Field(..., description="Number of resources in the live policy")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when no policy is loaded (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason")
