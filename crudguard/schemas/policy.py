"""Policy introspection API schemas: what the caller may do, per resource."""

from pydantic import BaseModel, Field


class ResourceOperations(BaseModel):
    """Operations the caller's role may perform on one resource."""

    resource: str
    description: str = ""
    operations: list[str] = Field(default_factory=list)


class AccessSummaryResponse(BaseModel):
    """Response for GET /policy/access."""

    role: str
    resources: list[ResourceOperations]


class ResourceAccessResponse(BaseModel):
    """Response for GET /policy/access/{resource}.

    readable_fields / writable_fields are null when the resource has no field
    table (no field-level restriction).
    """

    resource: str
    role: str
    operations: list[str]
    row_policy: str | None = Field(
        default=None, description="Row-level security policy id applied to this role"
    )
    readable_fields: list[str] | None = None
    writable_fields: list[str] | None = None
    immutable_fields: list[str] = Field(default_factory=list)
    required_fields: list[str] = Field(default_factory=list)
    sortable_fields: list[str] = Field(default_factory=list)
    searchable_fields: list[str] = Field(default_factory=list)


class PolicyReloadResponse(BaseModel):
    """Response for POST /policy/reload."""

    status: str = "reloaded"
    source: str | None = None
    roles: int
    resources: int
