"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from crudguard.api.v1.dependencies.
"""

from fastapi import APIRouter

from crudguard.api.v1.endpoints import entities, health, policy

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(policy.router, prefix="/policy", tags=["policy"])
api_router.include_router(entities.router, prefix="/entities", tags=["entities"])
