"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes use
providers from clientchain.api.v1.dependencies only.
"""

from fastapi import APIRouter

from clientchain.api.v1.endpoints import credits, events, health, workflows

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
api_router.include_router(credits.router, prefix="/subjects", tags=["credits"])
