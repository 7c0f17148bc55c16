"""Internal API routes, mounted under /_api.

Learn: The header policy is applied by middleware, not per route, so
these endpoints get exactly the same headers as the index page and
static files.
"""

from fastapi import APIRouter

from headerguard.api.health import router as health_router
from headerguard.api.policy import router as policy_router

api_router = APIRouter(prefix="/_api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(policy_router, tags=["policy"])
