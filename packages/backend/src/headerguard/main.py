"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The header policy is built here, before the app object even
exists, so a bad configuration raises ConfigurationError and the server
never starts listening (fail closed). Nothing about the policy happens
in the lifespan; it only logs.

Nothing is built at import time. Run it directly with:

    uvicorn --factory headerguard.main:create_app

or through `headerguard serve`.

Routes are thin: an index page, static files and the /_api router. The
interesting part is the middleware stack wrapped around all of them.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from headerguard import __version__
from headerguard.api import api_router
from headerguard.config import Settings, load_settings
from headerguard.middleware.request_id import RequestIdMiddleware
from headerguard.middleware.security import SecurityHeadersMiddleware, ServerSignatureMiddleware
from headerguard.platform import PlatformHeaders, PlatformHeadersMiddleware
from headerguard.policy import build_policy

logger = structlog.get_logger()

PACKAGE_DIR = Path(__file__).parent
VIEWS_DIR = PACKAGE_DIR / "views"
PUBLIC_DIR = PACKAGE_DIR / "public"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logging."""
    settings: Settings = app.state.settings
    logger.info(
        "headerguard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        headers=app.state.policy.header_names(),
    )
    yield
    logger.info("headerguard.shutdown")


def create_app(
    settings: Optional[Settings] = None,
    platform: Optional[PlatformHeaders] = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Raises ConfigurationError if the settings or policy are malformed.
    """
    settings = settings or load_settings()
    platform = platform or PlatformHeaders(settings.platform_headers)
    policy = build_policy(settings, upstream=platform)

    app = FastAPI(
        title="headerguard",
        description="Security response headers applied to every route",
        version=__version__,
        lifespan=lifespan,
        docs_url="/_api/docs",
        redoc_url=None,
        openapi_url="/_api/openapi.json",
    )
    app.state.settings = settings
    app.state.policy = policy
    app.state.platform = platform

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: Platform → RequestId → SecurityHeaders → ServerSignature → handler
    app.add_middleware(ServerSignatureMiddleware, signature=settings.server_signature)
    app.add_middleware(SecurityHeadersMiddleware, policy=policy)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(PlatformHeadersMiddleware, platform=platform)

    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(VIEWS_DIR / "index.html")

    # Last, so it only sees paths no route matched
    app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="public")

    return app

