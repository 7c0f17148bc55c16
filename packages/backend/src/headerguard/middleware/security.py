"""Security headers middleware.

Learn: Runs the header policy on every response, whatever route served
it (index page, static files, the /_api router). The policy is built
once in create_app() and only read here, so one instance is shared by
all concurrent requests.

ServerSignatureMiddleware sits just inside it and advertises the
framework the way Express does with X-Powered-By, which is what the
hide_powered_by rule then replaces.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from headerguard.policy import PolicyConfig


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Apply the header policy to all responses."""

    def __init__(self, app, policy: PolicyConfig):
        super().__init__(app)
        self.policy = policy

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        self.policy.apply(response.headers)
        return response


class ServerSignatureMiddleware(BaseHTTPMiddleware):
    """Stamp X-Powered-By with the framework signature."""

    def __init__(self, app, signature: str):
        super().__init__(app)
        self.signature = signature

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        if self.signature:
            response.headers["X-Powered-By"] = self.signature
        return response
