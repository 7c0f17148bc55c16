"""Hosting platform header management.

Learn: Some hosts (PaaS proxies, managed ingress) add their own security
headers, typically HSTS, to every response on the way out. Whatever the
app sets, the platform's value ends up on the wire unless the app first
tells the platform to let go of that header.

PlatformHeaders models that layer: a set of managed headers written on
every response, minus any that have been relinquished. The policy's
FORCE_SET rules relinquish their headers at startup
(PolicyConfig.take_over_upstream).
"""

from collections.abc import Mapping, MutableMapping
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class PlatformHeaders:
    """Headers the platform sets itself, and the ones it has handed over."""

    def __init__(self, managed: Optional[Mapping[str, str]] = None):
        # lowercased name -> (original name, value)
        self._managed = {
            name.lower(): (name, value) for name, value in (managed or {}).items()
        }
        self._relinquished: set[str] = set()

    def manages(self, name: str) -> bool:
        key = name.lower()
        return key in self._managed and key not in self._relinquished

    def relinquish(self, name: str) -> None:
        self._relinquished.add(name.lower())

    @property
    def relinquished(self) -> list[str]:
        return sorted(self._relinquished)

    def inject(self, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        """Write every header the platform still manages."""
        for key, (name, value) in self._managed.items():
            if key not in self._relinquished:
                headers[name] = value
        return headers


class PlatformHeadersMiddleware(BaseHTTPMiddleware):
    """Outermost layer: applies the platform's headers after the app's."""

    def __init__(self, app, platform: PlatformHeaders):
        super().__init__(app)
        self.platform = platform

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        self.platform.inject(response.headers)
        return response
