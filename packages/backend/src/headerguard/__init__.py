"""headerguard — security response headers for Starlette/FastAPI apps.

An ordered pipeline of header rules (frameguard, HSTS, CSP, ...) applied
to every outgoing response, with explicit precedence when the hosting
platform already manages some of those headers.
"""

__version__ = "0.1.0"
