"""Content-Security-Policy directive handling.

Learn: A CSP header is a list of directives, each a name followed by its
allowed sources, joined with "; ":

    default-src 'self'; script-src 'self' trusted-cdn.com

Directive names are accepted in either camelCase (defaultSrc) or the
header's own kebab-case (default-src). This module only normalises and
renders; it does not check that sources are meaningful.

Directives left out of the policy are unrestricted in the browser.
Fetch directives (script-src, img-src, ...) fall back to default-src,
but document and navigation directives (base-uri, form-action,
frame-ancestors) do not, so missing_directives() reports them.
"""

import re
from collections.abc import Mapping, Sequence

from headerguard.errors import ConfigurationError

# Normalised, ordered form of a policy: ((directive, (source, ...)), ...)
CspDirectives = tuple[tuple[str, tuple[str, ...]], ...]

FETCH_DIRECTIVES = (
    "child-src",
    "connect-src",
    "font-src",
    "frame-src",
    "img-src",
    "manifest-src",
    "media-src",
    "object-src",
    "script-src",
    "style-src",
    "worker-src",
)

NON_FALLBACK_DIRECTIVES = (
    "base-uri",
    "form-action",
    "frame-ancestors",
)

# Directives that take no source list
VALUELESS_DIRECTIVES = frozenset({
    "block-all-mixed-content",
    "upgrade-insecure-requests",
})

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_DIRECTIVE_NAME = re.compile(r"^[a-z][a-z0-9-]*$")


def dasherize(name: str) -> str:
    """defaultSrc -> default-src; already-dashed names pass through."""
    return _CAMEL_BOUNDARY.sub(r"\1-\2", name.strip()).lower()


def normalize_directives(directives: Mapping[str, Sequence[str]]) -> CspDirectives:
    """Validate a directive mapping and freeze it, keeping insertion order."""
    if not directives:
        raise ConfigurationError("content_security_policy needs at least one directive")

    seen: dict[str, tuple[str, ...]] = {}
    for raw_name, sources in directives.items():
        name = dasherize(raw_name)
        if not _DIRECTIVE_NAME.match(name):
            raise ConfigurationError(f"Invalid CSP directive name: {raw_name!r}")
        if name in seen:
            raise ConfigurationError(
                f"CSP directive {name!r} given twice (as {raw_name!r})"
            )
        if isinstance(sources, str):
            # A bare string is almost always a forgotten list
            raise ConfigurationError(
                f"CSP directive {name!r} must be a list of sources, got a string"
            )
        cleaned = tuple(s.strip() for s in sources if s and s.strip())
        if not cleaned and name not in VALUELESS_DIRECTIVES:
            raise ConfigurationError(f"CSP directive {name!r} requires at least one source")
        seen[name] = cleaned
    return tuple(seen.items())


def render(directives: CspDirectives) -> str:
    """Render normalised directives as a header value."""
    parts = []
    for name, sources in directives:
        parts.append(" ".join((name, *sources)))
    return "; ".join(parts)


def missing_directives(directives: CspDirectives) -> list[str]:
    """Directives the policy leaves unrestricted.

    Without default-src every unset fetch directive is open too.
    """
    names = {name for name, _ in directives}
    missing = []
    if "default-src" not in names:
        missing.append("default-src")
        missing.extend(d for d in FETCH_DIRECTIVES if d not in names)
    missing.extend(d for d in NON_FALLBACK_DIRECTIVES if d not in names)
    return missing
