"""CSP directive normalisation and rendering tests."""

import pytest

from headerguard.errors import ConfigurationError
from headerguard.policy import csp


def _parse(header: str) -> dict[str, list[str]]:
    """Split a CSP header into {directive: [sources]} for assertions."""
    parsed = {}
    for part in header.split(";"):
        tokens = part.split()
        if tokens:
            parsed[tokens[0]] = tokens[1:]
    return parsed


@pytest.mark.parametrize("raw, expected", [
    ("defaultSrc", "default-src"),
    ("default-src", "default-src"),
    ("scriptSrc", "script-src"),
    ("frameAncestors", "frame-ancestors"),
    ("upgradeInsecureRequests", "upgrade-insecure-requests"),
])
def test_dasherize(raw, expected):
    assert csp.dasherize(raw) == expected


def test_render_shipped_policy():
    directives = csp.normalize_directives({
        "defaultSrc": ["'self'"],
        "scriptSrc": ["'self'", "trusted-cdn.com"],
    })
    header = csp.render(directives)
    assert header == "default-src 'self'; script-src 'self' trusted-cdn.com"
    assert _parse(header) == {
        "default-src": ["'self'"],
        "script-src": ["'self'", "trusted-cdn.com"],
    }


def test_insertion_order_kept():
    directives = csp.normalize_directives({"scriptSrc": ["'self'"], "defaultSrc": ["'none'"]})
    assert [name for name, _ in directives] == ["script-src", "default-src"]


def test_valueless_directive_renders_bare():
    directives = csp.normalize_directives({
        "defaultSrc": ["'self'"],
        "upgradeInsecureRequests": [],
    })
    assert csp.render(directives) == "default-src 'self'; upgrade-insecure-requests"


def test_same_directive_in_both_spellings_rejected():
    with pytest.raises(ConfigurationError, match="given twice"):
        csp.normalize_directives({"defaultSrc": ["'self'"], "default-src": ["'none'"]})


def test_empty_source_list_rejected():
    with pytest.raises(ConfigurationError, match="at least one source"):
        csp.normalize_directives({"scriptSrc": []})


def test_string_instead_of_list_rejected():
    with pytest.raises(ConfigurationError, match="list of sources"):
        csp.normalize_directives({"scriptSrc": "'self'"})


def test_no_directives_rejected():
    with pytest.raises(ConfigurationError):
        csp.normalize_directives({})


def test_bad_directive_name_rejected():
    with pytest.raises(ConfigurationError, match="Invalid CSP directive"):
        csp.normalize_directives({"script src": ["'self'"]})


def test_missing_directives_with_default_src():
    directives = csp.normalize_directives({
        "defaultSrc": ["'self'"],
        "scriptSrc": ["'self'", "trusted-cdn.com"],
    })
    assert csp.missing_directives(directives) == ["base-uri", "form-action", "frame-ancestors"]


def test_missing_directives_without_default_src_lists_fetch_directives():
    directives = csp.normalize_directives({"scriptSrc": ["'self'"]})
    missing = csp.missing_directives(directives)
    assert missing[0] == "default-src"
    assert "img-src" in missing
    assert "script-src" not in missing


def test_fully_specified_policy_has_no_gaps():
    directives = csp.normalize_directives({
        "defaultSrc": ["'self'"],
        "baseUri": ["'self'"],
        "formAction": ["'self'"],
        "frameAncestors": ["'none'"],
    })
    assert csp.missing_directives(directives) == []
