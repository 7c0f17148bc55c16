"""HTTP header syntax checks.

Learn: Starlette encodes header names and values as latin-1 when the
response starts. A name that isn't an HTTP token, or a value with a
control character or a non-latin-1 character, would blow up there, on
every request. These checks run on configuration at startup instead.
"""

import re

# RFC 7230 token: field-name = token
_TOKEN = re.compile(r"\A[!#$%&'*+\-.^_`|~0-9A-Za-z]+\Z")

# Visible ASCII, space, tab and obs-text (0x80-0xff)
_FIELD_VALUE = re.compile(r"\A[\x20-\x7e\x80-\xff\t]*\Z")


def header_name_error(name: str) -> str | None:
    """Why `name` can't be sent as a header name, or None if it can."""
    if not isinstance(name, str) or not name:
        return "header name is empty"
    if not _TOKEN.match(name):
        return f"header name {name!r} is not a valid HTTP token"
    return None


def header_value_error(value: str) -> str | None:
    """Why `value` can't be sent as a header value, or None if it can."""
    if "\r" in value or "\n" in value:
        return f"header value {value!r} contains a line break"
    if not _FIELD_VALUE.match(value):
        return f"header value {value!r} has control or non-latin-1 characters"
    return None
