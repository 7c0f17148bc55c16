"""Error types.

Learn: There is exactly one error kind in headerguard. Anything wrong
with the header policy is detected while the app is being built, so a
misconfigured process refuses to start instead of serving responses
with protections silently missing. Applying a policy to a response
never raises.
"""


class ConfigurationError(Exception):
    """Malformed settings or header rule, raised at startup."""
