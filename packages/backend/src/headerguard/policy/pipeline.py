"""Header policy pipeline — apply an ordered list of rules to a response.

Learn: The pipeline is deliberately dumb. Rules run strictly in order,
each one touching a single header, and never look at each other's
results. The only interaction is last-write-wins when two rules name the
same header.

PolicyConfig is built once at startup and shared read-only across every
request, so there's no locking. The headers object belongs to one
response and is mutated in place.

Overriding the hosting platform (two steps):
1. relinquish — tell the platform to stop managing the header
2. FORCE_SET  — write our value on every response
If step 1 is skipped, a platform that re-asserts its own header on the
way out silently wins. Step 1 only runs when an upstream control object
is supplied, so deployments without such a platform don't need one.
"""

from collections.abc import Iterable, Iterator, MutableMapping
from dataclasses import dataclass
from typing import Optional, Protocol

import structlog
from starlette.datastructures import Headers

from headerguard.errors import ConfigurationError
from headerguard.policy.rules import HeaderRule, RuleAction

logger = structlog.get_logger()


class UpstreamHeaderControl(Protocol):
    """Something in front of the app that manages headers on its own."""

    def manages(self, name: str) -> bool: ...

    def relinquish(self, name: str) -> None: ...


def _matching_keys(headers: MutableMapping[str, str], name: str) -> list[str]:
    """Keys of `headers` that name the same header as `name`."""
    if isinstance(headers, Headers):
        return [name] if name in headers else []
    lowered = name.lower()
    return [key for key in headers if key.lower() == lowered]


def apply(
    rules: Iterable[HeaderRule],
    headers: MutableMapping[str, str],
) -> MutableMapping[str, str]:
    """Apply rules to headers in order and return the same headers object.

    Header names are compared case-insensitively whether `headers` is
    Starlette's MutableHeaders or a plain dict. Never raises for unknown
    header names; a rule that has nothing to do is a no-op.
    """
    for rule in rules:
        if not rule.enabled:
            continue

        existing = _matching_keys(headers, rule.name)

        if rule.action is RuleAction.REMOVE:
            for key in existing:
                del headers[key]
            continue

        if rule.action is RuleAction.SET_IF_ABSENT and any(headers[key] for key in existing):
            continue

        # MutableHeaders replaces every duplicate itself
        if not isinstance(headers, Headers):
            for key in existing:
                del headers[key]
        headers[rule.name] = rule.header_value
    return headers


@dataclass(frozen=True)
class PolicyConfig:
    """Immutable, ordered rule set shared by every request."""

    rules: tuple[HeaderRule, ...]

    # CSP directives the policy leaves unrestricted (known gap, reported only)
    csp_gaps: tuple[str, ...] = ()

    def __post_init__(self):
        rules = tuple(self.rules)
        for rule in rules:
            if not isinstance(rule, HeaderRule):
                raise ConfigurationError(f"Not a HeaderRule: {rule!r}")
        object.__setattr__(self, "rules", rules)
        object.__setattr__(self, "csp_gaps", tuple(self.csp_gaps))

    def __iter__(self) -> Iterator[HeaderRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def apply(self, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        return apply(self.rules, headers)

    def enabled_rules(self) -> list[HeaderRule]:
        return [rule for rule in self.rules if rule.enabled]

    def header_names(self) -> list[str]:
        """Distinct header names the enabled rules write or remove."""
        names: dict[str, str] = {}
        for rule in self.enabled_rules():
            names.setdefault(rule.name.lower(), rule.name)
        return list(names.values())

    def take_over_upstream(self, upstream: Optional[UpstreamHeaderControl]) -> list[str]:
        """Step 1 of the override protocol, run once at startup.

        Asks `upstream` to relinquish every header an enabled FORCE_SET
        rule is allowed to take over. Returns the relinquished names.
        """
        if upstream is None:
            return []

        relinquished = []
        for rule in self.enabled_rules():
            if rule.action is not RuleAction.FORCE_SET or not upstream.manages(rule.name):
                continue
            if rule.relinquish_upstream:
                upstream.relinquish(rule.name)
                relinquished.append(rule.name)
                logger.info("policy.upstream_relinquished", header=rule.name, source=rule.source)
            else:
                logger.warning(
                    "policy.override_defeated",
                    header=rule.name,
                    source=rule.source,
                    reason="upstream still manages this header",
                )
        return relinquished

    def describe(self) -> list[dict]:
        return [rule.describe() for rule in self.rules]
