"""Header rules — one response-header mutation each.

Learn: A HeaderRule is a value object. It is validated and its header
value rendered once, when the rule is created at startup, so applying it
per request is a plain dict write or delete.

Actions:
- SET:            write the value, replacing any existing one
- FORCE_SET:      same as SET, but the rule may also ask the hosting
                  platform to stop managing the header (see PolicyConfig)
- SET_IF_ABSENT:  write only if the header is missing or empty
- REMOVE:         delete the header if present
"""

import enum
from dataclasses import dataclass, field
from typing import Optional, Union

from headerguard.errors import ConfigurationError
from headerguard.headers import header_name_error, header_value_error
from headerguard.policy import csp


class RuleAction(str, enum.Enum):
    SET = "set"
    REMOVE = "remove"
    SET_IF_ABSENT = "set_if_absent"
    FORCE_SET = "force_set"


RuleValue = Union[str, csp.CspDirectives, None]


@dataclass(frozen=True)
class HeaderRule:
    """A single header policy.

    `value` is either a plain string or structured CSP directives;
    `header_value` holds the rendered string the rule writes.
    """

    name: str
    action: RuleAction
    value: RuleValue = None
    enabled: bool = True

    # Which protection produced this rule (e.g. "hsts"), for logs and reports
    source: str = ""

    # FORCE_SET only: ask the upstream platform to relinquish the header first
    relinquish_upstream: bool = False

    header_value: Optional[str] = field(init=False, default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError(f"Header rule from {self.source or 'config'} has an empty name")
        object.__setattr__(self, "name", self.name.strip())
        problem = header_name_error(self.name)
        if problem:
            raise ConfigurationError(f"Header rule from {self.source or 'config'}: {problem}")

        raw_action = self.action
        if isinstance(raw_action, str) and not isinstance(raw_action, RuleAction):
            raw_action = raw_action.strip().lower()
        try:
            action = RuleAction(raw_action)
        except ValueError:
            valid = ", ".join(a.value for a in RuleAction)
            raise ConfigurationError(
                f"Unknown action {self.action!r} for header {self.name!r} (expected one of: {valid})"
            ) from None
        object.__setattr__(self, "action", action)

        if action is RuleAction.REMOVE:
            return

        if self.value is None:
            raise ConfigurationError(f"Header {self.name!r} needs a value for action {action.value}")
        if isinstance(self.value, tuple):
            rendered = csp.render(self.value)
        else:
            rendered = str(self.value)
        problem = header_value_error(rendered)
        if problem:
            raise ConfigurationError(f"Header {self.name!r}: {problem}")
        object.__setattr__(self, "header_value", rendered)

        if self.relinquish_upstream and action is not RuleAction.FORCE_SET:
            raise ConfigurationError(
                f"Header {self.name!r}: relinquish_upstream only applies to force_set"
            )

    def describe(self) -> dict:
        """Plain-dict view for the API and CLI."""
        return {
            "name": self.name,
            "action": self.action.value,
            "value": self.header_value,
            "enabled": self.enabled,
            "source": self.source,
        }
