"""Rule builders — turn settings sections into HeaderRules.

Learn: One builder per protection, each returning the rules for its
section (usually one, several for no_cache). build_policy() runs them
in a fixed order: the default bundle first, then the opt-in ones, so
the ordering of the final PolicyConfig never depends on env vars.

Disabled sections still produce rules, marked enabled=False, so reports
show the full table and what's switched off.
"""

from collections.abc import Callable
from typing import Optional

import structlog

from headerguard.config import (
    ContentSecurityPolicySettings,
    DnsPrefetchControlSettings,
    FrameguardSettings,
    HidePoweredBySettings,
    HstsSettings,
    IeNoOpenSettings,
    NoCacheSettings,
    NoSniffSettings,
    Settings,
    XssFilterSettings,
)
from headerguard.errors import ConfigurationError
from headerguard.policy import csp
from headerguard.policy.pipeline import PolicyConfig, UpstreamHeaderControl
from headerguard.policy.rules import HeaderRule, RuleAction

logger = structlog.get_logger()


def hide_powered_by(section: HidePoweredBySettings) -> list[HeaderRule]:
    if section.set_to:
        return [HeaderRule("X-Powered-By", RuleAction.SET, section.set_to,
                           enabled=section.enabled, source="hide_powered_by")]
    return [HeaderRule("X-Powered-By", RuleAction.REMOVE,
                       enabled=section.enabled, source="hide_powered_by")]


def frameguard(section: FrameguardSettings) -> list[HeaderRule]:
    action = section.action.strip().lower()
    if action in ("deny", "sameorigin"):
        value = action.upper()
    elif action == "allow-from":
        if not section.domain:
            raise ConfigurationError("frameguard action allow-from requires a domain")
        value = f"ALLOW-FROM {section.domain}"
    else:
        raise ConfigurationError(
            f"frameguard action must be deny, sameorigin or allow-from, got {section.action!r}"
        )
    return [HeaderRule("X-Frame-Options", RuleAction.SET, value,
                       enabled=section.enabled, source="frameguard")]


def xss_filter(section: XssFilterSettings) -> list[HeaderRule]:
    value = "1; mode=block"
    if section.report_uri:
        value += f"; report={section.report_uri}"
    return [HeaderRule("X-XSS-Protection", RuleAction.SET, value,
                       enabled=section.enabled, source="xss_filter")]


def no_sniff(section: NoSniffSettings) -> list[HeaderRule]:
    return [HeaderRule("X-Content-Type-Options", RuleAction.SET, "nosniff",
                       enabled=section.enabled, source="no_sniff")]


def ie_no_open(section: IeNoOpenSettings) -> list[HeaderRule]:
    return [HeaderRule("X-Download-Options", RuleAction.SET, "noopen",
                       enabled=section.enabled, source="ie_no_open")]


def hsts(section: HstsSettings) -> list[HeaderRule]:
    """Strict-Transport-Security.

    With force, our value replaces whatever the platform set (FORCE_SET);
    without it, a platform's own HSTS header is left alone.
    """
    value = f"max-age={section.max_age}"
    if section.include_sub_domains:
        value += "; includeSubDomains"
    if section.preload:
        value += "; preload"

    if section.force:
        return [HeaderRule(
            "Strict-Transport-Security", RuleAction.FORCE_SET, value,
            enabled=section.enabled, source="hsts",
            relinquish_upstream=section.relinquish_upstream,
        )]
    return [HeaderRule("Strict-Transport-Security", RuleAction.SET_IF_ABSENT, value,
                       enabled=section.enabled, source="hsts")]


def dns_prefetch_control(section: DnsPrefetchControlSettings) -> list[HeaderRule]:
    value = "on" if section.allow else "off"
    return [HeaderRule("X-DNS-Prefetch-Control", RuleAction.SET, value,
                       enabled=section.enabled, source="dns_prefetch_control")]


def no_cache(section: NoCacheSettings) -> list[HeaderRule]:
    values = [
        ("Surrogate-Control", "no-store"),
        ("Cache-Control", "no-store, no-cache, must-revalidate, proxy-revalidate"),
        ("Pragma", "no-cache"),
        ("Expires", "0"),
    ]
    rules = [
        HeaderRule(name, RuleAction.SET, value, enabled=section.enabled, source="no_cache")
        for name, value in values
    ]
    if section.no_etag:
        rules.append(HeaderRule("ETag", RuleAction.REMOVE,
                                enabled=section.enabled, source="no_cache"))
    return rules


def content_security_policy(section: ContentSecurityPolicySettings) -> list[HeaderRule]:
    directives = csp.normalize_directives(section.directives)
    name = "Content-Security-Policy"
    if section.report_only:
        name += "-Report-Only"
    return [HeaderRule(name, RuleAction.SET, directives,
                       enabled=section.enabled, source="content_security_policy")]


Builder = Callable[..., list[HeaderRule]]

# Applied unless switched off
DEFAULT_PROTECTIONS: tuple[tuple[str, Builder], ...] = (
    ("hide_powered_by", hide_powered_by),
    ("frameguard", frameguard),
    ("xss_filter", xss_filter),
    ("no_sniff", no_sniff),
    ("ie_no_open", ie_no_open),
    ("hsts", hsts),
    ("dns_prefetch_control", dns_prefetch_control),
)

# Applied only when their section is enabled in settings
OPT_IN_PROTECTIONS: tuple[tuple[str, Builder], ...] = (
    ("no_cache", no_cache),
    ("content_security_policy", content_security_policy),
)


def build_policy(
    settings: Settings,
    upstream: Optional[UpstreamHeaderControl] = None,
) -> PolicyConfig:
    """Build the process-wide PolicyConfig from settings.

    Raises ConfigurationError on anything malformed. When `upstream` is
    given, FORCE_SET rules take their headers over from it before the
    policy is returned.
    """
    rules: list[HeaderRule] = []
    for section_name, builder in DEFAULT_PROTECTIONS + OPT_IN_PROTECTIONS:
        rules.extend(builder(getattr(settings, section_name)))

    gaps: list[str] = []
    csp_section = settings.content_security_policy
    if csp_section.enabled:
        gaps = csp.missing_directives(csp.normalize_directives(csp_section.directives))
        if gaps:
            logger.warning("policy.csp_gap", unrestricted=gaps)

    policy = PolicyConfig(rules=tuple(rules), csp_gaps=tuple(gaps))
    policy.take_over_upstream(upstream)

    logger.info(
        "policy.built",
        rules=len(policy),
        enabled=[rule.source for rule in policy.enabled_rules()],
    )
    return policy
